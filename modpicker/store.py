from __future__ import annotations
import json
import logging
import os
import tempfile
from typing import Any, Iterable, List

from .models import SelectionRecord

logger = logging.getLogger(__name__)

def load_json_safe(path: str, default: Any) -> Any:
    try:
        if not os.path.exists(path):
            return default
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
        if not raw.strip():
            return default
        return json.loads(raw)
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable state file %s: %s", path, e)
        return default

def save_json(path: str, obj: Any) -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=d)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise

class SelectionStore:
    """Saved selection between sessions, one record per package name."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> List[SelectionRecord]:
        data = load_json_safe(self.path, {})
        if not isinstance(data, dict):
            return []
        out: List[SelectionRecord] = []
        for it in data.get("selectedPackages", []) or []:
            if not isinstance(it, dict):
                continue
            nm = str(it.get("name", "")).strip()
            if nm:
                out.append(SelectionRecord(nm, bool(it.get("selected", False))))
        return out

    def save(self, records: Iterable[SelectionRecord]) -> None:
        rows = [{"name": r.name, "selected": r.selected} for r in records]
        save_json(self.path, {"selectedPackages": rows})
        logger.debug("saved %d selection records to %s", len(rows), self.path)
