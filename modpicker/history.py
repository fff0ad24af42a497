from __future__ import annotations
import os, time, re
from typing import Any, Dict, List

_HEAD = re.compile(r"^\[(.*?)\]\s+([\w-]+)\s+rc=(-?\d+)")

def log_history(path: str, action: str, lines: List[str], rc: int = 0) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    ts = time.strftime("%Y-%m-%d %H:%M:%S")
    with open(path, "a", encoding="utf-8") as f:
        f.write(f"[{ts}] {action} rc={rc}\n")
        for l in lines:
            f.write("  " + l + "\n")
        f.write("\n")

def parse_history(path: str, max_entries: int = 500) -> List[Dict[str, Any]]:
    """Newest first."""
    if not os.path.exists(path):
        return []
    with open(path, "r", encoding="utf-8") as f:
        txt = f.read()
    blocks = [b.strip() for b in txt.split("\n\n") if b.strip()]
    entries: List[Dict[str, Any]] = []
    for b in blocks[-max_entries:]:
        head, *rest = b.splitlines()
        m = _HEAD.match(head.strip())
        if not m:
            continue
        entries.append({
            "ts": m.group(1),
            "action": m.group(2),
            "rc": int(m.group(3)),
            "lines": [ln.strip() for ln in rest if ln.strip()],
        })
    entries.reverse()
    return entries
