from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .arch import git_clone, git_pull, remove_tree
from .errors import ManifestError
from .history import log_history
from .models import Package
from .store import save_json

logger = logging.getLogger(__name__)

Result = Tuple[str, str, int]  # (action, package, rc)

class ProjectManifest:
    """The host project's ``Packages/manifest.json``."""

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ManifestError(f"cannot read project manifest: {e}", self.path) from e
        if not isinstance(data, dict) or not isinstance(data.get("dependencies"), dict):
            raise ManifestError("no 'dependencies' object", self.path)
        return data

    def dependencies(self) -> Dict[str, str]:
        return dict(self._read()["dependencies"])

    def ref_for(self, package_dir: str) -> str:
        """``file:`` reference to ``package_dir``, relative to this manifest."""
        base = os.path.dirname(os.path.abspath(self.path))
        rel = os.path.relpath(os.path.abspath(package_dir), base)
        return "file:" + rel.replace(os.sep, "/")

    def add(self, name: str, ref: str) -> bool:
        data = self._read()
        if data["dependencies"].get(name) == ref:
            return False
        data["dependencies"][name] = ref
        save_json(self.path, data)
        return True

    def remove(self, name: str) -> bool:
        data = self._read()
        if name not in data["dependencies"]:
            return False
        del data["dependencies"][name]
        save_json(self.path, data)
        return True

@dataclass(frozen=True)
class InstallPlan:
    install: Dict[str, str] = field(default_factory=dict)  # name -> git url
    remove: List[str] = field(default_factory=list)
    keep: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)  # selected, but no git url

    @property
    def empty(self) -> bool:
        return not self.install and not self.remove

    def summary_lines(self) -> List[str]:
        lines = [f"+ {n}  ({u})" for n, u in self.install.items()]
        lines += [f"- {n}" for n in self.remove]
        lines += [f"? {n}  (no git url)" for n in self.skipped]
        return lines

class PackageInstaller:
    def __init__(self, packages_dir: str, project_manifest: Optional[str] = None, history_log: Optional[str] = None):
        self.packages_dir = packages_dir
        self.project = ProjectManifest(project_manifest) if project_manifest else None
        self.history_log = history_log

    def package_dir(self, name: str) -> str:
        return os.path.join(self.packages_dir, name)

    def installed(self) -> List[str]:
        if not os.path.isdir(self.packages_dir):
            return []
        return sorted(
            d for d in os.listdir(self.packages_dir)
            if os.path.isdir(self.package_dir(d)) and not d.startswith(".")
        )

    def plan(self, selected: Iterable[Package]) -> InstallPlan:
        wanted = {p.name: p for p in selected}
        present = self.installed()
        plan = InstallPlan(remove=[d for d in present if d not in wanted])
        for name, p in wanted.items():
            if name in present:
                plan.keep.append(name)
            elif p.git_url:
                plan.install[name] = p.git_url
            else:
                plan.skipped.append(name)
        return plan

    def _record(self, action: str, lines: List[str], rc: int) -> None:
        if self.history_log:
            log_history(self.history_log, action, lines, rc)

    def apply(self, plan: InstallPlan) -> List[Result]:
        """Remove unselected folders, then clone what is missing.

        A failing clone is reported and the remaining work still runs. An
        unusable project manifest raises ``ManifestError`` before any folder
        is touched.
        """
        if self.project and not plan.empty:
            self.project.dependencies()

        results: List[Result] = []
        for name in plan.remove:
            remove_tree(self.package_dir(name))
            if self.project:
                self.project.remove(name)
            logger.info("removed %s", name)
            self._record("remove", [name], 0)
            results.append(("remove", name, 0))

        for name, url in plan.install.items():
            dest = self.package_dir(name)
            rc, out = git_clone(url, dest)
            if rc == 0 and self.project:
                self.project.add(name, self.project.ref_for(dest))
            if rc == 0:
                logger.info("cloned %s from %s", name, url)
            else:
                logger.error("git clone %s failed (rc=%d): %s", url, rc, out.strip())
            self._record("install", [f"git clone {url} {dest}"] + out.splitlines()[-5:], rc)
            results.append(("install", name, rc))
        return results

    def update(self, selected: Iterable[Package]) -> List[Result]:
        present = set(self.installed())
        results: List[Result] = []
        for p in selected:
            if p.name not in present:
                continue
            rc, out = git_pull(self.package_dir(p.name))
            if rc != 0:
                logger.error("git pull in %s failed (rc=%d): %s", p.name, rc, out.strip())
            self._record("update", [f"git pull {p.name}"] + out.splitlines()[-5:], rc)
            results.append(("update", p.name, rc))
        return results
