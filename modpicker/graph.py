"""Package selection engine.

``PackageGraph`` owns one catalog of packages and keeps its selection
consistent while the user toggles packages:

- every dependency (transitively) of a selected package is selected,
- required packages never leave the selection,
- two mutually exclusive packages are never selected together.

Operations either succeed completely or raise without touching the catalog.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from .errors import ConflictError, DependencyError, DependencyKind, ManifestError, NotFoundError
from .models import Package, PackageDef, SelectionRecord


class PackageGraph:
    def __init__(self, defs: Optional[Iterable[PackageDef]] = None, persisted: Iterable[SelectionRecord] = ()):
        self._packages: Dict[str, Package] = {}
        if defs is not None:
            self.reload(defs, persisted)

    # ---------- loading ----------
    def reload(self, defs: Iterable[PackageDef], persisted: Iterable[SelectionRecord] = ()) -> None:
        """Rebuild the catalog from package definitions and a saved selection.

        The current catalog is only replaced once the new one is fully built,
        so a manifest error leaves the previous state in place.
        """
        packages: Dict[str, Package] = {}
        for d in defs:
            if d.name in packages:
                raise ManifestError(f"duplicate package '{d.name}'")
            packages[d.name] = Package.from_def(d)

        for p in packages.values():
            for ref in p.dependencies:
                if ref not in packages:
                    raise ManifestError(f"package '{p.name}' depends on unknown package '{ref}'")
            for ref in p.exclusions:
                if ref not in packages:
                    raise ManifestError(f"package '{p.name}' excludes unknown package '{ref}'")

        for p in packages.values():
            for dep in p.dependencies:
                rdeps = packages[dep].reverse_dependencies
                if dep != p.name and p.name not in rdeps:
                    rdeps.append(p.name)

        for rec in persisted:
            p = packages.get(rec.name)
            if p is None or p.required:
                continue
            p.selected = bool(rec.selected)

        self._packages = packages

        # saved state may predate the manifest: pull in whatever is now missing
        for name in [n for n, p in packages.items() if p.selected]:
            for dep in self._walk(name):
                packages[dep].selected = True

    # ---------- queries ----------
    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def names(self) -> List[str]:
        return list(self._packages)

    def _require(self, name: str) -> Package:
        try:
            return self._packages[name]
        except KeyError:
            raise NotFoundError(name) from None

    def get(self, name: str) -> Package:
        return self._require(name).snapshot()

    def packages(self) -> List[Package]:
        return [p.snapshot() for p in self._packages.values()]

    def get_selected(self) -> List[Package]:
        return [p.snapshot() for p in self._packages.values() if p.selected]

    def is_selected(self, name: str) -> bool:
        return self._require(name).selected

    def dependents_of(self, name: str) -> List[str]:
        return list(self._require(name).reverse_dependencies)

    def filter(self, query: str) -> List[Package]:
        q = (query or "").strip().lower()
        if not q:
            return self.packages()
        out: List[Package] = []
        for p in self._packages.values():
            if q in p.name.lower() or q in p.display_name.lower() or q in p.description.lower():
                out.append(p.snapshot())
        return out

    def selection_records(self) -> List[SelectionRecord]:
        return [SelectionRecord(p.name, p.selected) for p in self._packages.values()]

    # ---------- closure ----------
    def _walk(self, name: str) -> List[str]:
        # iterative DFS; `seen` keeps cyclic manifests finite
        start = self._require(name)
        seen: Set[str] = set()
        order: List[str] = []
        stack = list(reversed(start.dependencies))
        while stack:
            cur = stack.pop()
            if cur in seen:
                continue
            seen.add(cur)
            order.append(cur)
            stack.extend(reversed(self._require(cur).dependencies))
        return order

    def build_closure(self, name: str) -> Set[str]:
        """Every package reachable from ``name`` through dependency edges.

        ``name`` itself only shows up when a cycle leads back to it.
        """
        return set(self._walk(name))

    # ---------- toggles ----------
    @staticmethod
    def _excludes(a: Package, b: Package) -> bool:
        return b.name in a.exclusions or a.name in b.exclusions

    def try_select(self, name: str) -> None:
        """Select ``name`` together with its dependency closure.

        Raises ``ConflictError`` if the package or anything it pulls in is
        mutually exclusive with a package that is already selected, or with
        another package the same selection would pull in.
        """
        target = self._require(name)
        closure = self._walk(name)
        candidates = [target] + [self._packages[n] for n in closure if n != name]
        selected = [p for p in self._packages.values() if p.selected]

        for cand in candidates:
            for cur in selected:
                if cur.name != cand.name and self._excludes(cand, cur):
                    raise ConflictError(cand.name, cur.name)

        for i, cand in enumerate(candidates):
            for other in candidates[i + 1:]:
                if self._excludes(cand, other):
                    raise ConflictError(cand.name, other.name)

        for cand in candidates:
            cand.selected = True

    def try_deselect(self, name: str) -> None:
        """Deselect ``name`` only; its own dependencies stay selected.

        Raises ``DependencyError`` for required packages and for packages a
        selected package directly depends on.
        """
        target = self._require(name)
        if target.required:
            raise DependencyError(DependencyKind.REQUIRED, name)
        for p in self._packages.values():
            if p.selected and p.name != name and name in p.dependencies:
                raise DependencyError(DependencyKind.DEPENDED_UPON, name, dependent=p.name)
        target.selected = False

    def toggle(self, name: str) -> bool:
        """Flip ``name`` and return its new state."""
        if self._require(name).selected:
            self.try_deselect(name)
            return False
        self.try_select(name)
        return True
