from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

@dataclass(frozen=True)
class AssemblyDefinition:
    name: str
    order: int = 0
    loadable_strategies: List[str] = field(default_factory=list)

@dataclass(frozen=True)
class SystemPath:
    name: str
    default_value: str = ""
    title: str = ""
    required: bool = False

@dataclass(frozen=True)
class PackageDef:
    name: str
    required: bool = False
    dependencies: List[str] = field(default_factory=list)
    exclusions: List[str] = field(default_factory=list)
    display_name: str = ""
    title: str = ""
    description: str = ""
    git_url: str = ""
    assets_path: str = ""
    assembly: Optional[AssemblyDefinition] = None

@dataclass
class Package:
    name: str
    required: bool = False
    dependencies: List[str] = field(default_factory=list)
    exclusions: List[str] = field(default_factory=list)
    reverse_dependencies: List[str] = field(default_factory=list)
    selected: bool = False
    display_name: str = ""
    title: str = ""
    description: str = ""
    git_url: str = ""
    assets_path: str = ""
    assembly: Optional[AssemblyDefinition] = None

    @classmethod
    def from_def(cls, d: PackageDef) -> "Package":
        return cls(
            name=d.name,
            required=d.required,
            dependencies=list(d.dependencies),
            exclusions=list(d.exclusions),
            selected=d.required,
            display_name=d.display_name or d.name,
            title=d.title,
            description=d.description,
            git_url=d.git_url,
            assets_path=d.assets_path,
            assembly=d.assembly,
        )

    def snapshot(self) -> "Package":
        return replace(
            self,
            dependencies=list(self.dependencies),
            exclusions=list(self.exclusions),
            reverse_dependencies=list(self.reverse_dependencies),
        )

@dataclass(frozen=True)
class SelectionRecord:
    name: str
    selected: bool

@dataclass(frozen=True)
class Manifest:
    packages: List[PackageDef]
    system_paths: List[SystemPath] = field(default_factory=list)
    environment: Dict[str, str] = field(default_factory=dict)
