from __future__ import annotations
from enum import Enum
from typing import Optional

class ConflictKind(str, Enum):
    MUTUAL_EXCLUSION = "mutual_exclusion"

class DependencyKind(str, Enum):
    REQUIRED = "required"
    DEPENDED_UPON = "depended_upon"

class ModPickerError(Exception):
    """Base class for everything modpicker raises on purpose."""

class NotFoundError(ModPickerError, KeyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown package: {self.name}"

class ConflictError(ModPickerError):
    def __init__(self, package_a: str, package_b: str, kind: ConflictKind = ConflictKind.MUTUAL_EXCLUSION):
        super().__init__(f"{package_a} and {package_b} are mutually exclusive")
        self.kind = kind
        self.package_a = package_a
        self.package_b = package_b

class DependencyError(ModPickerError):
    def __init__(self, kind: DependencyKind, package: str, dependent: Optional[str] = None):
        if kind is DependencyKind.REQUIRED:
            msg = f"{package} is required and cannot be deselected"
        else:
            msg = f"cannot deselect {package}: {dependent} depends on it"
        super().__init__(msg)
        self.kind = kind
        self.package = package
        self.dependent = dependent

class ManifestError(ModPickerError):
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
