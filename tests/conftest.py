import pytest

from modpicker.graph import PackageGraph
from modpicker.models import PackageDef


@pytest.fixture
def scenario_defs():
    """Core(required), UI -> Core, Hotfix x Legacy, Legacy."""
    return [
        PackageDef("Core", required=True),
        PackageDef("UI", dependencies=["Core"]),
        PackageDef("Hotfix", exclusions=["Legacy"]),
        PackageDef("Legacy"),
    ]


@pytest.fixture
def scenario(scenario_defs):
    return PackageGraph(scenario_defs)


@pytest.fixture
def chain():
    """A -> B -> C, plus an unrelated D."""
    return PackageGraph([
        PackageDef("A", dependencies=["B"]),
        PackageDef("B", dependencies=["C"]),
        PackageDef("C"),
        PackageDef("D"),
    ])