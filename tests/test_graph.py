"""Tests for the package selection engine."""
import pytest

from modpicker.errors import (
    ConflictError,
    ConflictKind,
    DependencyError,
    DependencyKind,
    ManifestError,
    NotFoundError,
)
from modpicker.graph import PackageGraph
from modpicker.models import PackageDef, SelectionRecord


def selected(graph):
    return {p.name for p in graph.get_selected()}


# ---------- closure ----------

def test_closure_is_transitive(chain):
    assert chain.build_closure("A") == {"B", "C"}
    assert chain.build_closure("B") == {"C"}
    assert chain.build_closure("C") == set()


def test_closure_terminates_on_cycle():
    graph = PackageGraph([
        PackageDef("A", dependencies=["B"]),
        PackageDef("B", dependencies=["A"]),
    ])
    assert graph.build_closure("A") == {"A", "B"}


def test_closure_handles_self_dependency_and_diamonds():
    graph = PackageGraph([
        PackageDef("Top", dependencies=["Left", "Right"]),
        PackageDef("Left", dependencies=["Base"]),
        PackageDef("Right", dependencies=["Base"]),
        PackageDef("Base", dependencies=["Base"]),
    ])
    assert graph.build_closure("Top") == {"Left", "Right", "Base"}
    assert graph.build_closure("Base") == {"Base"}


def test_closure_unknown_package():
    graph = PackageGraph([PackageDef("A")])
    with pytest.raises(NotFoundError) as exc:
        graph.build_closure("Nope")
    assert exc.value.name == "Nope"
    assert isinstance(exc.value, KeyError)


# ---------- select ----------

def test_select_pulls_in_dependencies(chain):
    chain.try_select("A")
    assert selected(chain) == {"A", "B", "C"}


def test_exclusion_blocks_through_dependency():
    graph = PackageGraph([
        PackageDef("A", dependencies=["B"]),
        PackageDef("B", exclusions=["C"]),
        PackageDef("C"),
    ])
    graph.try_select("C")

    with pytest.raises(ConflictError) as exc:
        graph.try_select("A")

    assert exc.value.kind is ConflictKind.MUTUAL_EXCLUSION
    assert (exc.value.package_a, exc.value.package_b) == ("B", "C")
    assert selected(graph) == {"C"}


def test_exclusion_declared_on_selected_side_only():
    graph = PackageGraph([
        PackageDef("Hotfix", exclusions=["Legacy"]),
        PackageDef("Legacy"),
    ])
    graph.try_select("Hotfix")

    with pytest.raises(ConflictError) as exc:
        graph.try_select("Legacy")

    assert (exc.value.package_a, exc.value.package_b) == ("Legacy", "Hotfix")
    assert selected(graph) == {"Hotfix"}


def test_select_is_all_or_nothing_when_late_closure_member_conflicts():
    graph = PackageGraph([
        PackageDef("App", dependencies=["Net", "Log"]),
        PackageDef("Net"),
        PackageDef("Log", dependencies=["FileLog"]),
        PackageDef("FileLog", exclusions=["CloudLog"]),
        PackageDef("CloudLog"),
    ])
    graph.try_select("CloudLog")

    with pytest.raises(ConflictError):
        graph.try_select("App")

    assert selected(graph) == {"CloudLog"}


def test_package_excluding_its_own_dependency_cannot_be_selected():
    graph = PackageGraph([
        PackageDef("x", dependencies=["y"], exclusions=["y"]),
        PackageDef("y"),
    ])

    with pytest.raises(ConflictError) as exc:
        graph.try_select("x")

    assert (exc.value.package_a, exc.value.package_b) == ("x", "y")
    assert selected(graph) == set()


def test_closure_members_excluding_each_other_are_refused():
    graph = PackageGraph([
        PackageDef("app", dependencies=["a", "b"]),
        PackageDef("a", exclusions=["b"]),
        PackageDef("b"),
    ])

    with pytest.raises(ConflictError) as exc:
        graph.try_select("app")

    assert (exc.value.package_a, exc.value.package_b) == ("a", "b")
    assert selected(graph) == set()
    # each side on its own is still fine
    graph.try_select("a")
    assert selected(graph) == {"a"}


def test_select_already_selected_is_noop(scenario):
    scenario.try_select("Core")
    assert selected(scenario) == {"Core"}


def test_select_unknown_package(scenario):
    with pytest.raises(NotFoundError):
        scenario.try_select("Ghost")


# ---------- deselect ----------

def test_required_cannot_be_deselected(scenario):
    with pytest.raises(DependencyError) as exc:
        scenario.try_deselect("Core")
    assert exc.value.kind is DependencyKind.REQUIRED
    assert exc.value.package == "Core"
    assert "Core" in selected(scenario)


def test_required_cannot_be_deselected_even_if_nothing_uses_it():
    graph = PackageGraph([PackageDef("Solo", required=True)])
    with pytest.raises(DependencyError) as exc:
        graph.try_deselect("Solo")
    assert exc.value.kind is DependencyKind.REQUIRED


def test_dependency_blocks_deselect(chain):
    chain.try_select("A")

    with pytest.raises(DependencyError) as exc:
        chain.try_deselect("B")

    assert exc.value.kind is DependencyKind.DEPENDED_UPON
    assert exc.value.dependent == "A"
    assert selected(chain) == {"A", "B", "C"}


def test_deselect_leaves_dependencies_selected(chain):
    chain.try_select("A")
    chain.try_deselect("A")
    assert selected(chain) == {"B", "C"}

    chain.try_deselect("B")
    assert selected(chain) == {"C"}


def test_deselect_unselected_package_is_allowed(chain):
    chain.try_deselect("D")
    assert selected(chain) == set()


def test_self_dependency_does_not_block_deselect():
    graph = PackageGraph([PackageDef("Loop", dependencies=["Loop"])])
    graph.try_select("Loop")
    graph.try_deselect("Loop")
    assert selected(graph) == set()


def test_toggle_reports_new_state(chain):
    assert chain.toggle("D") is True
    assert chain.is_selected("D")
    assert chain.toggle("D") is False
    assert not chain.is_selected("D")


# ---------- full walkthrough ----------

def test_core_ui_hotfix_legacy_walkthrough(scenario_defs):
    graph = PackageGraph()
    graph.reload(scenario_defs, [])
    assert selected(graph) == {"Core"}

    graph.try_select("UI")
    assert selected(graph) == {"Core", "UI"}

    graph.try_select("Legacy")
    assert selected(graph) == {"Core", "UI", "Legacy"}

    with pytest.raises(ConflictError) as exc:
        graph.try_select("Hotfix")
    assert (exc.value.package_a, exc.value.package_b) == ("Hotfix", "Legacy")
    assert selected(graph) == {"Core", "UI", "Legacy"}

    graph.try_deselect("Legacy")
    assert selected(graph) == {"Core", "UI"}

    graph.try_select("Hotfix")
    assert selected(graph) == {"Core", "UI", "Hotfix"}


# ---------- reload ----------

def test_reload_rejects_dangling_dependency():
    with pytest.raises(ManifestError) as exc:
        PackageGraph([PackageDef("A", dependencies=["Missing"])])
    assert "Missing" in str(exc.value)


def test_reload_rejects_dangling_exclusion():
    with pytest.raises(ManifestError):
        PackageGraph([PackageDef("A", exclusions=["Missing"])])


def test_reload_rejects_duplicate_names():
    with pytest.raises(ManifestError):
        PackageGraph([PackageDef("A"), PackageDef("A")])


def test_failed_reload_keeps_previous_catalog(scenario):
    scenario.try_select("UI")
    with pytest.raises(ManifestError):
        scenario.reload([PackageDef("X", dependencies=["Y"])])
    assert selected(scenario) == {"Core", "UI"}
    assert "X" not in scenario


def test_reload_computes_reverse_dependencies():
    graph = PackageGraph([
        PackageDef("Core"),
        PackageDef("UI", dependencies=["Core"]),
        PackageDef("Net", dependencies=["Core"]),
        PackageDef("Self", dependencies=["Self"]),
    ])
    assert graph.dependents_of("Core") == ["UI", "Net"]
    assert graph.dependents_of("UI") == []
    assert graph.dependents_of("Self") == []


def test_reload_required_pulls_in_its_dependencies():
    graph = PackageGraph([
        PackageDef("Boot", required=True, dependencies=["Log"]),
        PackageDef("Log"),
    ])
    assert selected(graph) == {"Boot", "Log"}


def test_reload_applies_persisted_selection(scenario_defs):
    graph = PackageGraph(scenario_defs, [
        SelectionRecord("Legacy", True),
        SelectionRecord("Core", False),
        SelectionRecord("Removed", True),
    ])
    assert selected(graph) == {"Core", "Legacy"}


def test_reload_repairs_stale_persisted_selection():
    # UI gained a dependency on Theme since the selection was saved
    graph = PackageGraph(
        [
            PackageDef("UI", dependencies=["Theme"]),
            PackageDef("Theme", dependencies=["Fonts"]),
            PackageDef("Fonts"),
        ],
        [SelectionRecord("UI", True), SelectionRecord("Theme", False)],
    )
    assert selected(graph) == {"UI", "Theme", "Fonts"}


def test_reload_does_not_revalidate_exclusions():
    graph = PackageGraph(
        [PackageDef("Hotfix", exclusions=["Legacy"]), PackageDef("Legacy")],
        [SelectionRecord("Hotfix", True), SelectionRecord("Legacy", True)],
    )
    assert selected(graph) == {"Hotfix", "Legacy"}


# ---------- read API ----------

def test_get_selected_returns_snapshots(scenario):
    pkgs = scenario.get_selected()
    pkgs[0].selected = False
    pkgs[0].dependencies.append("UI")
    assert selected(scenario) == {"Core"}
    assert scenario.get("Core").dependencies == []


def test_get_selected_keeps_manifest_order(scenario):
    scenario.try_select("Legacy")
    scenario.try_select("UI")
    assert [p.name for p in scenario.get_selected()] == ["Core", "UI", "Legacy"]


def test_filter_matches_name_display_name_and_description():
    graph = PackageGraph([
        PackageDef("com.fw.ui", display_name="User Interface"),
        PackageDef("com.fw.net", description="Socket transport"),
        PackageDef("com.fw.log"),
    ])
    assert [p.name for p in graph.filter("INTERFACE")] == ["com.fw.ui"]
    assert [p.name for p in graph.filter("socket")] == ["com.fw.net"]
    assert [p.name for p in graph.filter("fw.")] == ["com.fw.ui", "com.fw.net", "com.fw.log"]
    assert len(graph.filter("")) == 3


def test_selection_records_cover_every_package(scenario):
    scenario.try_select("UI")
    assert scenario.selection_records() == [
        SelectionRecord("Core", True),
        SelectionRecord("UI", True),
        SelectionRecord("Hotfix", False),
        SelectionRecord("Legacy", False),
    ]
