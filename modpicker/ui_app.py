from __future__ import annotations

import asyncio
import logging
import os
import threading
from typing import Any, Dict, List, Optional

from textual.app import App, ComposeResult
from textual.widgets import Header, Footer, Static, TabbedContent, TabPane, DataTable

from .errors import ConflictError, DependencyError, DependencyKind, ManifestError
from .graph import PackageGraph
from .history import log_history, parse_history
from .installer import InstallPlan, PackageInstaller
from .manifest import load_manifest
from .modals import ConfirmModal, OutputModal
from .models import Manifest
from .store import SelectionStore

from .tabs import (
    packages_tab,
    selected_tab,
    history_tab,
    selfcheck_tab,
    help_tab,
)

APP_NAME = "modpicker"

logger = logging.getLogger(__name__)

def mkdirp(p: str) -> None:
    os.makedirs(p, exist_ok=True)

def describe_refusal(err: Exception) -> str:
    if isinstance(err, ConflictError):
        return f"'{err.package_a}' and '{err.package_b}' are mutually exclusive."
    if isinstance(err, DependencyError):
        if err.kind is DependencyKind.REQUIRED:
            return f"'{err.package}' is required and cannot be deselected."
        return f"Cannot deselect '{err.package}': '{err.dependent}' depends on it."
    return str(err)

class ModPickerApp(App):
    CACHE_DIR = os.path.join(os.path.expanduser("~/.cache/modpicker"))
    HISTORY_LOG = os.path.join(CACHE_DIR, "history.log")
    STORE_FILE = os.path.join(CACHE_DIR, "selection.json")
    PACKAGES_DIR = os.path.join(CACHE_DIR, "framework_repo")

    CSS = """
    Screen { background: $background; }
    Header { background: $panel; }
    Footer { background: $panel; }

    #pkg_row { height: 1fr; }
    #pkg_list { width: 4fr; height: 1fr; }
    #pkg_info { width: 2fr; min-width: 40; height: 1fr; overflow: auto; }
    #sel_row { height: 1fr; }
    #hist_row { height: 1fr; }

    #statusbar { height: auto; border: round $primary; background: $boost; padding: 0 2; margin: 0 1 1 1; }
    #busy { height: 1; color: $warning; padding: 0 2; margin: 0 1 1 1; }

    .topcard { height: auto; border: round $primary; background: $panel; padding: 1 2; margin: 0 1 1 1; }
    .infobox { border: round $primary; background: $boost; padding: 1 2; margin: 0 1 1 1; }
    .toolbar { height: auto; padding: 0 1; margin: 0 1 1 1; }
    .toolbar Button { margin: 0 1 0 0; }

    DataTable { height: 1fr; border: round $surface; background: $panel; margin: 0 1 1 1; }
    Input { border: round $surface; background: $panel; margin: 0 1 1 1; }

    #modal { width: 92%; max-width: 170; padding: 1 2; border: round $primary; background: $panel; }
    .modal_title { text-style: bold; }
    """

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("f1", "go_help", "Help"),
        ("f2", "go_selfcheck", "Self-Check"),
        ("f3", "go_packages", "Packages"),
        ("f4", "go_selected", "Selected"),
        ("f5", "go_history", "History"),
        ("r", "reload", "Reload"),
        ("/", "focus_filter", "Filter"),
        ("space", "toggle", "Toggle"),
        ("enter", "info", "Info"),
        ("s", "save", "Save"),
        ("i", "sync", "Sync (git)"),
        ("u", "update", "Update (git)"),
    ]

    def __init__(
        self,
        manifest_path: str,
        store_path: Optional[str] = None,
        packages_dir: Optional[str] = None,
        project_manifest: Optional[str] = None,
    ):
        super().__init__()
        self.manifest_path = manifest_path
        self.store = SelectionStore(store_path or self.STORE_FILE)
        self.installer = PackageInstaller(
            packages_dir or self.PACKAGES_DIR,
            project_manifest=project_manifest,
            history_log=self.HISTORY_LOG,
        )

        self.graph = PackageGraph()
        self.manifest: Optional[Manifest] = None
        self.load_error = ""
        self.history: List[Dict[str, Any]] = []

        self.filter_text = ""
        self.dirty = False
        self.last_action = "Ready."
        self.busy = ""

        self.load_catalog()

    # ---------- modal helpers ----------
    async def push_result(self, screen) -> Any:
        loop = asyncio.get_running_loop()
        fut: asyncio.Future[Any] = loop.create_future()

        def _cb(result: Any) -> None:
            if not fut.done():
                fut.set_result(result)

        self.push_screen(screen, callback=_cb)
        return await fut

    async def ask_confirm(self, title: str, body: str, confirm_label: str = "OK") -> bool:
        return bool(await self.push_result(ConfirmModal(title, body, confirm_label)))

    def show_output(self, title: str, body: str) -> None:
        self.push_screen(OutputModal(title, body))

    # ---------- catalog ----------
    def load_catalog(self) -> None:
        """(Re)load manifest + saved selection. A broken manifest leaves an empty catalog."""
        try:
            self.manifest = load_manifest(self.manifest_path)
            self.graph.reload(self.manifest.packages, self.store.load())
            self.load_error = ""
        except ManifestError as e:
            logger.error("%s", e)
            self.manifest = None
            self.graph.reload([])
            self.load_error = str(e)
        self.dirty = False

    def toggle_package(self, name: str) -> bool:
        """Toggle through the engine; refusals are shown, not raised."""
        try:
            now = self.graph.toggle(name)
        except (ConflictError, DependencyError) as e:
            title = "Mutual exclusion" if isinstance(e, ConflictError) else "Dependency conflict"
            self.show_output(title, describe_refusal(e))
            self.set_last(f"Refused: {name}")
            return False
        self.dirty = True
        self.set_last(f"{'Selected' if now else 'Deselected'} {name}")
        return True

    def save_selection(self) -> None:
        self.store.save(self.graph.selection_records())
        names = [p.name for p in self.graph.get_selected()]
        log_history(self.HISTORY_LOG, "save", names, 0)
        self.dirty = False

    def refresh_all(self) -> None:
        self.history = parse_history(self.HISTORY_LOG)

    def set_busy(self, msg: str) -> None:
        self.busy = msg
        try:
            self.query_one("#busy", Static).update(msg)
        except Exception:
            pass

    def set_last(self, msg: str) -> None:
        self.last_action = msg
        self.update_status()

    def update_status(self) -> None:
        if self.load_error:
            s = f"[b]Manifest error[/b]: {self.load_error}"
        else:
            s = (
                f"Manifest: {os.path.basename(self.manifest_path)}   "
                f"Packages: {len(self.graph)}   "
                f"Selected: {len(self.graph.get_selected())}   "
                f"Unsaved: {'yes' if self.dirty else 'no'}   "
                f"Last: {self.last_action}"
            )
        try:
            self.query_one("#statusbar", Static).update(s)
        except Exception:
            pass

    def mount_topcard(self, pane: TabPane, title: str, subtitle: str = "", keys: str = "") -> None:
        lines = [f"[b]{title}[/b]"]
        if subtitle:
            lines.append(f"[dim]{subtitle}[/dim]")
        if keys:
            lines.append(f"[dim]{keys}[/dim]")
        pane.mount(Static("\n".join(lines), classes="topcard"))

    @staticmethod
    def safe_cursor_row(tbl: DataTable) -> None:
        try:
            tbl.cursor_type = "row"  # type: ignore[attr-defined]
        except Exception:
            pass

    # ---------- app layout ----------
    def compose(self) -> ComposeResult:
        yield Header(show_clock=True, name="ModPicker")
        yield Static("", id="statusbar")
        yield Static("", id="busy")
        with TabbedContent(id="tabs"):
            yield TabPane("Packages", id="tab_packages")
            yield TabPane("Selected", id="tab_selected")
            yield TabPane("History", id="tab_history")
            yield TabPane("Self-Check", id="tab_selfcheck")
            yield TabPane("Help", id="tab_help")
        yield Footer()

    def on_mount(self) -> None:
        mkdirp(self.CACHE_DIR)

        self.refresh_all()
        self.build_all()

        tabs = self.query_one("#tabs", TabbedContent)
        tabs.active = "tab_packages"
        self.update_status()

    def clear_pane(self, pane_id: str) -> TabPane:
        pane = self.query_one(f"#{pane_id}", TabPane)
        pane.remove_children()
        return pane

    def build_all(self) -> None:
        packages_tab.build(self, self.clear_pane("tab_packages"))
        selected_tab.build(self, self.clear_pane("tab_selected"))
        history_tab.build(self, self.clear_pane("tab_history"))
        selfcheck_tab.build(self, self.clear_pane("tab_selfcheck"))
        help_tab.build(self, self.clear_pane("tab_help"))

    def refresh_selection_views(self) -> None:
        packages_tab.refresh(self)
        selected_tab.refresh(self)
        self.update_status()

    # ---------- navigation actions ----------
    def _go(self, tab_id: str) -> None:
        self.query_one("#tabs", TabbedContent).active = tab_id

    def action_go_help(self) -> None: self._go("tab_help")
    def action_go_selfcheck(self) -> None: self._go("tab_selfcheck")
    def action_go_packages(self) -> None: self._go("tab_packages")
    def action_go_selected(self) -> None: self._go("tab_selected")
    def action_go_history(self) -> None: self._go("tab_history")

    def action_focus_filter(self) -> None:
        self._go("tab_packages")
        packages_tab.focus_filter(self)

    async def action_reload(self) -> None:
        if self.dirty and not await self.ask_confirm("Reload", "Discard unsaved selection changes?", "Discard"):
            return
        self.load_catalog()
        self.refresh_all()
        self.build_all()
        self.set_last("Reloaded.")

    # ---------- global dispatch ----------
    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        table_id = getattr(event.data_table, "id", "")
        if packages_tab.on_row_highlighted(self, event, table_id): return
        if selected_tab.on_row_highlighted(self, event, table_id): return
        if history_tab.on_row_highlighted(self, event, table_id): return

    def on_input_changed(self, event) -> None:
        packages_tab.on_input_changed(self, event)

    async def on_button_pressed(self, event) -> None:
        bid = event.button.id
        if await packages_tab.on_button(self, bid): return
        if await selected_tab.on_button(self, bid): return
        if await history_tab.on_button(self, bid): return

    # ---------- key actions ----------
    def action_toggle(self) -> None:
        if packages_tab.action_toggle(self): return
        if selected_tab.action_toggle(self): return

    def action_info(self) -> None:
        packages_tab.action_info(self)

    def action_save(self) -> None:
        self.save_selection()
        self.set_last(f"Saved selection ({len(self.graph.get_selected())} packages)")

    # ---------- git sync ----------
    def _sync_worker(self, plan: InstallPlan) -> None:
        self.call_from_thread(self.set_busy, "Syncing packages …")
        try:
            results = self.installer.apply(plan)
        except ManifestError as e:
            logger.error("sync aborted: %s", e)
            self.call_from_thread(self.show_output, "Sync aborted", str(e))
            self.call_from_thread(self.set_last, "Sync aborted")
            return
        finally:
            self.call_from_thread(self.set_busy, "")
        failed = [f"{a} {n}: rc={rc}" for a, n, rc in results if rc != 0]
        body = "\n".join(plan.summary_lines()) or "Nothing to do."
        if failed:
            body += "\n\nFailed:\n" + "\n".join(failed)
        self.call_from_thread(self.show_output, "Sync", body)
        self.call_from_thread(self.set_last, f"Sync done ({len(failed)} failed)")

    async def action_sync(self) -> None:
        plan = self.installer.plan(self.graph.get_selected())
        if plan.empty:
            self.save_selection()
            self.set_last("Selection saved, folder already in sync")
            return
        ok = await self.ask_confirm("Sync packages", "\n".join(plan.summary_lines()), "Sync")
        if not ok:
            return
        self.save_selection()
        threading.Thread(target=self._sync_worker, args=(plan,), daemon=True).start()

    def _update_worker(self) -> None:
        self.call_from_thread(self.set_busy, "git pull …")
        results = self.installer.update(self.graph.get_selected())
        self.call_from_thread(self.set_busy, "")
        body = "\n".join(f"{n}: rc={rc}" for _, n, rc in results) or "No installed packages selected."
        self.call_from_thread(self.show_output, "Update", body)
        self.call_from_thread(self.set_last, "Update done")

    async def action_update(self) -> None:
        ok = await self.ask_confirm("Update packages", "Pull the latest version of every selected package from Git?", "Pull")
        if not ok:
            return
        self.save_selection()
        threading.Thread(target=self._update_worker, daemon=True).start()
