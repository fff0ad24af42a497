from __future__ import annotations

from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Static

def build(app, pane):
    app.mount_topcard(pane, "Selected", "Packages that will be installed on the next sync", "Space Remove · s Save")
    row = Horizontal(id="sel_row")
    pane.mount(row)

    tbl = DataTable(id="sel_tbl")
    app.safe_cursor_row(tbl)
    tbl.add_columns("Package", "Name", "Req", "Installed")

    row.mount(Container(tbl, id="sel_left"))
    row.mount(Static("", id="sel_info", classes="infobox"))

    pane.mount(
        Horizontal(
            Button("Remove from selection", id="btn_sel_remove", variant="warning"),
            classes="toolbar",
        )
    )
    refresh(app)

def refresh(app):
    tbl = app.query_one("#sel_tbl", DataTable)
    tbl.clear(columns=True)
    tbl.add_columns("Package", "Name", "Req", "Installed")
    installed = set(app.installer.installed())
    for p in app.graph.get_selected():
        tbl.add_row(
            p.display_name,
            p.name,
            "req" if p.required else "",
            "✔" if p.name in installed else "",
            key=p.name,
        )

def _current(app) -> str:
    tbl = app.query_one("#sel_tbl", DataTable)
    if not tbl.row_count:
        return ""
    return str(tbl.get_row_at(tbl.cursor_row)[1])

def _remove_current(app) -> None:
    name = _current(app)
    if name and app.toggle_package(name):
        app.refresh_selection_views()

def on_row_highlighted(app, event, table_id: str) -> bool:
    if table_id != "sel_tbl":
        return False
    name = _current(app)
    if not name:
        return True
    deps = app.graph.dependents_of(name)
    body = f"[b]{name}[/b]\n" + (f"used by: {', '.join(deps)}" if deps else "not used by other packages")
    app.query_one("#sel_info", Static).update(body)
    return True

def action_toggle(app) -> bool:
    try:
        if not app.query_one("#sel_tbl").has_focus:
            return False
    except Exception:
        return False
    _remove_current(app)
    return True

async def on_button(app, bid: str) -> bool:
    if bid == "btn_sel_remove":
        _remove_current(app)
        return True
    return False
