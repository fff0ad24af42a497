from __future__ import annotations
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Input, Static
from typing import Optional

COLUMNS = ("Sel", "Package", "Req", "Deps", "Excl")

def build(app, pane):
    app.mount_topcard(
        pane,
        "Packages",
        "Required packages stay selected. Dependencies are selected automatically.",
        "Space Toggle · Enter Info · / Filter · s Save · i Sync · u Update",
    )
    pane.mount(Input(placeholder="filter by name or description…", value=app.filter_text, id="pkg_filter"))

    row = Horizontal(id="pkg_row")
    pane.mount(row)

    pkg_tbl = DataTable(id="pkg_tbl")
    info = Static("", id="pkg_info", classes="infobox")
    app.safe_cursor_row(pkg_tbl)
    pkg_tbl.add_columns(*COLUMNS)

    row.mount(Container(pkg_tbl, id="pkg_list"))
    row.mount(info)

    pane.mount(
        Horizontal(
            Button("Save selection (s)", id="btn_save", variant="success"),
            Button("Sync folder (i)", id="btn_sync", variant="primary"),
            Button("Update via git (u)", id="btn_update", variant="warning"),
            classes="toolbar",
        )
    )

    refresh(app)

def refresh(app):
    pkg_tbl = app.query_one("#pkg_tbl", DataTable)
    cursor = pkg_tbl.cursor_row
    pkg_tbl.clear(columns=True)
    pkg_tbl.add_columns(*COLUMNS)

    if app.load_error:
        pkg_tbl.add_row("", "(manifest could not be loaded)", "", "", "")
        _info(app, None)
        return

    for p in app.graph.filter(app.filter_text):
        sel = "✔" if p.selected else ""
        req = "req" if p.required else ""
        deps = ", ".join(p.dependencies)
        excl = ", ".join(p.exclusions)
        pkg_tbl.add_row(sel, p.name, req, deps[:40], excl[:40], key=p.name)

    if pkg_tbl.row_count:
        try:
            pkg_tbl.move_cursor(row=min(max(cursor, 0), pkg_tbl.row_count - 1))
        except Exception:
            pass

def focus_filter(app):
    try:
        app.query_one("#pkg_filter", Input).focus()
    except Exception:
        pass

def _info(app, name: Optional[str]):
    box = app.query_one("#pkg_info", Static)
    if not name or name not in app.graph:
        box.update("[b]Info[/b]\n\nSpace Toggle · Enter Info")
        return
    p = app.graph.get(name)
    closure = sorted(app.graph.build_closure(name) - {name})
    lines = [f"[b]{p.display_name}[/b]" + (" [dim](required)[/dim]" if p.required else "")]
    if p.title and p.title != p.display_name:
        lines.append(f"[dim]title:[/dim] {p.title}")
    if p.description:
        lines.append(f"[dim]description:[/dim] {p.description}")
    if p.dependencies:
        lines.append(f"[dim]depends on:[/dim] {', '.join(p.dependencies)}")
    if closure and closure != sorted(p.dependencies):
        lines.append(f"[dim]pulls in:[/dim] {', '.join(closure)}")
    if p.reverse_dependencies:
        lines.append(f"[dim]used by:[/dim] {', '.join(p.reverse_dependencies)}")
    if p.exclusions:
        lines.append(f"[dim]excludes:[/dim] {', '.join(p.exclusions)}")
    if p.git_url:
        lines.append(f"[dim]git:[/dim] {p.git_url}")
    box.update("\n".join(lines))

def _active_name(app) -> Optional[str]:
    tbl = app.query_one("#pkg_tbl", DataTable)
    if not tbl.row_count:
        return None
    name = str(tbl.get_row_at(tbl.cursor_row)[1])
    return name if name in app.graph else None

def on_row_highlighted(app, event, table_id: str) -> bool:
    if table_id != "pkg_tbl":
        return False
    _info(app, _active_name(app))
    return True

def on_input_changed(app, event) -> bool:
    if getattr(event.input, "id", "") != "pkg_filter":
        return False
    app.filter_text = event.value
    refresh(app)
    return True

async def on_button(app, bid: str) -> bool:
    if bid == "btn_save":
        app.action_save()
        return True
    if bid == "btn_sync":
        await app.action_sync()
        return True
    if bid == "btn_update":
        await app.action_update()
        return True
    return False

def action_toggle(app) -> bool:
    # toggles only if pkg_tbl focused
    try:
        if not app.query_one("#pkg_tbl").has_focus:
            return False
    except Exception:
        return False
    name = _active_name(app)
    if not name:
        return True
    if app.toggle_package(name):
        app.refresh_selection_views()
        _info(app, name)
    return True

def action_info(app) -> bool:
    try:
        if not app.query_one("#pkg_tbl").has_focus:
            return False
    except Exception:
        return False
    _info(app, _active_name(app))
    return True
