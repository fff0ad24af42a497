from __future__ import annotations

from typing import Any, Dict, List

from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, Static

from ..history import parse_history

COLUMNS = ("When", "Action", "Result", "Packages")

def _result(rc: int) -> str:
    return "ok" if rc == 0 else f"failed (rc={rc})"

def _packages(e: Dict[str, Any]) -> str:
    # save entries list package names; git entries start with the command
    lines: List[str] = e.get("lines") or []
    if e["action"] == "save":
        return ", ".join(lines) or "(nothing selected)"
    return lines[0] if lines else ""

def build(app, pane):
    app.mount_topcard(pane, "History", "Saved selections and git sync/update runs, newest first", "F5 History")
    row = Horizontal(id="hist_row")
    pane.mount(row)

    tbl = DataTable(id="hist_tbl")
    app.safe_cursor_row(tbl)
    row.mount(Container(tbl, id="hist_left"))
    row.mount(Static("", id="hist_info", classes="infobox", markup=False))

    pane.mount(
        Horizontal(
            Button("Refresh", id="btn_hist_refresh", variant="primary"),
            classes="toolbar",
        )
    )

    refresh(app)

def refresh(app):
    tbl = app.query_one("#hist_tbl", DataTable)
    tbl.clear(columns=True)
    tbl.add_columns(*COLUMNS)
    for e in app.history:
        tbl.add_row(e["ts"], e["action"], _result(e["rc"]), _packages(e)[:120])

def on_row_highlighted(app, event, table_id: str) -> bool:
    if table_id != "hist_tbl":
        return False
    idx = event.data_table.cursor_row
    if 0 <= idx < len(app.history):
        e = app.history[idx]
        head = f"{e['ts']}  {e['action']}  {_result(e['rc'])}"
        app.query_one("#hist_info", Static).update("\n".join([head, ""] + e["lines"]))
    return True

async def on_button(app, bid: str) -> bool:
    if bid != "btn_hist_refresh":
        return False
    app.history = parse_history(app.HISTORY_LOG)
    refresh(app)
    app.set_last(f"History refreshed ({len(app.history)} entries)")
    return True
