from __future__ import annotations
from textual.widgets import Markdown

def build(app, pane):
    app.mount_topcard(pane, "Help", "Keys & Workflow", "")
    pane.mount(Markdown(
        "## Keys\n"
        "- `F1..F5` Tabs\n"
        "- `/` Filter\n"
        "- `Space` Toggle package\n"
        "- `Enter` Info\n"
        "- `s` Save selection\n"
        "- `i` Sync package folder (git clone / remove)\n"
        "- `u` Update installed packages (git pull)\n"
        "- `r` Reload manifest\n"
        "\n"
        "## Rules\n"
        "- Required packages cannot be deselected.\n"
        "- Selecting a package selects everything it depends on.\n"
        "- A package cannot be deselected while a selected package depends on it.\n"
        "- Mutually exclusive packages cannot be selected together.\n"
    , classes="infobox"))
