from __future__ import annotations
import os
from textual.widgets import Static
from ..arch import which

def _ok(flag: bool) -> str:
    return "OK" if flag else "MISSING"

def build(app, pane):
    app.mount_topcard(pane, "Self-Check", "Tools & paths", "")
    inst = app.installer
    lines = [
        f"git: {_ok(which('git'))}",
        f"manifest: {app.manifest_path} ({_ok(os.path.exists(app.manifest_path))})",
        f"selection store: {app.store.path} ({'present' if os.path.exists(app.store.path) else 'not saved yet'})",
        f"packages dir: {inst.packages_dir} ({len(inst.installed())} installed)",
        f"project manifest: {inst.project.path if inst.project else '-'}",
    ]
    if app.manifest is not None and app.manifest.system_paths:
        lines.append("")
        lines.append("[b]System paths[/b]")
        for sp in app.manifest.system_paths:
            req = " (required)" if sp.required else ""
            lines.append(f"  {sp.name} = {sp.default_value}{req}")
    if app.load_error:
        lines.append("")
        lines.append(f"[b]Manifest error[/b]: {app.load_error}")
    pane.mount(Static("\n".join(lines), classes="infobox"))
