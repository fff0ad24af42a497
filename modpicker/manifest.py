from __future__ import annotations
import json
import logging
import os
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from .errors import ManifestError
from .models import AssemblyDefinition, Manifest, PackageDef, SystemPath

logger = logging.getLogger(__name__)

def _is_true(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    return str(v or "").strip().lower() == "true"

def _refs(node: Optional[ET.Element]) -> List[str]:
    if node is None:
        return []
    out: List[str] = []
    for ref in node.findall("reference-package"):
        nm = (ref.text or "").strip()
        if nm:
            out.append(nm)
    return out

def _text(node: Optional[ET.Element]) -> str:
    return (node.text or "").strip() if node is not None else ""

def _parse_xml_doc(text: str, path: str) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as e:
        raise ManifestError(f"invalid XML: {e}", path) from e

def _order(v: Any) -> int:
    try:
        return int(v or 0)
    except (TypeError, ValueError):
        return 0

def _xml_assembly(node: Optional[ET.Element]) -> Optional[AssemblyDefinition]:
    if node is None:
        return None
    strategies = [_text(s) for s in node.findall("loadable-strategy")]
    return AssemblyDefinition(
        name=node.get("name", ""),
        order=_order(node.get("order")),
        loadable_strategies=[s for s in strategies if s],
    )

def _xml_package(node: ET.Element, path: str) -> PackageDef:
    name = (node.get("name") or "").strip()
    if not name:
        raise ManifestError("<package> without a name", path)
    title = node.get("title", "")
    desc_node = node.find("description")
    repo = node.find("git-repository")
    return PackageDef(
        name=name,
        required=_is_true(node.get("required")),
        dependencies=_refs(node.find("dependencies")),
        exclusions=_refs(node.find("repulsions")),
        display_name=node.get("displayName", ""),
        title=title,
        description=(desc_node.text or "") if desc_node is not None else title,
        git_url=repo.get("url", "") if repo is not None else "",
        assets_path=_text(node.find("assets-path")),
        assembly=_xml_assembly(node.find("assembly-definition")),
    )

def parse_xml_manifest(text: str, path: str = "<string>") -> Manifest:
    root = _parse_xml_doc(text, path)

    env: Dict[str, str] = {}
    for ev in root.iter("environment-variable"):
        nm = ev.get("name")
        if nm and ev.get("value") is not None:
            env[nm] = ev.get("value", "")

    system_paths: List[SystemPath] = []
    for sp in root.iter("system-path"):
        for lp in sp.findall("local-path"):
            nm = lp.get("name", "")
            if not nm:
                continue
            system_paths.append(
                SystemPath(
                    name=nm,
                    default_value=lp.get("defaultValue", ""),
                    title=lp.get("title", ""),
                    required=_is_true(lp.get("required", "false")),
                )
            )

    if env:
        for k, v in env.items():
            text = text.replace(f"%{k}%", v)
        root = _parse_xml_doc(text, path)

    packages = [_xml_package(n, path) for n in root.iter("package")]
    return Manifest(packages=packages, system_paths=system_paths, environment=env)

def _json_list(v: Any) -> List[str]:
    out: List[str] = []
    for it in v or []:
        nm = str(it).strip()
        if nm:
            out.append(nm)
    return out

def parse_json_manifest(cfg: Any, path: str = "<string>") -> Manifest:
    if not isinstance(cfg, dict):
        raise ManifestError("manifest root must be an object", path)

    packages: List[PackageDef] = []
    for it in cfg.get("packages", []) or []:
        if isinstance(it, str):
            it = {"name": it}
        if not isinstance(it, dict):
            raise ManifestError(f"invalid package entry: {it!r}", path)
        nm = str(it.get("name", "")).strip()
        if not nm:
            raise ManifestError("package without a name", path)
        asm = it.get("assembly")
        packages.append(
            PackageDef(
                name=nm,
                required=_is_true(it.get("required", False)),
                dependencies=_json_list(it.get("dependencies")),
                exclusions=_json_list(it.get("exclusions")),
                display_name=str(it.get("displayName", "")).strip(),
                title=str(it.get("title", "")).strip(),
                description=str(it.get("description", it.get("title", ""))).strip(),
                git_url=str(it.get("gitUrl", "")).strip(),
                assets_path=str(it.get("assetsPath", "")).strip(),
                assembly=AssemblyDefinition(
                    name=str(asm.get("name", "")),
                    order=_order(asm.get("order")),
                    loadable_strategies=_json_list(asm.get("loadableStrategies")),
                ) if isinstance(asm, dict) else None,
            )
        )

    system_paths = [
        SystemPath(
            name=str(sp.get("name", "")),
            default_value=str(sp.get("defaultValue", "")),
            title=str(sp.get("title", "")),
            required=_is_true(sp.get("required", False)),
        )
        for sp in cfg.get("systemPaths", []) or []
        if isinstance(sp, dict) and sp.get("name")
    ]
    return Manifest(packages=packages, system_paths=system_paths)

def load_manifest(path: str) -> Manifest:
    """Read an XML or JSON package manifest from disk."""
    if not os.path.exists(path):
        raise ManifestError("manifest not found", path)
    with open(path, "r", encoding="utf-8") as f:
        raw = f.read()

    if path.lower().endswith(".xml"):
        m = parse_xml_manifest(raw, path)
    else:
        try:
            cfg = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ManifestError(f"invalid JSON: {e}", path) from e
        m = parse_json_manifest(cfg, path)

    logger.debug("loaded %d packages from %s", len(m.packages), path)
    return m
