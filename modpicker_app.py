#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
from modpicker.ui_app import ModPickerApp

def main() -> None:
    ap = argparse.ArgumentParser(description="Pick framework packages and keep the selection consistent.")
    ap.add_argument("--manifest", default=os.environ.get("MODPICKER_MANIFEST", "repo_manifest.xml"))
    ap.add_argument("--store", default=None, help="selection file (default: ~/.cache/modpicker/selection.json)")
    ap.add_argument("--packages-dir", default=None, help="where selected packages are cloned")
    ap.add_argument("--project-manifest", default=None, help="host Packages/manifest.json to register packages in")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    # the TUI owns the terminal, so log to a file
    os.makedirs(ModPickerApp.CACHE_DIR, exist_ok=True)
    logging.basicConfig(
        filename=os.path.join(ModPickerApp.CACHE_DIR, "modpicker.log"),
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ModPickerApp(
        manifest_path=args.manifest,
        store_path=args.store,
        packages_dir=args.packages_dir,
        project_manifest=args.project_manifest,
    ).run()

if __name__ == "__main__":
    main()
