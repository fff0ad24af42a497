from __future__ import annotations
import os
import shutil
import stat
import subprocess
import sys
from typing import List, Optional, Tuple

def which(cmd: str) -> bool:
    return shutil.which(cmd) is not None

def run_capture(cmd: List[str], cwd: Optional[str] = None) -> Tuple[int, str]:
    try:
        p = subprocess.run(cmd, cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True)
        return p.returncode, p.stdout
    except FileNotFoundError:
        return 127, f"Command not found: {cmd[0]}"

def git_clone(url: str, dest: str) -> Tuple[int, str]:
    os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
    return run_capture(["git", "clone", url, dest])

def git_pull(repo_dir: str) -> Tuple[int, str]:
    return run_capture(["git", "-C", repo_dir, "pull", "--ff-only"])

def _clear_readonly(func, path, _exc) -> None:
    # git marks pack files read-only
    os.chmod(path, stat.S_IWRITE)
    func(path)

def remove_tree(path: str) -> None:
    if not os.path.isdir(path):
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_clear_readonly)
    else:
        shutil.rmtree(path, onerror=_clear_readonly)
