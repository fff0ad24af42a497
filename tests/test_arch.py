"""Tests for the filesystem helpers used by sync."""
import os
import stat

from modpicker.arch import remove_tree


def test_remove_tree_handles_read_only_files(tmp_path):
    pack = tmp_path / "core" / ".git" / "objects" / "pack"
    pack.mkdir(parents=True)
    f = pack / "pack-1.idx"
    f.write_text("x", encoding="utf-8")
    os.chmod(f, stat.S_IREAD)

    remove_tree(str(tmp_path / "core"))

    assert not (tmp_path / "core").exists()


def test_remove_tree_missing_path_is_noop(tmp_path):
    remove_tree(str(tmp_path / "nope"))
    assert list(tmp_path.iterdir()) == []
