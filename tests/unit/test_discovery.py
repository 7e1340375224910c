import os
from pathlib import Path

import pytest

from rulepack.core.discovery import SourceKind, find_rule_files, resolve_source
from rulepack.core.errors import InvalidInputError, IoError

needs_non_root = pytest.mark.skipif(
    hasattr(os, "geteuid") and os.geteuid() == 0,
    reason="permission bits are not enforced for root",
)


def test_finds_yaml_files_recursively_sorted(tmp_path: Path):
    for rel in ["c.yaml", "a.yml", "sub/b.yaml", "sub/deeper/a.yaml", "b.yaml"]:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("rules: []\n", encoding="utf-8")
    (tmp_path / "README.md").write_text("x", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / "rules.YAML").write_text("x", encoding="utf-8")

    found = find_rule_files(tmp_path)
    assert [p.relative_to(tmp_path).as_posix() for p in found] == [
        "a.yml",
        "b.yaml",
        "c.yaml",
        "sub/b.yaml",
        "sub/deeper/a.yaml",
    ]


def test_ignore_files_and_hidden_entries_are_not_honored(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.yml\nhidden/\n", encoding="utf-8")
    (tmp_path / "x.yml").write_text("rules: []\n", encoding="utf-8")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "y.yaml").write_text("rules: []\n", encoding="utf-8")

    found = [p.relative_to(tmp_path).as_posix() for p in find_rule_files(tmp_path)]
    assert found == [".hidden/y.yaml", "x.yml"]


def test_empty_directory_yields_nothing(tmp_path: Path):
    (tmp_path / "empty").mkdir()
    assert find_rule_files(tmp_path) == []


def test_follows_directory_symlinks(tmp_path: Path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "linked.yaml").write_text("rules: []\n", encoding="utf-8")
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(outside, root / "link", target_is_directory=True)

    assert find_rule_files(root) == [root / "link" / "linked.yaml"]


def test_follows_file_symlinks(tmp_path: Path):
    real = tmp_path / "real.yaml"
    real.write_text("rules: []\n", encoding="utf-8")
    root = tmp_path / "root"
    root.mkdir()
    os.symlink(real, root / "alias.yml")
    assert find_rule_files(root) == [root / "alias.yml"]


def test_symlink_loop_is_an_io_error(tmp_path: Path):
    sub = tmp_path / "sub"
    sub.mkdir()
    os.symlink(tmp_path, sub / "back", target_is_directory=True)
    with pytest.raises(IoError) as ei:
        find_rule_files(tmp_path)
    assert ei.value.path == sub / "back"


def test_missing_root_is_io_error(tmp_path: Path):
    with pytest.raises(IoError):
        find_rule_files(tmp_path / "nope")


@needs_non_root
def test_unreadable_subdirectory_aborts_walk(tmp_path: Path):
    (tmp_path / "ok.yaml").write_text("rules: []\n", encoding="utf-8")
    locked = tmp_path / "locked"
    locked.mkdir()
    locked.chmod(0)
    try:
        with pytest.raises(IoError) as ei:
            find_rule_files(tmp_path)
        assert ei.value.path == locked
    finally:
        locked.chmod(0o755)


def test_resolve_source_kinds(tmp_path: Path):
    f = tmp_path / "r.yaml"
    f.write_text("rules: []\n", encoding="utf-8")
    assert resolve_source(f) is SourceKind.FILE
    assert resolve_source(tmp_path) is SourceKind.DIRECTORY
    assert resolve_source(str(f)) is SourceKind.FILE


def test_resolve_source_follows_symlinks(tmp_path: Path):
    f = tmp_path / "r.yaml"
    f.write_text("rules: []\n", encoding="utf-8")
    os.symlink(f, tmp_path / "file-link")
    os.symlink(tmp_path, tmp_path / "dir-link", target_is_directory=True)
    assert resolve_source(tmp_path / "file-link") is SourceKind.FILE
    assert resolve_source(tmp_path / "dir-link") is SourceKind.DIRECTORY


def test_resolve_source_rejects_missing_path(tmp_path: Path):
    missing = tmp_path / "does" / "not" / "exist"
    with pytest.raises(InvalidInputError) as ei:
        resolve_source(missing)
    assert ei.value.path == missing
    assert "neither a file nor a directory" in str(ei.value)
    assert str(missing) in str(ei.value)


def test_resolve_source_rejects_broken_symlink(tmp_path: Path):
    os.symlink(tmp_path / "nowhere", tmp_path / "dangling")
    with pytest.raises(InvalidInputError):
        resolve_source(tmp_path / "dangling")


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs mkfifo")
def test_resolve_source_rejects_fifo(tmp_path: Path):
    fifo = tmp_path / "pipe.yaml"
    os.mkfifo(fifo)
    with pytest.raises(InvalidInputError):
        resolve_source(fifo)


def _deny_scandir(monkeypatch, denied: Path) -> None:
    real_scandir = os.scandir

    def fake_scandir(path):
        if Path(path) == denied:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr("rulepack.core.discovery.os.scandir", fake_scandir)


def test_unlistable_subdirectory_aborts_walk(tmp_path: Path, monkeypatch):
    (tmp_path / "ok.yaml").write_text("rules: []\n", encoding="utf-8")
    denied = tmp_path / "denied"
    denied.mkdir()
    (denied / "inner.yaml").write_text("rules: []\n", encoding="utf-8")
    _deny_scandir(monkeypatch, denied)

    with pytest.raises(IoError) as ei:
        find_rule_files(tmp_path)
    assert ei.value.path == denied
    assert isinstance(ei.value.__cause__, PermissionError)


def test_resolve_source_rejects_overlong_missing_path(tmp_path: Path):
    missing = tmp_path / ("x" * 300)
    with pytest.raises(InvalidInputError) as ei:
        resolve_source(missing)
    assert ei.value.path == missing
    assert "neither a file nor a directory" in str(ei.value)
