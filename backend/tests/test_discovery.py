"""Tests for workspace file discovery."""

from myide.indexing import collect_files


def touch(path, content="x = 1\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def names(root, files):
    return [f.relative_to(root).as_posix() for f in files]


def test_collects_allowed_extensions_only(tmp_path):
    touch(tmp_path / "main.py")
    touch(tmp_path / "style.css")
    touch(tmp_path / "image.png")
    touch(tmp_path / "README")

    assert names(tmp_path, collect_files(tmp_path)) == ["main.py", "style.css"]


def test_skips_hidden_and_denied_entries(tmp_path):
    touch(tmp_path / ".hidden.py")
    touch(tmp_path / ".git" / "config.py")
    touch(tmp_path / "node_modules" / "lib" / "index.js")
    touch(tmp_path / "__pycache__" / "mod.py")
    touch(tmp_path / "dist" / "bundle.js")
    touch(tmp_path / "package-lock.json", "{}")
    touch(tmp_path / "src" / "app.js")

    assert names(tmp_path, collect_files(tmp_path)) == ["src/app.js"]


def test_order_is_directories_first_then_alphabetical(tmp_path):
    touch(tmp_path / "z.py")
    touch(tmp_path / "a.py")
    touch(tmp_path / "pkg" / "b.py")
    touch(tmp_path / "pkg" / "a.py")
    touch(tmp_path / "lib" / "c.py")

    first = names(tmp_path, collect_files(tmp_path))
    assert first == ["lib/c.py", "pkg/a.py", "pkg/b.py", "a.py", "z.py"]
    assert names(tmp_path, collect_files(tmp_path)) == first


def test_files_over_size_cap_are_excluded(tmp_path):
    touch(tmp_path / "small.py", "x = 1\n")
    touch(tmp_path / "big.py", "x" * (600 * 1024))

    assert names(tmp_path, collect_files(tmp_path, max_file_size_kb=500)) == ["small.py"]


def test_binary_files_are_excluded(tmp_path):
    (tmp_path / "blob.js").write_bytes(b"abc\x00def")
    touch(tmp_path / "ok.js")

    assert names(tmp_path, collect_files(tmp_path)) == ["ok.js"]


def test_depth_bound(tmp_path):
    touch(tmp_path / "top.py")
    touch(tmp_path / "one" / "mid.py")
    touch(tmp_path / "one" / "two" / "deep.py")

    assert names(tmp_path, collect_files(tmp_path, max_depth=1)) == ["one/mid.py", "top.py"]
    assert names(tmp_path, collect_files(tmp_path, max_depth=0)) == ["top.py"]


def test_missing_root_yields_nothing(tmp_path):
    assert collect_files(tmp_path / "missing") == []
