import zipfile
from pathlib import Path

import pytest

from deploy_action.archiver import archive_name_for, create_archive
from deploy_action.errors import ArchiveError


def _make_tree(root) -> None:
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_text("<html></html>")
    (root / ".well-known").mkdir()
    (root / ".well-known" / "security.txt").write_text("contact")
    (root / "assets" / "app.js").write_text("console.log(1)")


def test_archive_contains_directory_contents_at_root(tmp_path) -> None:
    dist = tmp_path / "dist"
    _make_tree(dist)

    archive = create_archive(dist, archive_name_for("abc123"), tmp_path)

    assert archive == tmp_path / "abc123.zip"
    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        top_level = {n.split("/", 1)[0] for n in names}
        assert top_level == {"index.html", "assets", ".well-known"}
        assert "assets/app.js" in names
        assert not any(n.startswith("dist/") for n in names)
        assert zf.read("index.html") == b"<html></html>"


def test_missing_directory_raises_archive_error(tmp_path) -> None:
    with pytest.raises(ArchiveError) as excinfo:
        create_archive(tmp_path / "nope", "abc.zip", tmp_path)

    assert "nope" in str(excinfo.value)
    assert not (tmp_path / "abc.zip").exists()


def test_file_instead_of_directory_raises_archive_error(tmp_path) -> None:
    target = tmp_path / "dist"
    target.write_text("not a dir")

    with pytest.raises(ArchiveError):
        create_archive(target, "abc.zip", tmp_path)


def test_archive_written_inside_source_is_not_included(tmp_path) -> None:
    (tmp_path / "index.html").write_text("x")

    archive = create_archive(tmp_path, "abc.zip", tmp_path)

    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["index.html"]


def test_empty_directory_produces_empty_archive(tmp_path) -> None:
    dist = tmp_path / "dist"
    dist.mkdir()

    archive = create_archive(dist, "empty.zip", tmp_path)

    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == []


def test_symlinked_directory_contents_are_archived(tmp_path) -> None:
    shared = tmp_path / "shared"
    shared.mkdir()
    (shared / "lib.js").write_text("export {}")
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("x")
    (dist / "vendor").symlink_to(Path("..") / "shared", target_is_directory=True)
    (dist / "vendor-copy").symlink_to(shared, target_is_directory=True)

    archive = create_archive(dist, "abc.zip", tmp_path)

    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        assert "vendor/lib.js" in names
        assert "vendor-copy/lib.js" in names
        assert zf.read("vendor/lib.js") == b"export {}"


def test_symlink_cycle_is_skipped(tmp_path) -> None:
    dist = tmp_path / "dist"
    (dist / "assets").mkdir(parents=True)
    (dist / "assets" / "app.js").write_text("1")
    (dist / "assets" / "loop").symlink_to(dist, target_is_directory=True)

    archive = create_archive(dist, "abc.zip", tmp_path)

    with zipfile.ZipFile(archive) as zf:
        names = zf.namelist()
        assert "assets/app.js" in names
        assert not any(n.startswith("assets/loop") for n in names)
