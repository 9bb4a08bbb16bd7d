import os
from pathlib import Path

import pytest

from clssaver.fs.path_generator import archive_key, destination_parts, resolve_destination
from clssaver.utils.exceptions import PathConflictError


@pytest.mark.parametrize(
    "raw, parts",
    [
        ("", ()),
        (".", ()),
        (None, ()),
        ("pkg", ("pkg",)),
        ("pkg/sub", ("pkg", "sub")),
        ("pkg\\sub", ("pkg", "sub")),
        ("pkg//./sub/", ("pkg", "sub")),
        ("pkg/../other", ("other",)),
    ],
)
def test_destination_parts(raw, parts):
    assert destination_parts(raw) == parts


@pytest.mark.parametrize("raw", ["/abs", "C:\\abs", "C:rel", "\\\\server\\share", "..", "a/../../b", "a\x00b"])
def test_rejected_destinations(raw):
    with pytest.raises(PathConflictError):
        destination_parts(raw)


def test_empty_path_is_root(tmp_path):
    assert resolve_destination(tmp_path, "") == tmp_path
    assert resolve_destination(tmp_path, "a/b") == tmp_path / "a" / "b"


def test_archive_key_normalizes(tmp_path):
    direct = archive_key(tmp_path / "pkg", "lib.jar")
    assert direct == os.path.join(str(tmp_path), "pkg", "lib.jar")
    assert archive_key(tmp_path / "pkg" / "sub" / "..", "lib.jar") == direct
    assert archive_key(tmp_path, "pkg/lib.jar") == direct
    assert archive_key(tmp_path / "pkg", "other.jar") != direct


def test_archive_key_is_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert archive_key(Path("pkg"), "lib.jar") == os.path.join(os.getcwd(), "pkg", "lib.jar")


@pytest.mark.parametrize("name", ["", "a\x00.jar"])
def test_archive_key_rejects_bad_names(tmp_path, name):
    with pytest.raises(PathConflictError):
        archive_key(tmp_path, name)
