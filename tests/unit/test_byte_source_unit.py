from pathlib import Path

import pytest

from clssaver.archive.manifest import MANIFEST_NAME, Manifest
from clssaver.source.byte_source import (
    ByteSource,
    BytecodeLocator,
    read_manifest,
    read_zip_entry,
)
from clssaver.utils.exceptions import ContainerUnreadableError, EntryNotFoundError


def test_fetch_plain_file_is_byte_identical(tmp_path):
    data = bytes(range(256)) * 4
    path = tmp_path / "A.class"
    path.write_bytes(data)
    assert ByteSource().fetch(path) == data
    assert ByteSource().fetch(str(path)) == data


def test_fetch_entry_from_container(make_zip):
    jar = make_zip("lib.jar", {"a/B.class": b"\xca\xfe\xba\xbe", "a/C.class": b"c"})
    assert ByteSource().fetch(jar, "a/B.class") == b"\xca\xfe\xba\xbe"
    assert read_zip_entry(jar, "a/C.class") == b"c"


def test_fetch_missing_entry(make_zip):
    jar = make_zip("lib.jar", {"a/B.class": b"b"})
    with pytest.raises(EntryNotFoundError):
        ByteSource().fetch(jar, "a/Missing.class")


def test_entry_names_are_exact(make_zip):
    jar = make_zip("lib.jar", {"a/B.class": b"b"})
    with pytest.raises(EntryNotFoundError):
        ByteSource().fetch(jar, "a\\B.class")
    with pytest.raises(EntryNotFoundError):
        ByteSource().fetch(jar, "/a/B.class")


def test_missing_container(tmp_path):
    with pytest.raises(ContainerUnreadableError):
        ByteSource().fetch(tmp_path / "nope.jar", "a/B.class")
    with pytest.raises(ContainerUnreadableError):
        ByteSource().fetch(tmp_path / "nope.class")


def test_not_a_zip(tmp_path):
    path = tmp_path / "fake.jar"
    path.write_bytes(b"this is not a zip file at all")
    with pytest.raises(ContainerUnreadableError):
        ByteSource().fetch(path, "a/B.class")


def test_locator_parse_and_str():
    loc = BytecodeLocator.parse("lib.jar!a/B.class")
    assert loc.container == Path("lib.jar")
    assert loc.entry == "a/B.class"
    assert str(loc) == "lib.jar!a/B.class"

    plain = BytecodeLocator.parse("A.class")
    assert plain.entry is None
    assert str(plain) == "A.class"

    with pytest.raises(ValueError):
        BytecodeLocator.parse("!a/B.class")


def test_load_by_locator(make_zip):
    jar = make_zip("lib.jar", {"x.txt": "x"})
    assert ByteSource().load(BytecodeLocator(jar, "x.txt")) == b"x"
    assert ByteSource().load(BytecodeLocator(jar)) == jar.read_bytes()


def test_read_manifest(make_zip):
    manifest = Manifest({"Manifest-Version": "1.0", "Main-Class": "a.Main"})
    jar = make_zip("app.jar", {MANIFEST_NAME: manifest.to_bytes(), "a/Main.class": b"m"})
    plain = make_zip("plain.zip", {"a/Main.class": b"m"})

    assert read_manifest(jar).main_attributes["Main-Class"] == "a.Main"
    assert read_manifest(plain) is None


def test_read_manifest_malformed(make_zip):
    jar = make_zip("bad.jar", {MANIFEST_NAME: b"no separator here\r\n"})
    with pytest.raises(ContainerUnreadableError):
        read_manifest(jar)


def test_damaged_entry_data(corrupt_zip):
    jar = corrupt_zip("damaged.jar", "a/B.class")
    with pytest.raises(ContainerUnreadableError):
        ByteSource().fetch(jar, "a/B.class")
    with pytest.raises(ContainerUnreadableError):
        read_zip_entry(jar, "a/B.class")
