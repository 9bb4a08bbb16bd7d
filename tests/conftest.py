import io
import zipfile

import pytest

from clssaver.archive.registry import ArchiveRegistry
from clssaver.fs.file_manager import DirectoryWriter
from clssaver.sink.result_sink import ResultSink
from clssaver.utils.logging import Logger


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    return Logger(level="TRACE", stream=log_stream, color=False)


@pytest.fixture
def out_root(tmp_path):
    root = tmp_path / "out"
    root.mkdir()
    return root


@pytest.fixture
def directories(logger):
    return DirectoryWriter(logger)


@pytest.fixture
def registry(directories, logger):
    reg = ArchiveRegistry(directories, logger)
    yield reg
    reg.close_all()


@pytest.fixture
def sink(out_root, logger):
    s = ResultSink(out_root, logger)
    yield s
    s.close()


@pytest.fixture
def make_zip(tmp_path):
    """Build a zip under tmp_path/src from a {name: content} mapping."""
    src = tmp_path / "src"
    src.mkdir(exist_ok=True)

    def _make(name, entries):
        path = src / name
        with zipfile.ZipFile(path, "w") as zf:
            for entry, content in entries.items():
                zf.writestr(entry, content)
        return path

    return _make


@pytest.fixture
def corrupt_zip(tmp_path):
    """Build a deflated zip whose entry data is damaged right after the local header."""
    src = tmp_path / "src"
    src.mkdir(exist_ok=True)

    def _make(name, entry):
        path = src / name
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(entry, b"A" * 5000)
        with zipfile.ZipFile(path) as zf:
            offset = zf.getinfo(entry).header_offset
        raw = bytearray(path.read_bytes())
        name_len = int.from_bytes(raw[offset + 26:offset + 28], "little")
        extra_len = int.from_bytes(raw[offset + 28:offset + 30], "little")
        data_start = offset + 30 + name_len + extra_len
        raw[data_start:data_start + 8] = b"\xff" * 8
        path.write_bytes(bytes(raw))
        return path

    return _make
