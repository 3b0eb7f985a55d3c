# Tests for batch zip archives.

import io
import zipfile

import pytest

from helpers import write_tree
from rootshare.core.exceptions import OperationCancelled
from rootshare.core.result import ErrorKind
from rootshare.services.archive import ArchiveBuilder
from rootshare.services.cancellation import CancellationToken


@pytest.fixture
def builder(config, resolver):
    return ArchiveBuilder(config, resolver)


@pytest.fixture
def tree(root):
    write_tree(root, {
        "fileA.txt": b"A" * 100,
        "dirB/x.txt": b"x",
        "dirB/inner/y.txt": b"y",
        "dirB/empty": None,
    })
    return root


class TestBuild:
    def test_selection_layout(self, builder, tree):
        result = builder.build(["fileA.txt", "dirB"])

        assert result.ok
        handle = result.value
        try:
            with zipfile.ZipFile(handle.path) as zf:
                names = set(zf.namelist())
                assert zf.read("fileA.txt") == b"A" * 100
                assert zf.read("dirB/inner/y.txt") == b"y"
        finally:
            handle.cleanup()

        assert names == {
            "fileA.txt",
            "dirB/",
            "dirB/x.txt",
            "dirB/inner/",
            "dirB/inner/y.txt",
            "dirB/empty/",
        }
        assert handle.entry_count == len(names)

    def test_nested_selection_uses_its_own_name(self, builder, tree):
        handle = builder.build(["dirB/inner"]).value
        try:
            with zipfile.ZipFile(handle.path) as zf:
                assert set(zf.namelist()) == {"inner/", "inner/y.txt"}
        finally:
            handle.cleanup()

    def test_invalid_and_missing_selections_are_skipped(self, builder, tree):
        handle = builder.build(["../escape.txt", "missing.txt", "fileA.txt"]).value
        try:
            with zipfile.ZipFile(handle.path) as zf:
                assert zf.namelist() == ["fileA.txt"]
        finally:
            handle.cleanup()

        assert handle.skipped == ["../escape.txt", "missing.txt"]

    def test_duplicate_selection_is_written_once(self, builder, tree):
        handle = builder.build(["fileA.txt", "fileA.txt"]).value
        try:
            with zipfile.ZipFile(handle.path) as zf:
                assert zf.namelist() == ["fileA.txt"]
        finally:
            handle.cleanup()

    def test_nothing_selected(self, builder, scratch_dir):
        result = builder.build([])

        assert result.kind is ErrorKind.INVALID_PATH
        assert list(scratch_dir.iterdir()) == []

    def test_temp_file_lives_in_scratch_dir(self, builder, tree, scratch_dir):
        handle = builder.build(["fileA.txt"]).value

        assert handle.path.parent == scratch_dir
        assert handle.size > 0
        handle.cleanup()
        handle.cleanup()
        assert list(scratch_dir.iterdir()) == []

    def test_cancellation_removes_temp_file(self, builder, tree, scratch_dir):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            builder.build(["fileA.txt", "dirB"], token=token)

        assert list(scratch_dir.iterdir()) == []

    def test_write_failure_is_reported_and_removes_temp_file(self, builder, tree, scratch_dir, monkeypatch):
        def failing_writestr(self, *args, **kwargs):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(zipfile.ZipFile, "writestr", failing_writestr)

        result = builder.build(["dirB"])

        assert result.kind is ErrorKind.UNEXPECTED
        assert "No space left on device" in result.message
        assert list(scratch_dir.iterdir()) == []


class TestStream:
    @pytest.mark.asyncio
    async def test_stream_yields_zip_and_deletes_temp_file(self, builder, tree, scratch_dir):
        handle = builder.build(["fileA.txt", "dirB"]).value
        expected_size = handle.size

        data = b"".join([chunk async for chunk in handle.stream()])

        assert len(data) == expected_size
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert "dirB/x.txt" in zf.namelist()
        assert not handle.path.exists()
        assert list(scratch_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_abandoned_stream_still_cleans_up(self, builder, tree, config):
        handle = builder.build(["fileA.txt"]).value
        stream = handle.stream()

        await stream.__anext__()
        await stream.aclose()

        assert not handle.path.exists()
