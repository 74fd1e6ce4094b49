"""Tests for resource sink implementations."""

from pathlib import Path

import pytest

from language_registration.errors import ResourceAlreadyCreatedError, ResourceWriteError
from language_registration.protocols import ResourceSink
from language_registration.sinks import FilesystemResourceSink, InMemoryResourceSink

RESOURCE = "META-INF/truffle/language"


class TestInMemoryResourceSink:
    """Tests for InMemoryResourceSink."""

    def test_content_is_published_on_close(self, make_candidate) -> None:
        sink = InMemoryResourceSink()
        candidate = make_candidate()

        with sink.create_resource(RESOURCE, [candidate]) as stream:
            stream.write(b"k=v\n")
            assert RESOURCE not in sink.resources

        assert sink.resources[RESOURCE] == b"k=v\n"
        assert sink.originating[RESOURCE] == (candidate,)
        assert sink.read_text(RESOURCE) == "k=v\n"

    def test_second_create_raises_conflict(self) -> None:
        sink = InMemoryResourceSink()
        with sink.create_resource(RESOURCE, []):
            pass

        with pytest.raises(ResourceAlreadyCreatedError):
            with sink.create_resource(RESOURCE, []):
                pass

    def test_failed_write_publishes_nothing(self) -> None:
        sink = InMemoryResourceSink()

        with pytest.raises(OSError):
            with sink.create_resource(RESOURCE, []) as stream:
                stream.write(b"partial")
                raise OSError("interrupted")

        assert sink.resources == {}

    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryResourceSink(), ResourceSink)


class TestFilesystemResourceSink:
    """Tests for FilesystemResourceSink."""

    def test_writes_file_below_output_dir(self, tmp_path: Path) -> None:
        sink = FilesystemResourceSink(tmp_path)

        with sink.create_resource(RESOURCE, []) as stream:
            stream.write(b"entry1.name=x\n")

        assert (tmp_path / RESOURCE).read_bytes() == b"entry1.name=x\n"

    def test_second_create_in_same_run_raises_conflict(self, tmp_path: Path) -> None:
        sink = FilesystemResourceSink(tmp_path)
        with sink.create_resource(RESOURCE, []) as stream:
            stream.write(b"first")

        with pytest.raises(ResourceAlreadyCreatedError):
            with sink.create_resource(RESOURCE, []) as stream:
                stream.write(b"second")

        assert (tmp_path / RESOURCE).read_bytes() == b"first"

    def test_new_run_overwrites_previous_output(self, tmp_path: Path) -> None:
        with FilesystemResourceSink(tmp_path).create_resource(RESOURCE, []) as stream:
            stream.write(b"old")

        with FilesystemResourceSink(tmp_path).create_resource(RESOURCE, []) as stream:
            stream.write(b"new")

        assert (tmp_path / RESOURCE).read_bytes() == b"new"

    @pytest.mark.parametrize("path", ["/absolute/path", "META-INF/../../outside"])
    def test_unsafe_paths_are_rejected(self, tmp_path: Path, path: str) -> None:
        sink = FilesystemResourceSink(tmp_path)

        with pytest.raises(ResourceWriteError):
            with sink.create_resource(path, []):
                pass

    def test_output_dir_that_is_a_file_fails_with_os_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "classes"
        blocker.write_text("not a directory")
        sink = FilesystemResourceSink(blocker)

        with pytest.raises(OSError):
            with sink.create_resource(RESOURCE, []):
                pass
