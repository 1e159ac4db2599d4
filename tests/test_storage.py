import json

import pytest

from projectcache.errors import DeserializationError, NotCachedError
from projectcache.storage import MARKER_CONTENT, ProjectStorage


def write_metadata(storage: ProjectStorage, hash: str):
    storage.base_dir.mkdir(parents=True, exist_ok=True)
    storage.metadata_file.write_text(json.dumps({"Hash": hash}))


def test_not_cached(storage):
    assert not storage.is_cached()
    with pytest.raises(NotCachedError, match="Project 'P1' is not cached"):
        storage.verify_cached_state()
    with pytest.raises(NotCachedError):
        storage.bundle_dir()
    with pytest.raises(NotCachedError):
        storage.thumbnail_file()
    with pytest.raises(NotCachedError):
        storage.bundle_files()


def test_marker(storage):
    storage.base_dir.mkdir(parents=True)
    storage.mark_cached()
    assert storage.is_cached()
    assert storage.marker_file.read_text() == MARKER_CONTENT
    assert [p.name for p in storage.base_dir.iterdir()] == ["marker"]
    storage.marker_file.unlink()
    assert not storage.is_cached()
    storage.clear_marker()  # missing marker is fine


def test_metadata_missing(storage):
    with pytest.raises(DeserializationError):
        storage.metadata


def test_versioned_bundle_dir(storage, settings):
    write_metadata(storage, "ABCDEF0123")
    assert storage.metadata.hash == "ABCDEF0123"
    assert storage.versioned_bundle_dir == settings.local_root.absolute() / "P1" / "model-view" / "ABCDEF0123"


def test_metadata_is_loaded_once(storage):
    write_metadata(storage, "H1")
    assert storage.metadata.hash == "H1"
    write_metadata(storage, "H2")
    assert storage.metadata.hash == "H1"
    storage.reset_metadata()
    assert storage.metadata.hash == "H2"


def test_read_path_when_cached(storage):
    write_metadata(storage, "H1")
    (storage.versioned_bundle_dir / "sub").mkdir(parents=True)
    (storage.versioned_bundle_dir / "a.txt").write_text("a")
    (storage.versioned_bundle_dir / "sub" / "b.txt").write_text("b")
    storage.mark_cached()

    assert storage.bundle_dir() == storage.versioned_bundle_dir
    assert storage.thumbnail_file() == storage.base_dir / "thumbnail.png"
    assert [str(p) for p in storage.bundle_files()] == ["a.txt", "sub/b.txt"]
