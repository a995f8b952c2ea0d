import pytest

from library_api.app.core.config import settings
from library_api.app.core.storage import LocalBlobStore, get_blob_store


def test_store_url_and_delete(tmp_path):
    store = LocalBlobStore(str(tmp_path / "blobs"), "/storage/")
    path = store.store(b"\x89PNG", "contact_images", ".png")

    directory, name = path.split("/")
    assert directory == "contact_images"
    assert name.endswith(".png") and len(name) == 32 + 4
    assert (tmp_path / "blobs" / path).read_bytes() == b"\x89PNG"
    assert store.url_for(path) == f"/storage/{path}"

    assert store.delete(path) is True
    assert store.delete(path) is False
    assert not (tmp_path / "blobs" / path).exists()


def test_generated_names_are_unique(tmp_path):
    store = LocalBlobStore(str(tmp_path), "/s")
    assert store.store(b"a", "d", ".gif") != store.store(b"a", "d", ".gif")


def test_empty_path_has_no_url(tmp_path):
    store = LocalBlobStore(str(tmp_path), "/s")
    assert store.url_for(None) is None
    assert store.url_for("") is None
    assert store.delete(None) is False


def test_paths_outside_the_root_are_rejected(tmp_path):
    store = LocalBlobStore(str(tmp_path / "root"), "/s")
    with pytest.raises(ValueError):
        store.delete("../outside.png")
    with pytest.raises(ValueError):
        store.store(b"x", "../escape", ".png")


def test_get_blob_store_follows_settings(isolated_settings):
    store = get_blob_store()
    assert str(store.root) == str((isolated_settings / "storage").resolve())
    assert store.base_url == settings.storage_url
