# tests/test_uploads.py
import io
from types import SimpleNamespace

import pytest

from gaadiyaan.exceptions import ValidationError
from gaadiyaan.uploads import ImageStore


def upload(name="car.jpg", content=b"\xff\xd8jpeg", content_type="image/jpeg"):
    return SimpleNamespace(filename=name, content_type=content_type, file=io.BytesIO(content))


@pytest.fixture
def store(tmp_path):
    return ImageStore(str(tmp_path / "img"), "http://cdn.test/", "/uploads/vehicles", max_bytes=16)


def test_save_returns_public_url(store):
    url = store.save(upload())
    assert url.startswith("http://cdn.test/uploads/vehicles/")
    assert url.endswith(".jpg")
    assert store.path_for(url).read_bytes() == b"\xff\xd8jpeg"


def test_names_are_unique(store):
    assert store.save(upload()) != store.save(upload())


def test_rejects_non_images(store):
    with pytest.raises(ValidationError):
        store.save(upload("notes.txt", b"hi", "text/plain"))


def test_rejects_oversized_file_and_leaves_nothing(store):
    with pytest.raises(ValidationError):
        store.save(upload(content=b"x" * 17))
    assert list(store.root.iterdir()) == []


def test_save_all_cleans_up_on_failure(store):
    with pytest.raises(ValidationError):
        store.save_all([upload(), upload("bad.txt", b"x", "text/plain")])
    assert list(store.root.iterdir()) == []


def test_delete_ignores_foreign_urls(store):
    url = store.save(upload())
    store.delete(["http://elsewhere.test/uploads/vehicles/x.jpg", url, url])
    assert list(store.root.iterdir()) == []
