import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from app.utils.error_handler import ValidationError
from app.utils.qr_generator import QRGenerator, restaurant_url
from app.utils.storage import PhotoStorage


@pytest.fixture
def storage(tmp_path):
    return PhotoStorage(str(tmp_path / "photos"), {"jpg", "png"})


def upload(name):
    return FileStorage(stream=io.BytesIO(b"data"), filename=name)


def test_save_uses_unique_names(storage):
    first = storage.save(upload("a.JPG"))
    second = storage.save(upload("b.jpg"))

    assert first != second
    assert first.endswith(".jpg") and second.endswith(".jpg")
    assert sorted(os.listdir(storage.upload_dir)) == sorted([first, second])


def test_save_requires_a_file(storage):
    with pytest.raises(ValidationError):
        storage.save(upload(""))


def test_delete_tolerates_absent_file(storage):
    name = storage.save(upload("a.png"))
    assert storage.delete(name) is True
    assert storage.delete(name) is False
    assert storage.delete(None) is False


def test_qr_code_file(tmp_path):
    generator = QRGenerator(str(tmp_path / "qr"))
    name = generator.generate_restaurant_qr(7, "http://example.com/")

    assert name == "qr_7.png"
    with open(tmp_path / "qr" / name, "rb") as f:
        assert f.read(8) == b"\x89PNG\r\n\x1a\n"
    assert generator.remove(name) is True
    assert generator.remove(name) is False


def test_restaurant_url():
    assert restaurant_url("http://example.com/", 7) == "http://example.com/restaurants/7"
