"""
Shared pytest fixtures.

Every test gets a fresh app on an in-memory SQLite database with its upload,
QR code and backup folders under ``tmp_path``. Service tests use ``ctx``
(which keeps an app context pushed); route tests use ``client`` and open
their own app contexts for assertions.
"""

import io
import os
import tempfile

import pytest
from werkzeug.datastructures import FileStorage

# Keep log files out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="rate_restaurant_logs_"))

from app import create_app, db
from app.models import User
from app.models.user import ROLE_ADMIN, ROLE_NORMAL
from app.services.context import ServiceContext

# Smallest GIF the upload check will accept by extension
PICTURE_BYTES = b"GIF89a\x01\x00\x01\x00\x00\x00\x00;"


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config.update(
        UPLOAD_FOLDER=str(tmp_path / "uploads"),
        QR_CODE_FOLDER=str(tmp_path / "qrcodes"),
        BACKUP_FOLDER=str(tmp_path / "backup"),
    )
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app_context):
    """Create a user in the active app context."""
    def _make_user(username="diner", password="secret123", role=ROLE_NORMAL):
        user = User(username=username, role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("admin", "admin-pass", ROLE_ADMIN)


@pytest.fixture
def ctx(app_context):
    """Anonymous service context; use ``ctx_for`` for a logged-in caller."""
    return ServiceContext.from_app()


@pytest.fixture
def ctx_for(app_context):
    def _ctx_for(user):
        return ServiceContext.from_app(user)
    return _ctx_for


@pytest.fixture
def picture():
    def _picture(filename="waiter.gif"):
        return FileStorage(stream=io.BytesIO(PICTURE_BYTES), filename=filename, content_type="image/gif")
    return _picture
