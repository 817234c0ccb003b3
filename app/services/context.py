"""Per-request context handed to every service operation."""

from flask import current_app
from app import db


class ServiceContext:
    """Store handle, caller identity and storage locations for one operation."""
    
    def __init__(self, session, identity=None, upload_folder=None, qr_folder=None,
                 backup_folder=None, public_base_url='', allowed_photo_extensions=None):
        self.session = session
        self.identity = identity
        self.upload_folder = upload_folder
        self.qr_folder = qr_folder
        self.backup_folder = backup_folder
        self.public_base_url = public_base_url
        self.allowed_photo_extensions = allowed_photo_extensions
    
    @classmethod
    def from_app(cls, identity=None):
        """Build a context from the active Flask app's config."""
        config = current_app.config
        if identity is not None and not getattr(identity, 'is_authenticated', False):
            identity = None
        return cls(
            session=db.session,
            identity=identity,
            upload_folder=config['UPLOAD_FOLDER'],
            qr_folder=config['QR_CODE_FOLDER'],
            backup_folder=config['BACKUP_FOLDER'],
            public_base_url=config['PUBLIC_BASE_URL'],
            allowed_photo_extensions=config.get('ALLOWED_PHOTO_EXTENSIONS'),
        )
    
    @property
    def identity_id(self):
        return getattr(self.identity, 'id', None)
