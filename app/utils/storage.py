"""Disk storage for uploaded waiter photos."""

import os
import time
from werkzeug.utils import secure_filename
from app.utils.error_handler import UpstreamIOError, ValidationError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


class PhotoStorage:
    """Stores uploads under ``upload_dir`` and releases them by file name."""
    
    def __init__(self, upload_dir, allowed_extensions=None):
        self.upload_dir = upload_dir
        self.allowed_extensions = {ext.lower() for ext in (allowed_extensions or ())}
    
    def _extension(self, filename):
        filename = secure_filename(filename or '')
        if '.' not in filename:
            return ''
        return filename.rsplit('.', 1)[1].lower()
    
    def save(self, file):
        """Save a werkzeug ``FileStorage`` and return the stored file name."""
        if file is None or not file.filename:
            raise ValidationError('A picture is required.')
        
        ext = self._extension(file.filename)
        if self.allowed_extensions and ext not in self.allowed_extensions:
            raise ValidationError(f'File type ".{ext}" is not allowed.' if ext else 'File type is not allowed.')
        
        # Millisecond timestamp names, bumped on collision
        stamp = int(time.time() * 1000)
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            while True:
                filename = f"{stamp}.{ext}" if ext else str(stamp)
                path = os.path.join(self.upload_dir, filename)
                if not os.path.exists(path):
                    break
                stamp += 1
            file.save(path)
        except OSError as e:
            logger.error(f"Error saving upload {file.filename}: {e}")
            raise UpstreamIOError(f"Could not store picture: {e}") from e
        
        logger.info(f"Stored picture {filename}")
        return filename
    
    def delete(self, filename):
        """Release a stored photo. Returns False if it was already absent."""
        if not filename:
            return False
        
        path = os.path.join(self.upload_dir, os.path.basename(filename))
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug(f"Picture {filename} already absent")
            return False
        except OSError as e:
            raise UpstreamIOError(f"Could not delete picture {filename}: {e}") from e
        return True
