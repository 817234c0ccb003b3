import qrcode
import os
from app.utils.error_handler import UpstreamIOError
from app.utils.logging_config import get_logger

logger = get_logger(__name__)


def restaurant_url(base_url, restaurant_id):
    """Canonical public URL of a restaurant page."""
    return f"{base_url.rstrip('/')}/restaurants/{restaurant_id}"


class QRGenerator:
    def __init__(self, output_dir):
        self.output_dir = output_dir
    
    @staticmethod
    def filename_for(restaurant_id):
        return f"qr_{restaurant_id}.png"

    def generate_restaurant_qr(self, restaurant_id, base_url):
        """
        Generate the QR code image for a restaurant page and return its file name.
        The file name is derived from the restaurant id alone.
        """
        qr_content = restaurant_url(base_url, restaurant_id)
        qr_filename = self.filename_for(restaurant_id)
        qr_path = os.path.join(self.output_dir, qr_filename)
        
        try:
            # Ensure directory exists
            os.makedirs(self.output_dir, exist_ok=True)
            
            # Create and save QR code image
            qr_img = qrcode.make(qr_content)
            qr_img.save(qr_path)
        except OSError as e:
            logger.error(f"Error generating QR code for restaurant {restaurant_id}: {e}")
            raise UpstreamIOError(f"Could not write QR code: {e}") from e
        
        logger.debug(f"QR code {qr_filename} -> {qr_content}")
        return qr_filename
    
    def remove(self, qr_filename):
        """Delete a QR image; returns False when it was already gone."""
        if not qr_filename:
            return False
        try:
            os.remove(os.path.join(self.output_dir, qr_filename))
        except FileNotFoundError:
            return False
        except OSError as e:
            raise UpstreamIOError(f"Could not delete QR code {qr_filename}: {e}") from e
        return True
