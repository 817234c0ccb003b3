from flask import Blueprint, render_template, current_app, send_from_directory
from flask_login import current_user
from app.services.backup import BackupService
from app.services.context import ServiceContext
from app.services.ratings import format_average
from app.services.restaurants import RestaurantService
from app.utils.error_handler import UpstreamIOError, ValidationError
from app.utils.logging_config import get_logger

main_bp = Blueprint('main', __name__)
logger = get_logger(__name__)

@main_bp.route('/')
def index():
    ctx = ServiceContext.from_app(current_user)
    restaurants = [
        {'restaurant': restaurant, 'average_rating': format_average(restaurant.ratings)}
        for restaurant in RestaurantService.list_restaurants(ctx)
    ]
    
    return render_template('index.html', restaurants=restaurants)

@main_bp.route('/media/waiters/<path:filename>')
def waiter_picture(filename):
    """Serve uploaded waiter pictures"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)

@main_bp.route('/media/qrcodes/<path:filename>')
def qr_code(filename):
    """Serve generated restaurant QR codes"""
    return send_from_directory(current_app.config['QR_CODE_FOLDER'], filename)

@main_bp.route('/loadbackup')
def load_backup():
    # Only acts on an empty database, so there is no admin to log in yet
    try:
        result = BackupService.restore_backup(ServiceContext.from_app())
    except (UpstreamIOError, ValidationError) as e:
        logger.error(f"Error loading backup data: {e}")
        return f'Error loading backup data: {e}', 500
    
    if not result.restored:
        return 'Data already exists in the database. Skipping loading backup data.'
    return 'Backup data loaded successfully.'
