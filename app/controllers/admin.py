from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import current_user
from app.models.user import ROLE_ADMIN
from app.services.backup import BackupService
from app.services.context import ServiceContext
from app.services.ratings import format_average
from app.services.restaurants import RestaurantService
from app.utils.error_handler import (DuplicateNameError, NotFoundError,
                                     UpstreamIOError, ValidationError)
from app.utils.logging_config import get_logger
from app.utils.security import role_required

admin_bp = Blueprint('admin', __name__)
logger = get_logger(__name__)

@admin_bp.route('/')
@role_required(ROLE_ADMIN)
def dashboard():
    return redirect(url_for('admin.restaurants'))

@admin_bp.route('/restaurants')
@role_required(ROLE_ADMIN)
def restaurants():
    ctx = ServiceContext.from_app(current_user)
    rows = [
        {
            'restaurant': restaurant,
            'average_rating': format_average(restaurant.ratings),
            'waiter_count': len(restaurant.waiters),
        }
        for restaurant in RestaurantService.list_restaurants(ctx)
    ]
    
    return render_template('admin/restaurants.html', restaurants=rows)

@admin_bp.route('/restaurants/new', methods=['GET', 'POST'])
@role_required(ROLE_ADMIN)
def add_restaurant():
    if request.method == 'POST':
        ctx = ServiceContext.from_app(current_user)
        
        try:
            restaurant = RestaurantService.create_restaurant(ctx, request.form.get('name'))
            flash(f'Restaurant {restaurant.name} added successfully.', 'success')
        except (DuplicateNameError, ValidationError) as e:
            flash(str(e), 'error')
        except UpstreamIOError as e:
            logger.error(f"Error adding restaurant: {e}")
            flash('Error adding restaurant: ' + str(e), 'error')
        
        return redirect(url_for('admin.add_restaurant'))
    
    return render_template('admin/add_restaurant.html')

@admin_bp.route('/restaurants/<int:restaurant_id>/waiters/new')
@role_required(ROLE_ADMIN)
def add_waiter(restaurant_id):
    ctx = ServiceContext.from_app(current_user)
    restaurant = RestaurantService.get_restaurant(ctx, restaurant_id)
    
    return render_template('admin/add_waiter.html', restaurant=restaurant)

@admin_bp.route('/waiters')
@role_required(ROLE_ADMIN)
def waiters():
    ctx = ServiceContext.from_app(current_user)
    rows = [
        {'waiter': waiter, 'average_rating': format_average(waiter.ratings)}
        for waiter in RestaurantService.list_waiters(ctx)
    ]
    
    return render_template('admin/waiters.html', waiters=rows)

@admin_bp.route('/waiters/save', methods=['POST'])
@role_required(ROLE_ADMIN)
def save_waiter():
    ctx = ServiceContext.from_app(current_user)
    restaurant_id = request.form.get('restaurant_id', type=int)
    
    try:
        waiter = RestaurantService.create_waiter(
            ctx,
            restaurant_id,
            request.form.get('name'),
            request.files.get('picture')
        )
        flash(f'Waiter {waiter.name} added successfully', 'success')
    except NotFoundError as e:
        flash(str(e), 'error')
        return redirect(url_for('admin.restaurants'))
    except ValidationError as e:
        flash(str(e), 'error')
    except UpstreamIOError as e:
        logger.error(f"Error adding waiter: {e}")
        flash('Error adding waiter', 'error')
    
    return redirect(url_for('admin.add_waiter', restaurant_id=restaurant_id))

@admin_bp.route('/restaurants/<int:restaurant_id>/delete', methods=['POST'])
@role_required(ROLE_ADMIN)
def delete_restaurant(restaurant_id):
    ctx = ServiceContext.from_app(current_user)
    
    try:
        result = RestaurantService.delete_restaurant(ctx, restaurant_id)
    except NotFoundError as e:
        flash(str(e), 'error')
        return redirect(url_for('admin.restaurants'))
    except UpstreamIOError as e:
        logger.error(f"Error deleting restaurant {restaurant_id}: {e}")
        flash('Error deleting restaurant', 'error')
        return redirect(url_for('admin.restaurants'))
    
    if result.ok:
        flash('Restaurant and its waiters deleted.', 'success')
    else:
        flash(f'Restaurant deleted; {len(result.failures)} waiter picture(s) could not be removed.', 'warning')
    
    return redirect(url_for('admin.restaurants'))

@admin_bp.route('/waiters/<int:waiter_id>/delete', methods=['POST'])
@role_required(ROLE_ADMIN)
def delete_waiter(waiter_id):
    ctx = ServiceContext.from_app(current_user)
    
    try:
        RestaurantService.delete_waiter(ctx, waiter_id)
        flash('Waiter deleted.', 'success')
    except NotFoundError as e:
        flash(str(e), 'error')
    except UpstreamIOError as e:
        logger.error(f"Error deleting waiter {waiter_id}: {e}")
        flash("Error deleting waiter's picture", 'error')
    
    return redirect(url_for('admin.waiters'))

@admin_bp.route('/backup', methods=['POST'])
@role_required(ROLE_ADMIN)
def backup():
    ctx = ServiceContext.from_app(current_user)
    
    try:
        paths = BackupService.create_backup(ctx)
        flash(f'Backup created successfully ({", ".join(sorted(paths))}).', 'success')
    except UpstreamIOError as e:
        logger.error(f"Error creating backup: {e}")
        flash('Error creating backup', 'error')
    
    return redirect(url_for('admin.restaurants'))
