from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import current_user
from app.services.context import ServiceContext
from app.services.ratings import RatingService, format_average, find_rating
from app.services.restaurants import RestaurantService
from app.utils.error_handler import DuplicateRatingError, NotFoundError, UpstreamIOError, ValidationError
from app.utils.logging_config import get_logger
from app.utils.security import login_required

restaurants_bp = Blueprint('restaurants', __name__)
logger = get_logger(__name__)

@restaurants_bp.route('/restaurants/<int:restaurant_id>')
def restaurant_details(restaurant_id):
    ctx = ServiceContext.from_app(current_user)
    restaurant = RestaurantService.get_restaurant(ctx, restaurant_id)
    
    waiters = [
        {
            'waiter': waiter,
            'average_rating': format_average(waiter.ratings),
            'my_rating': find_rating(waiter.ratings, ctx.identity_id),
        }
        for waiter in RestaurantService.waiters_for(ctx, restaurant_id)
    ]
    
    return render_template('restaurant.html',
                          restaurant=restaurant,
                          waiters=waiters,
                          average_rating=format_average(restaurant.ratings),
                          my_rating=find_rating(restaurant.ratings, ctx.identity_id))

@restaurants_bp.route('/restaurant/<int:restaurant_id>/rate', methods=['POST'])
@login_required
def rate_restaurant(restaurant_id):
    ctx = ServiceContext.from_app(current_user)
    
    try:
        RatingService.rate_restaurant(ctx, restaurant_id, request.form.get('rating', ''))
        flash('Thank you for rating this restaurant', 'success')
    except NotFoundError as e:
        flash(str(e), 'error')
        return redirect(url_for('main.index'))
    except (DuplicateRatingError, ValidationError) as e:
        flash(str(e), 'error')
    
    return redirect(url_for('restaurants.restaurant_details', restaurant_id=restaurant_id))

@restaurants_bp.route('/waiter/<int:waiter_id>/rate', methods=['POST'])
@login_required
def rate_waiter(waiter_id):
    ctx = ServiceContext.from_app(current_user)
    
    try:
        waiter = RestaurantService.get_waiter(ctx, waiter_id)
        restaurant_id = waiter.restaurant_id
        RatingService.rate_waiter(ctx, waiter_id, request.form.get('rating', ''))
        flash(f'Thank you for rating {waiter.name}', 'success')
    except NotFoundError as e:
        flash(str(e), 'error')
        return redirect(url_for('main.index'))
    except ValidationError as e:
        flash(str(e), 'error')
    except UpstreamIOError as e:
        logger.error(f"Error rating waiter {waiter_id}: {e}")
        flash('Error saving your rating', 'error')
    
    return redirect(url_for('restaurants.restaurant_details', restaurant_id=restaurant_id))
