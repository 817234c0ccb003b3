from app import db

# Import models after db is defined
from .user import User
from .restaurant import Restaurant
from .waiter import Waiter
from .rating import RestaurantRating, WaiterRating

# Export models
__all__ = ['db', 'User', 'Restaurant', 'Waiter', 'RestaurantRating', 'WaiterRating']
