from app import db
from datetime import datetime


class RestaurantRating(db.Model):
    __tablename__ = 'restaurant_ratings'
    __table_args__ = (
        db.UniqueConstraint('restaurant_id', 'rater_id', name='uq_restaurant_rating_rater'),
    )
    
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurants.id'), nullable=False)
    rater_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 0-100
    date_time = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    
    def to_dict(self):
        return rating_to_dict(self)
    
    def __repr__(self):
        return f'<Rating for Restaurant {self.restaurant_id} by User {self.rater_id}>'


class WaiterRating(db.Model):
    __tablename__ = 'waiter_ratings'
    __table_args__ = (
        db.UniqueConstraint('waiter_id', 'rater_id', name='uq_waiter_rating_rater'),
    )
    
    id = db.Column(db.Integer, primary_key=True)
    waiter_id = db.Column(db.Integer, db.ForeignKey('waiters.id'), nullable=False)
    rater_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 0-100
    date_time = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    
    def to_dict(self):
        return rating_to_dict(self)
    
    def __repr__(self):
        return f'<Rating for Waiter {self.waiter_id} by User {self.rater_id}>'


def rating_to_dict(rating):
    """Plain record as embedded in backups: score, rater and timestamp."""
    return {
        'rating': rating.rating,
        'rating_by': rating.rater_id,
        'date_time': rating.date_time.isoformat() if rating.date_time else None,
    }
