from app import db
from datetime import datetime


class Waiter(db.Model):
    __tablename__ = 'waiters'
    
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurants.id'), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    picture = db.Column(db.String(255), nullable=False)  # Uploaded photo file name
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    # Relationships
    restaurant = db.relationship('Restaurant', back_populates='waiters')
    ratings = db.relationship('WaiterRating', backref='waiter', lazy=True,
                              cascade='all, delete-orphan', order_by='WaiterRating.id')
    
    def to_dict(self):
        return {
            'id': self.id,
            'restaurant_id': self.restaurant_id,
            'name': self.name,
            'picture': self.picture,
            'ratings': [rating.to_dict() for rating in self.ratings],
        }
    
    def __repr__(self):
        return f'<Waiter {self.name}>'
