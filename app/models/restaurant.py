from app import db
from datetime import datetime


class Restaurant(db.Model):
    __tablename__ = 'restaurants'
    
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False, index=True)
    qr_code = db.Column(db.String(255), nullable=True)  # QR image file name
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    # Relationships
    ratings = db.relationship('RestaurantRating', backref='restaurant', lazy=True,
                              cascade='all, delete-orphan', order_by='RestaurantRating.id')
    waiters = db.relationship('Waiter', back_populates='restaurant', lazy=True,
                              order_by='Waiter.id')
    
    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'qr_code': self.qr_code,
            'ratings': [rating.to_dict() for rating in self.ratings],
        }
    
    def __repr__(self):
        return f'<Restaurant {self.name}>'
