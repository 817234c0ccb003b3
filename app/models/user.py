from flask_login import UserMixin
from datetime import datetime
from app import db
from app.utils.security import hash_password, verify_password

ROLE_NORMAL = 'normal'
ROLE_ADMIN = 'admin'


class User(db.Model, UserMixin):
    __tablename__ = 'users'
    
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)  # Increased length for bcrypt
    role = db.Column(db.Enum(ROLE_NORMAL, ROLE_ADMIN, name='user_roles'), nullable=False, default=ROLE_NORMAL)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    
    def set_password(self, password):
        """Hash and set password using security utility"""
        self.password_hash = hash_password(password)
    
    def check_password(self, password):
        """Check if provided password matches the hash using security utility"""
        return verify_password(password, self.password_hash)
    
    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN
    
    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'password': self.password_hash,
            'role': self.role,
        }
    
    def __repr__(self):
        return f'<User {self.username}>'
