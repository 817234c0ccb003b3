from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from dotenv import load_dotenv
import os

# Setup logging first
from app.utils.logging_config import setup_logging

load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(key_func=get_remote_address)

def create_app(config_name='default'):
    app = Flask(__name__)
    
    # Load configuration
    if config_name == 'development':
        from config.development import DevelopmentConfig
        app.config.from_object(DevelopmentConfig)
    elif config_name == 'production':
        from config.production import ProductionConfig
        app.config.from_object(ProductionConfig)
    elif config_name == 'testing':
        from config.testing import TestingConfig
        app.config.from_object(TestingConfig)
    else:
        from config.base import Config
        app.config.from_object(Config)
        app.config.setdefault('SQLALCHEMY_DATABASE_URI',
                              os.environ.get('DATABASE_URL', 'sqlite:///rate_restaurant.db'))
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite'):
            app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {}
    
    # Setup logging based on config
    setup_logging(app.config['LOG_LEVEL'], os.environ.get('LOG_DIR', 'logs'))
    
    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)
    
    login_manager.login_view = 'auth.login'
    login_manager.login_message = 'Please log in to access this page.'
    
    # User loader callback for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from app.models import User
        return db.session.get(User, int(user_id))
    
    # Initialize error handlers
    from app.utils.error_handler import init_error_handlers
    init_error_handlers(app)
    
    # Register blueprints
    from app.controllers.auth import auth_bp
    from app.controllers.main import main_bp
    from app.controllers.restaurants import restaurants_bp
    from app.controllers.admin import admin_bp
    
    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(restaurants_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    
    # Backup commands for the flask CLI
    from app.cli import register_commands
    register_commands(app)
    
    # Create tables
    with app.app_context():
        from app import models  # noqa: F401
        db.create_all()
    
    return app
