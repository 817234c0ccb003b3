"""Testing configuration for the restaurant rating application."""

from .base import Config
import os


class TestingConfig(Config):
    """Testing configuration."""
    
    # Debug mode
    DEBUG = True
    TESTING = True
    
    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('TEST_DATABASE_URL') or 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite rejects the pool options
    
    # Security
    SECRET_KEY = 'test-secret-key'
    WTF_CSRF_ENABLED = False  # Disable CSRF for testing
    
    # Logging
    LOG_LEVEL = 'DEBUG'
    
    # Rate limiting
    RATELIMIT_ENABLED = False
    
    # Session
    SESSION_COOKIE_SECURE = False
    
    PUBLIC_BASE_URL = 'http://testserver'
