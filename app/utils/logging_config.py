"""Logging configuration for the restaurant rating application."""

import logging
import logging.config
import os
from pythonjsonlogger import jsonlogger

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Fields attached by log_security_event
SECURITY_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s %(event_type)s %(user_id)s %(ip_address)s %(details)s'


def _rotating(log_dir, filename, level, formatter):
    return {
        'level': level,
        'formatter': formatter,
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': os.path.join(log_dir, filename),
        'maxBytes': MAX_LOG_BYTES,
        'backupCount': LOG_BACKUPS,
        'encoding': 'utf-8',
    }


def setup_logging(log_level='INFO', log_dir='logs'):
    """Console + rotating files; JSON security log; separate error log."""
    os.makedirs(log_dir, exist_ok=True)
    
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'},
            'detailed': {'format': '%(asctime)s [%(levelname)s] %(name)s %(funcName)s %(lineno)d: %(message)s'},
            'json': {'()': jsonlogger.JsonFormatter, 'format': SECURITY_FORMAT},
        },
        'handlers': {
            'console': {
                'level': log_level,
                'formatter': 'standard',
                'class': 'logging.StreamHandler',
                'stream': 'ext://sys.stdout',
            },
            'app_file': _rotating(log_dir, 'app.log', log_level, 'detailed'),
            'security_file': _rotating(log_dir, 'security.log', 'INFO', 'json'),
            'error_file': _rotating(log_dir, 'error.log', 'ERROR', 'detailed'),
        },
        'loggers': {
            '': {'handlers': ['console', 'app_file'], 'level': log_level, 'propagate': False},
            'app.security': {'handlers': ['security_file'], 'level': 'INFO', 'propagate': False},
            'app.errors': {'handlers': ['error_file', 'app_file', 'console'], 'level': 'INFO', 'propagate': False},
        },
    })
    
    # Quieter third-party loggers
    for name in ('werkzeug', 'sqlalchemy.engine', 'PIL'):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name):
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)


def log_security_event(event_type, user_id=None, ip_address=None, details=None):
    """Log a security-related event."""
    get_logger('app.security').info(
        "Security event",
        extra={
            'event_type': event_type,
            'user_id': user_id,
            'ip_address': ip_address,
            'details': details
        }
    )
