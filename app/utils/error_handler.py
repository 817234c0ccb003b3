"""Error handling and custom exception classes for the restaurant rating application."""

from flask import request, render_template
from werkzeug.exceptions import HTTPException
from app.utils.logging_config import get_logger


# Custom exception classes
class RateAppException(Exception):
    """Base exception class for the rating application."""
    pass


class NotFoundError(RateAppException):
    """Raised when a restaurant, waiter or user id does not exist."""
    pass


class DuplicateNameError(RateAppException):
    """Raised when a restaurant name is already taken."""
    pass


class DuplicateRatingError(RateAppException):
    """Raised when a user rates a restaurant a second time."""
    pass


class AuthenticationError(RateAppException):
    """Raised when authentication fails."""
    pass


class AuthorizationError(RateAppException):
    """Raised when authorization fails."""
    pass


class ValidationError(RateAppException):
    """Raised when validation fails."""
    pass


class UpstreamIOError(RateAppException):
    """Raised when the store or the filesystem fails."""
    pass


# Logger for error handling
logger = get_logger('app.errors')


def init_error_handlers(app):
    """Initialize error handlers for the Flask application."""
    
    @app.errorhandler(403)
    def forbidden(error):
        logger.warning(f"Forbidden access attempt: {request.url}")
        return render_template('errors/403.html'), 403
    
    @app.errorhandler(404)
    def not_found(error):
        logger.info(f"Page not found: {request.url}")
        return render_template('errors/404.html'), 404
    
    @app.errorhandler(NotFoundError)
    def entity_not_found(error):
        logger.info(f"Entity not found: {request.url} - {str(error)}")
        return render_template('errors/404.html', message=str(error)), 404
    
    @app.errorhandler(405)
    def method_not_allowed(error):
        return render_template('errors/405.html'), 405
    
    @app.errorhandler(413)
    def request_entity_too_large(error):
        logger.warning(f"Upload too large: {request.url}")
        return render_template('errors/413.html'), 413
    
    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {request.url} - {str(error)}", exc_info=True)
        return render_template('errors/500.html'), 500
    
    @app.errorhandler(Exception)
    def handle_exception(error):
        if isinstance(error, HTTPException):
            return error
        
        # Log the error
        logger.error(f"Unhandled exception: {str(error)}", exc_info=True)
        return render_template('errors/500.html'), 500
