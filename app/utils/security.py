"""Security utilities for the restaurant rating application."""

from enum import Enum
from functools import wraps
from flask import flash, redirect, request, url_for
from flask_login import current_user
from passlib.context import CryptContext
from app.utils.logging_config import log_security_event


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=12
)


def hash_password(password):
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(password, hashed):
    """Verify a stored password against plain text."""
    if not password or not hashed:
        return False
    return pwd_context.verify(password, hashed)


class AccessDecision(Enum):
    """Outcome of the access gate."""
    ALLOWED = 'allowed'
    REDIRECT_TO_LOGIN = 'redirect_to_login'
    REDIRECT_TO_HOME = 'redirect_to_home'


def check_access(identity, required_role=None):
    """Decide whether ``identity`` may use an operation guarded by ``required_role``.
    
    ``identity`` is the session user (or None / an anonymous user). With no
    ``required_role`` any authenticated identity is allowed. ``required_role``
    may also be a collection of acceptable roles.
    """
    if identity is None or not getattr(identity, 'is_authenticated', False):
        return AccessDecision.REDIRECT_TO_LOGIN
    
    if required_role is None:
        return AccessDecision.ALLOWED
    
    roles = (required_role,) if isinstance(required_role, str) else tuple(required_role)
    if getattr(identity, 'role', None) not in roles:
        return AccessDecision.REDIRECT_TO_HOME
    
    return AccessDecision.ALLOWED


def _gate(roles):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            decision = check_access(current_user, roles or None)
            
            if decision is AccessDecision.REDIRECT_TO_LOGIN:
                flash('Please log in to access this page.', 'error')
                return redirect(url_for('auth.login', next=request.path))
            
            if decision is AccessDecision.REDIRECT_TO_HOME:
                log_security_event(
                    'ACCESS_DENIED',
                    user_id=current_user.id,
                    ip_address=request.remote_addr,
                    details=request.path
                )
                flash('Access denied. You are not authorized to access this page.', 'error')
                return redirect(url_for('main.index'))
            
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def role_required(*roles):
    """Decorator to require specific roles."""
    return _gate(roles)


def login_required(f):
    """Decorator to require any logged-in user."""
    return _gate(())(f)
