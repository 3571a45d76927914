"""Role-based access control implementation"""
from functools import wraps
from flask import abort
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)

def capability_required(capability):
    """Decorator for checking if current user has a specific capability"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)

            if not current_user.has_capability(capability):
                logger.warning(f"User {current_user.username} attempted to access a resource requiring {capability} capability")
                abort(403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator

def role_required(role_name):
    """Decorator for checking if current user has a specific role"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)

            if not current_user.has_role(role_name):
                logger.warning(f"User {current_user.username} attempted to access a resource requiring {role_name} role")
                abort(403)

            return f(*args, **kwargs)
        return decorated_function
    return decorator
