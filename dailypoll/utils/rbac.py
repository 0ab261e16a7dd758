import uuid
from functools import wraps
from flask import abort
from flask_jwt_extended import get_jwt, get_jwt_identity

from ..models.user import User


def roles_required(*allowed_roles: str):
    """
    Restrict endpoint access to specific roles.
    Use with @jwt_required() above it.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims = get_jwt()
            role = claims.get("role")
            if role not in allowed_roles:
                abort(403, description="Insufficient permissions")
            return fn(*args, **kwargs)
        return wrapper
    return decorator


admin_required = roles_required(User.ROLE_ADMIN)


def current_user_id() -> uuid.UUID:
    """JWT identity as a UUID, matching the ``users.id`` column type."""
    return uuid.UUID(str(get_jwt_identity()))
