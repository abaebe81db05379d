from functools import wraps
from flask_jwt_extended import verify_jwt_in_request

from bookshare.utils.auth import current_user_id


def user_required(fn):
    """Verify the bearer JWT and pass the caller's id as ``user_id``."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        kwargs["user_id"] = current_user_id()
        return fn(*args, **kwargs)
    return wrapper
