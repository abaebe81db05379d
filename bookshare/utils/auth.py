from flask_jwt_extended import get_jwt_identity

from bookshare.errors import AuthenticationError


def current_user_id() -> int:
    """Identity of the caller. Requires verify_jwt_in_request() to have run."""
    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token identity")
