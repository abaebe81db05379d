from flask import request

from bookshare.errors import ValidationError


def json_body() -> dict:
    """JSON object sent with the request; an empty or missing body reads as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
