from flask import current_app, request

from stockroom.errors import ValidationError


def get_storefront():
    return current_app.extensions["storefront"]


def json_body():
    """Request JSON as a dict; a missing body reads as empty."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_str(data, field):
    value = data.get(field)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing field: {field}")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value
