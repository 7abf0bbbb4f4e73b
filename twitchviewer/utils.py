# twitchviewer/utils.py

import re
from datetime import datetime, timezone
from functools import wraps

from flask import request
from flask_login import current_user
from sqlalchemy import JSON, Boolean, DateTime, Integer, String

from twitchviewer.errors import AuthenticationError, PermissionDenied, ValidationError
from twitchviewer.models import MODELS

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')

# Never leave the server, whatever the caller's role
PRIVATE_USER_FIELDS = ('password', 'reset_token', 'reset_token_expires', 'twitch_access_token', 'twitch_refresh_token')


def to_camel(name):
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def to_snake(name):
    return _CAMEL_BOUNDARY.sub('_', name).lower()


def to_api(record, exclude=()):
    """Record dict -> JSON-ready dict with camelCase keys and ISO timestamps."""
    out = {}
    for key, value in record.items():
        if key in exclude:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        out[to_camel(key)] = value
    return out


def public_user(user):
    return to_api(user, exclude=PRIVATE_USER_FIELDS)


def parse_datetime(value):
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _convert_value(column, value):
    """Checks a JSON value against the column type, converting where JSON has no native type."""
    if value is None:
        if column.nullable:
            return None
        raise ValidationError(f"{to_camel(column.key)} is required")
    column_type = column.type
    if isinstance(column_type, Boolean):
        if not isinstance(value, bool):
            raise ValidationError(f"{to_camel(column.key)} must be a boolean")
        return value
    if isinstance(column_type, Integer):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{to_camel(column.key)} must be an integer")
        return value
    if isinstance(column_type, DateTime):
        if isinstance(value, datetime):
            return value
        try:
            return parse_datetime(str(value))
        except ValueError:
            raise ValidationError(f"{to_camel(column.key)} must be an ISO 8601 date")
    if isinstance(column_type, JSON):
        if not isinstance(value, (list, dict)):
            raise ValidationError(f"{to_camel(column.key)} must be a list")
        return value
    if isinstance(column_type, String):
        if not isinstance(value, str):
            raise ValidationError(f"{to_camel(column.key)} must be a string")
        return value
    return value


def clean_payload(kind, payload, partial=False, read_only=('id',)):
    """
    Converts a camelCase JSON body into column values for ``kind``.

    Unknown fields and wrong types are rejected. On create (``partial=False``)
    every non-nullable column without a default must be present.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    columns = {c.key: c for c in MODELS[kind].__table__.columns}
    values = {}
    for key, value in payload.items():
        name = to_snake(key)
        if name in read_only:
            continue
        if name not in columns:
            raise ValidationError(f"Unknown field: {key}")
        values[name] = _convert_value(columns[name], value)

    if not partial:
        for name, column in columns.items():
            if name in read_only or column.primary_key:
                continue
            if not column.nullable and column.default is None and name not in values:
                raise ValidationError(f"{to_camel(name)} is required")
    return values


def json_body():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def wants_all_rows():
    """Admins can pass ?all=1 to see inactive and unpublished rows too."""
    if request.args.get("all") not in ("1", "true"):
        return False
    return current_user.is_authenticated and current_user.role == "admin"


def form_error(form):
    """First validation message of a WTForms form, as a ValidationError."""
    for field_name, errors in form.errors.items():
        if errors:
            return ValidationError(f"{to_camel(field_name)}: {errors[0]}")
    return ValidationError("Invalid request")


def login_required(f):
    """
    Decorator to ensure a user is logged in before accessing a route.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError("Not authenticated")
        return f(*args, **kwargs)
    return decorated_function


def role_required(roles):
    """
    Decorator to ensure a logged-in user has one of the specified roles.
    `roles` should be a list or tuple of allowed roles (e.g., ['admin']).
    """
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if current_user.role not in roles:
                raise PermissionDenied("Not authorized")
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = role_required(['admin'])


def verified_required(f):
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.email_verified:
            raise PermissionDenied("Email not verified")
        return f(*args, **kwargs)
    return decorated_function
