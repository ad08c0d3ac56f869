import re
from functools import wraps

from flask import request

from blog_backend.errors import BadRequestError
from blog_backend.models import UserType

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise BadRequestError('Request body must be a JSON object')
    return data


# Each check takes the request body and returns an error message or None.

def required(field, message):
    def check(data):
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            return message
        return None
    return check


def not_empty(field, message):
    """Like required(), but only applies when the field is present."""
    inner = required(field, message)

    def check(data):
        if field not in data:
            return None
        return inner(data)
    return check


def min_length(field, length, message, optional=False):
    def check(data):
        if optional and field not in data:
            return None
        value = data.get(field)
        if not isinstance(value, str) or len(value) < length:
            return message
        return None
    return check


def email(field, message, optional=False):
    def check(data):
        if optional and field not in data:
            return None
        value = data.get(field)
        if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
            return message
        return None
    return check


def boolean(field, message, optional=False):
    def check(data):
        if optional and field not in data:
            return None
        if not isinstance(data.get(field), bool):
            return message
        return None
    return check


def user_type(field, message):
    def check(data):
        if field not in data:
            return None
        try:
            UserType.parse(data[field])
        except ValueError:
            return message
        return None
    return check


def validate_body(*checks):
    """Rejects the request with 400 unless every check passes."""
    def wrapper(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            data = get_json_body()
            errors = [message for message in (check(data) for check in checks) if message]
            if errors:
                raise BadRequestError(errors[0], errors=errors)
            return f(*args, **kwargs)
        return decorated
    return wrapper


validate_register = validate_body(
    email('email', 'Valid email is required'),
    min_length('password', 6, 'Password must be at least 6 characters long'),
    required('name', 'Name is required'),
)

validate_create_user = validate_body(
    email('email', 'Valid email is required'),
    min_length('password', 6, 'Password must be at least 6 characters long'),
    required('name', 'Name is required'),
    user_type('type', 'Unknown user type'),
)

validate_login = validate_body(
    email('email', 'Valid email is required', optional=True),
    required('password', 'Password is required'),
)

validate_create_post = validate_body(
    required('title', 'Title is required'),
    min_length('content', 10, 'Content must be at least 10 characters long'),
    boolean('publish', 'Publish must be a boolean', optional=True),
)

validate_update_post = validate_body(
    not_empty('title', 'Title cannot be empty'),
    min_length('content', 10, 'Content must be at least 10 characters long', optional=True),
)

validate_publish_post = validate_body(
    boolean('visible', 'Visible must be a boolean'),
)

validate_comment = validate_body(
    required('content', 'Content is required'),
)
