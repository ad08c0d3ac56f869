# blog_backend/auth.py
from flask import g, request, current_app
from functools import wraps

from blog_backend.errors import UnauthorizedError
from blog_backend.policy import ensure_can_manage_users
from blog_backend.repositories import UserRepository
from blog_backend.security import get_token_service


class RequestAuth:
    """The authenticated caller of the current request."""

    def __init__(self, token, user):
        self.token = token
        self.user = user

    def __repr__(self):
        return f'<RequestAuth user={self.user.id}>'


def authenticate(authorization_header):
    """Resolves an Authorization header value to a RequestAuth or raises UnauthorizedError."""
    if not authorization_header:
        raise UnauthorizedError('AUTH_MISSING')

    parts = authorization_header.split(' ')
    if parts[0].lower() != 'bearer':
        raise UnauthorizedError('AUTH_WRONG_TYPE')

    token = parts[1] if len(parts) > 1 else None
    if not token:
        raise UnauthorizedError('AUTH_TOKEN_MISSING')

    claims = get_token_service().verify_access_token(token)
    if claims is None:
        current_app.logger.warning("Rejected access token: signature or expiry check failed")
        raise UnauthorizedError('AUTH_TOKEN_INVALID')

    user = UserRepository.find_by_id(claims['user_id'])
    if not user:
        current_app.logger.warning(f"Rejected access token: user {claims['user_id']} not found")
        raise UnauthorizedError('AUTH_TOKEN_INVALID')

    return RequestAuth(token, user)


# Decorator requiring a valid access token
def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        g.auth = authenticate(request.headers.get('Authorization'))
        return f(*args, **kwargs)
    return decorated


# Must be applied below token_required so that g.auth is already set.
def admin_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        ensure_can_manage_users(current_auth().user)
        return f(*args, **kwargs)
    return decorated


def current_auth():
    auth = g.get('auth')
    if auth is None:
        raise RuntimeError('current_auth() called on a route without token_required')
    return auth
