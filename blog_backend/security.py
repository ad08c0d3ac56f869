import datetime

import jwt
from flask import current_app

from blog_backend.extensions import bcrypt

ACCESS_TOKEN_LIFETIME = datetime.timedelta(minutes=10)
REFRESH_TOKEN_LIFETIME = datetime.timedelta(days=1)


def hash_password(password):
    return bcrypt.generate_password_hash(password).decode('utf-8')


def verify_password(password, password_hash):
    """Returns False on a mismatch; errors from bcrypt itself propagate."""
    return bcrypt.check_password_hash(password_hash, password)


class TokenService:
    """
    Issues and verifies the signed access/refresh tokens.

    Access and refresh tokens are signed with different secrets, so a refresh
    token never passes as an access token and vice versa. Verification is
    stateless; there is no server-side revocation.
    """

    algorithm = 'HS256'

    def __init__(self, access_secret, refresh_secret,
                 access_lifetime=ACCESS_TOKEN_LIFETIME,
                 refresh_lifetime=REFRESH_TOKEN_LIFETIME):
        if not access_secret:
            raise ValueError('ACCESS_TOKEN_SECRET is not defined')
        if not refresh_secret:
            raise ValueError('REFRESH_TOKEN_SECRET is not defined')
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_lifetime = access_lifetime
        self.refresh_lifetime = refresh_lifetime

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get('ACCESS_TOKEN_SECRET'),
            config.get('REFRESH_TOKEN_SECRET'),
            access_lifetime=config.get('ACCESS_TOKEN_LIFETIME', ACCESS_TOKEN_LIFETIME),
            refresh_lifetime=config.get('REFRESH_TOKEN_LIFETIME', REFRESH_TOKEN_LIFETIME),
        )

    def _issue(self, user_id, secret, lifetime):
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            'user_id': user_id,
            'iat': now,
            'exp': now + lifetime,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token, secret):
        try:
            claims = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.InvalidTokenError:
            return None
        # bool is an int subclass, but never a valid id
        user_id = claims.get('user_id')
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return None
        return claims

    def issue_access_token(self, user_id):
        return self._issue(user_id, self.access_secret, self.access_lifetime)

    def issue_refresh_token(self, user_id):
        return self._issue(user_id, self.refresh_secret, self.refresh_lifetime)

    def verify_access_token(self, token):
        return self._verify(token, self.access_secret)

    def verify_refresh_token(self, token):
        return self._verify(token, self.refresh_secret)

    def refresh_access_token(self, user_id, refresh_token):
        """Mints a new access token for user_id, or None if the refresh token is not valid for it."""
        claims = self.verify_refresh_token(refresh_token)
        if claims is None or claims['user_id'] != user_id:
            return None
        return self.issue_access_token(user_id)


def get_token_service():
    return current_app.extensions['token_service']
