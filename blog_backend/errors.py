from flask import jsonify
from werkzeug.exceptions import HTTPException

from blog_backend.extensions import db


class ApiError(Exception):
    """Base class for errors that are reported to the client as JSON."""

    status_code = 500

    def __init__(self, message, **payload):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self):
        body = dict(self.payload)
        body['message'] = self.message
        return body


class BadRequestError(ApiError):
    status_code = 400


class UnauthorizedError(ApiError):
    status_code = 401


class ForbiddenError(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class NotAcceptableError(ApiError):
    status_code = 406


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def page_not_found(e):
        return jsonify(message="Not found"), 404

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify(message=e.description), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {e}", exc_info=True)
        return jsonify(message="Internal server error"), 500
