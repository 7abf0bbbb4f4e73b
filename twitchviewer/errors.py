import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from twitchviewer.storage import DuplicateKeyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class PermissionDenied(ApiError):
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class UpstreamError(ApiError):
    """An external call (Twitch, payments) failed. 400 when the provider rejected us, 500 otherwise."""
    status_code = 500


DUPLICATE_MESSAGES = {
    ('user', 'username'): "Username already exists",
    ('user', 'email'): "Email already exists",
    ('user', 'twitch_id'): "Twitch account already linked",
    ('seo_settings', 'page_slug'): "SEO settings for this page already exist",
    ('faq_category', 'slug'): "FAQ category slug already exists",
    ('blog_post', 'slug'): "Blog post slug already exists",
}


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate(e):
        message = DUPLICATE_MESSAGES.get((e.kind, e.field), f"{e.field} already exists")
        return jsonify({"message": message}), 400

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        if e.code is None or e.code < 400:
            return e
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception(f"Unhandled error: {str(e)}")
        if app.config.get('PROPAGATE_EXCEPTIONS') or app.testing:
            raise e
        return jsonify({"message": "Internal Server Error"}), 500
