import logging
import secrets
from datetime import datetime

from flask import current_app

from twitchviewer.auth.passwords import hash_password
from twitchviewer.errors import ValidationError
from twitchviewer.mail import send_password_reset_email
from twitchviewer.storage.base import hash_reset_token

logger = logging.getLogger(__name__)

# Same answer for known and unknown emails so the endpoint can't be used to probe accounts
RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."
RESET_DONE_MESSAGE = "Your password has been reset. You can now log in."
INVALID_TOKEN_MESSAGE = "Invalid or expired reset token"


def request_password_reset(storage, email):
    user = storage.get_user_by_email(email)
    if user is None:
        logger.info("Password reset requested for an unknown email")
        return RESET_REQUESTED_MESSAGE

    token = secrets.token_urlsafe(32)
    storage.update_user(user['id'], {
        'reset_token': hash_reset_token(token),
        'reset_token_expires': datetime.utcnow() + current_app.config['PASSWORD_RESET_TOKEN_TTL'],
    })
    send_password_reset_email(user, token)
    return RESET_REQUESTED_MESSAGE


def reset_password(storage, token, new_password):
    """Redeems a reset token; the token is cleared so it works only once."""
    user = storage.get_user_by_reset_token(token)
    if user is None:
        raise ValidationError(INVALID_TOKEN_MESSAGE)

    storage.update_user(user['id'], {
        'password': hash_password(new_password),
        'reset_token': None,
        'reset_token_expires': None,
    })
    logger.info(f"Password reset completed for user {user['id']}")
    return RESET_DONE_MESSAGE
