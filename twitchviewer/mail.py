import logging

from flask import current_app, request

logger = logging.getLogger(__name__)


def reset_link(token):
    base_url = current_app.config.get('SITE_URL') or request.host_url
    return f"{base_url.rstrip('/')}/auth?token={token}"


def send_password_reset_email(user, token):
    """No mail transport is wired up yet; the link goes to the log."""
    logger.info(f"Password reset requested for user {user['id']} <{user['email']}>: {reset_link(token)}")
