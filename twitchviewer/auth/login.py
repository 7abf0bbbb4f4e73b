import logging

from flask import session
from flask_login import LoginManager, UserMixin, login_user, logout_user

from twitchviewer.storage import get_storage

logger = logging.getLogger(__name__)

login_manager = LoginManager()


class AuthUser(UserMixin):
    """The storage record of the logged-in user, as Flask-Login's current_user."""

    def __init__(self, record):
        self.record = record

    @property
    def id(self):
        return self.record['id']

    @property
    def role(self):
        return self.record['role']

    @property
    def email_verified(self):
        return bool(self.record['email_verified'])

    def __repr__(self):
        return f"<AuthUser {self.record['username']}>"


@login_manager.user_loader
def load_user(user_id):
    try:
        record = get_storage().get_user(int(user_id))
    except (TypeError, ValueError):
        return None
    return AuthUser(record) if record else None


def establish_session(user, remember=False):
    """Logs ``user`` in on a freshly rotated session id."""
    session.regenerate()
    session.permanent = bool(remember)
    login_user(AuthUser(user))
    logger.info(f"Session established for user {user['id']} (remember={bool(remember)})")


def end_session():
    logout_user()
    session.clear()
