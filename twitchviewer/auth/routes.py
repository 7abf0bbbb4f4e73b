# twitchviewer/auth/routes.py

import logging

from flask import current_app, jsonify, redirect, request, session
from flask_login import current_user

from twitchviewer.auth import auth_bp
from twitchviewer.auth.forms import (
    LoginForm,
    PasswordResetRequestForm,
    RegisterForm,
    RememberSessionForm,
    ResetPasswordForm,
)
from twitchviewer.auth.login import end_session, establish_session
from twitchviewer.auth.passwords import hash_password, verify_password
from twitchviewer.auth.reset import request_password_reset, reset_password
from twitchviewer.auth.twitch import TwitchClient, TwitchLogin
from twitchviewer.errors import AuthenticationError
from twitchviewer.storage import get_storage
from twitchviewer.utils import form_error, login_required, public_user

logger = logging.getLogger(__name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    form = RegisterForm()
    if not form.validate():
        raise form_error(form)

    storage = get_storage()
    values = {
        'username': form.username.data.strip(),
        'email': form.email.data.strip(),
        'password': hash_password(form.password.data),
    }
    # The very first account bootstraps the admin
    if current_app.config['FIRST_USER_IS_ADMIN'] and storage.count_users() == 0:
        values.update(role='admin', email_verified=True)
        logger.info(f"First registration: {values['username']} becomes admin")

    user = storage.create_user(values)
    logger.info(f"Registered user {user['id']} ({user['username']})")
    establish_session(user)
    return jsonify(public_user(user)), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate():
        raise form_error(form)

    storage = get_storage()
    user = storage.get_user_by_username(form.username.data.strip())
    if user is None or not verify_password(user['password'], form.password.data):
        logger.warning(f"Failed login attempt for username: {form.username.data}")
        raise AuthenticationError("Invalid username or password")

    remember = bool(form.remember.data)
    if user['remember_session'] != remember:
        user = storage.update_user(user['id'], {'remember_session': remember})
    establish_session(user, remember=remember)
    return jsonify(public_user(user))


@auth_bp.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        logger.info(f"User {current_user.id} logged out")
    end_session()
    return jsonify({"message": "Logged out"})


@auth_bp.route('/user')
@login_required
def get_current_user():
    return jsonify(public_user(current_user.record))


@auth_bp.route('/verify-email', methods=['POST'])
@login_required
def verify_email():
    user = get_storage().verify_user_email(current_user.id)
    logger.info(f"Email verified for user {current_user.id}")
    return jsonify(public_user(user))


@auth_bp.route('/remember-session', methods=['POST'])
@login_required
def remember_session():
    form = RememberSessionForm()
    if not form.validate():
        raise form_error(form)
    remember = bool(form.remember.data)
    session.permanent = remember
    user = get_storage().update_user(current_user.id, {'remember_session': remember})
    return jsonify(public_user(user))


@auth_bp.route('/request-password-reset', methods=['POST'])
def request_reset():
    form = PasswordResetRequestForm()
    if not form.validate():
        raise form_error(form)
    message = request_password_reset(get_storage(), form.email.data.strip())
    return jsonify({"message": message})


@auth_bp.route('/reset-password', methods=['POST'])
def complete_reset():
    form = ResetPasswordForm()
    if not form.validate():
        raise form_error(form)
    message = reset_password(get_storage(), form.token.data, form.new_password.data)
    return jsonify({"message": message})


def _twitch_login():
    return TwitchLogin(TwitchClient.from_config(current_app.config), get_storage())


@auth_bp.route('/auth/twitch')
def twitch_login():
    return redirect(_twitch_login().begin(session))


@auth_bp.route('/auth/twitch/callback')
def twitch_callback():
    user = _twitch_login().complete(session, request.args)
    logger.info(f"User {user['id']} logged in with Twitch")
    return redirect(current_app.config['LOGIN_REDIRECT_URL'])
