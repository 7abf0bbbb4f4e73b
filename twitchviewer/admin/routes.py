# twitchviewer/admin/routes.py

import logging

from flask import jsonify
from flask_login import current_user

from twitchviewer.admin import admin_bp
from twitchviewer.errors import NotFoundError, ValidationError
from twitchviewer.models import ROLES
from twitchviewer.storage import get_storage
from twitchviewer.utils import admin_required, json_body, public_user

logger = logging.getLogger(__name__)


@admin_bp.route('/users')
@admin_required
def list_users():
    return jsonify([public_user(u) for u in get_storage().list_users()])


@admin_bp.route('/users/<int:user_id>/role', methods=['PATCH'])
@admin_required
def update_user_role(user_id):
    role = json_body().get('role')
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")

    user = get_storage().update_user_role(user_id, role)
    if user is None:
        raise NotFoundError("User not found")
    logger.info(f"Admin {current_user.id} set role of user {user_id} to {role}")
    return jsonify(public_user(user))


@admin_bp.route('/users/<int:user_id>/verify', methods=['POST'])
@admin_required
def verify_user(user_id):
    user = get_storage().verify_user_email(user_id)
    if user is None:
        raise NotFoundError("User not found")
    logger.info(f"Admin {current_user.id} verified the email of user {user_id}")
    return jsonify(public_user(user))
