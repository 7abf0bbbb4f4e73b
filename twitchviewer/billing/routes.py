# twitchviewer/billing/routes.py
#
# Checkout is mocked: no payment provider is called, the subscription ids are
# generated locally and stored on the user.

import logging
import time

from flask import jsonify
from flask_login import current_user

from twitchviewer.billing import billing_bp
from twitchviewer.errors import ValidationError
from twitchviewer.storage import get_storage
from twitchviewer.utils import json_body, login_required, verified_required

logger = logging.getLogger(__name__)


def _now_ms():
    return int(time.time() * 1000)


@billing_bp.route('/create-checkout-session', methods=['POST'])
@verified_required
def create_checkout_session():
    price_id = json_body().get('priceId')
    if not price_id or not isinstance(price_id, str):
        raise ValidationError("priceId is required")

    storage = get_storage()
    package = storage.get_package_by_price_id(price_id)
    if package is None:
        raise ValidationError(f"Unknown priceId: {price_id}")

    user = current_user.record
    customer_id = user['stripe_customer_id'] or f"cus_mock_{_now_ms()}"
    subscription_id = f"sub_mock_{_now_ms()}"
    storage.update_user_stripe_info(user['id'], customer_id, subscription_id)
    logger.info(f"User {user['id']} subscribed to package {package['id']} ({subscription_id})")

    return jsonify({
        "success": True,
        "message": "Mock subscription created successfully",
        "subscriptionId": subscription_id,
    })


@billing_bp.route('/subscription')
@login_required
def get_subscription():
    subscription_id = current_user.record['stripe_subscription_id']
    if not subscription_id:
        return jsonify({"hasSubscription": False})
    return jsonify({"hasSubscription": True, "subscriptionId": subscription_id})
