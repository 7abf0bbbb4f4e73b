# twitchviewer/content/routes.py
#
# Marketing content managed from the admin panel. Every kind gets the same
# list/create/update/delete surface; public lists only show live rows.

import logging

from flask import jsonify, request
from flask_login import current_user

from twitchviewer.content import content_bp
from twitchviewer.errors import NotFoundError, ValidationError
from twitchviewer.storage import get_storage
from twitchviewer.utils import admin_required, clean_payload, json_body, to_api, wants_all_rows

logger = logging.getLogger(__name__)


def register_resource(rule, kind, public_rows, label):
    """Adds list/create/update/delete routes for ``kind`` under ``rule``."""

    def list_rows():
        storage = get_storage()
        rows = storage.list_records(kind) if wants_all_rows() else public_rows(storage)
        return jsonify([to_api(r) for r in rows])

    @admin_required
    def create_row():
        record = get_storage().create_record(kind, clean_payload(kind, json_body()))
        logger.info(f"{label} {record['id']} created")
        return jsonify(to_api(record)), 201

    @admin_required
    def update_row(record_id):
        changes = clean_payload(kind, json_body(), partial=True)
        record = get_storage().update_record(kind, record_id, changes)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return jsonify(to_api(record))

    @admin_required
    def delete_row(record_id):
        if not get_storage().delete_record(kind, record_id):
            raise NotFoundError(f"{label} not found")
        logger.info(f"{label} {record_id} deleted")
        return '', 204

    content_bp.add_url_rule(rule, f'list_{kind}', list_rows)
    content_bp.add_url_rule(rule, f'create_{kind}', create_row, methods=['POST'])
    content_bp.add_url_rule(f'{rule}/<int:record_id>', f'update_{kind}', update_row, methods=['PATCH'])
    content_bp.add_url_rule(f'{rule}/<int:record_id>', f'delete_{kind}', delete_row, methods=['DELETE'])


register_resource('/statistics', 'statistic', lambda s: s.get_active_statistics(), "Statistic")
register_resource('/success-stories', 'success_story', lambda s: s.get_visible_success_stories(), "Success story")
register_resource('/security-badges', 'security_badge', lambda s: s.get_active_security_badges(), "Security badge")
register_resource('/limited-time-offers', 'limited_time_offer',
                  lambda s: s.get_active_limited_time_offers(), "Limited-time offer")


# --- FAQ ----------------------------------------------------------------------

@content_bp.route('/faq/categories')
def list_faq_categories():
    return jsonify([to_api(c) for c in get_storage().get_faq_categories()])


@content_bp.route('/faq/categories', methods=['POST'])
@admin_required
def create_faq_category():
    category = get_storage().create_record('faq_category', clean_payload('faq_category', json_body()))
    return jsonify(to_api(category)), 201


@content_bp.route('/faq/categories/<int:category_id>', methods=['PATCH'])
@admin_required
def update_faq_category(category_id):
    changes = clean_payload('faq_category', json_body(), partial=True)
    category = get_storage().update_record('faq_category', category_id, changes)
    if category is None:
        raise NotFoundError("FAQ category not found")
    return jsonify(to_api(category))


@content_bp.route('/faq/categories/<int:category_id>', methods=['DELETE'])
@admin_required
def delete_faq_category(category_id):
    if not get_storage().delete_faq_category(category_id):
        raise NotFoundError("FAQ category not found")
    logger.info(f"FAQ category {category_id} deleted with its items")
    return '', 204


@content_bp.route('/faq/items')
def list_faq_items():
    storage = get_storage()
    category_id = request.args.get('categoryId', type=int)
    if category_id is not None:
        items = storage.get_faq_items_by_category(category_id)
    else:
        items = [
            item
            for category in storage.get_faq_categories()
            for item in storage.get_faq_items_by_category(category['id'])
        ]
    return jsonify([to_api(i) for i in items])


def _check_category(storage, values):
    category_id = values.get('category_id')
    if category_id is not None and storage.get_record('faq_category', category_id) is None:
        raise ValidationError("categoryId does not match an FAQ category")


@content_bp.route('/faq/items', methods=['POST'])
@admin_required
def create_faq_item():
    storage = get_storage()
    values = clean_payload('faq_item', json_body())
    _check_category(storage, values)
    return jsonify(to_api(storage.create_record('faq_item', values))), 201


@content_bp.route('/faq/items/<int:item_id>', methods=['PATCH'])
@admin_required
def update_faq_item(item_id):
    storage = get_storage()
    changes = clean_payload('faq_item', json_body(), partial=True)
    _check_category(storage, changes)
    item = storage.update_record('faq_item', item_id, changes)
    if item is None:
        raise NotFoundError("FAQ item not found")
    return jsonify(to_api(item))


@content_bp.route('/faq/items/<int:item_id>', methods=['DELETE'])
@admin_required
def delete_faq_item(item_id):
    if not get_storage().delete_record('faq_item', item_id):
        raise NotFoundError("FAQ item not found")
    return '', 204


# --- blog -----------------------------------------------------------------------

@content_bp.route('/blog/posts')
def list_blog_posts():
    storage = get_storage()
    if wants_all_rows():
        posts = storage.list_records('blog_post')
    else:
        posts = storage.get_published_blog_posts()
    return jsonify([to_api(p) for p in posts])


@content_bp.route('/blog/posts/<slug>')
def get_blog_post(slug):
    post = get_storage().get_blog_post_by_slug(slug)
    is_admin = current_user.is_authenticated and current_user.role == 'admin'
    # Drafts stay hidden from everyone but admins
    if post is None or not (post['is_published'] or is_admin):
        raise NotFoundError("Blog post not found")
    return jsonify(to_api(post))


@content_bp.route('/blog/posts', methods=['POST'])
@admin_required
def create_blog_post():
    values = clean_payload('blog_post', json_body())
    values.setdefault('author_id', current_user.id)
    post = get_storage().create_record('blog_post', values)
    logger.info(f"Blog post '{post['slug']}' created by user {current_user.id}")
    return jsonify(to_api(post)), 201


@content_bp.route('/blog/posts/<int:post_id>', methods=['PATCH'])
@admin_required
def update_blog_post(post_id):
    changes = clean_payload('blog_post', json_body(), partial=True)
    post = get_storage().update_record('blog_post', post_id, changes)
    if post is None:
        raise NotFoundError("Blog post not found")
    return jsonify(to_api(post))


@content_bp.route('/blog/posts/<int:post_id>', methods=['DELETE'])
@admin_required
def delete_blog_post(post_id):
    if not get_storage().delete_record('blog_post', post_id):
        raise NotFoundError("Blog post not found")
    return '', 204
