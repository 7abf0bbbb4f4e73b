# twitchviewer/catalog/routes.py

import logging

from flask import jsonify

from twitchviewer.catalog import catalog_bp
from twitchviewer.errors import NotFoundError
from twitchviewer.storage import get_storage
from twitchviewer.utils import admin_required, clean_payload, json_body, to_api

logger = logging.getLogger(__name__)


# --- packages -------------------------------------------------------------

@catalog_bp.route('/packages')
def list_packages():
    return jsonify([to_api(p) for p in get_storage().get_packages()])


@catalog_bp.route('/packages/<int:package_id>')
def get_package(package_id):
    package = get_storage().get_package(package_id)
    if package is None:
        raise NotFoundError("Package not found")
    return jsonify(to_api(package))


@catalog_bp.route('/packages', methods=['POST'])
@admin_required
def create_package():
    values = clean_payload('package', json_body())
    package = get_storage().create_package(values)
    logger.info(f"Package {package['id']} ({package['name']}) created")
    return jsonify(to_api(package)), 201


@catalog_bp.route('/packages/<int:package_id>', methods=['PATCH'])
@admin_required
def update_package(package_id):
    changes = clean_payload('package', json_body(), partial=True)
    package = get_storage().update_package(package_id, changes)
    if package is None:
        raise NotFoundError("Package not found")
    logger.info(f"Package {package_id} updated: {', '.join(changes) or 'no changes'}")
    return jsonify(to_api(package))


@catalog_bp.route('/packages/<int:package_id>', methods=['DELETE'])
@admin_required
def delete_package(package_id):
    if not get_storage().delete_package(package_id):
        raise NotFoundError("Package not found")
    logger.info(f"Package {package_id} deleted")
    return '', 204


# --- SEO settings ---------------------------------------------------------

@catalog_bp.route('/seo')
@admin_required
def list_seo_settings():
    return jsonify([to_api(s) for s in get_storage().get_all_seo_settings()])


@catalog_bp.route('/seo/<page_slug>')
def get_seo_settings(page_slug):
    settings = get_storage().get_seo_settings(page_slug)
    if settings is None:
        raise NotFoundError("SEO settings not found")
    return jsonify(to_api(settings))


@catalog_bp.route('/seo', methods=['POST'])
@admin_required
def create_seo_settings():
    values = clean_payload('seo_settings', json_body())
    settings = get_storage().create_seo_settings(values)
    logger.info(f"SEO settings created for page '{settings['page_slug']}'")
    return jsonify(to_api(settings)), 201


@catalog_bp.route('/seo/<int:settings_id>', methods=['PATCH'])
@admin_required
def update_seo_settings(settings_id):
    changes = clean_payload('seo_settings', json_body(), partial=True)
    settings = get_storage().update_seo_settings(settings_id, changes)
    if settings is None:
        raise NotFoundError("SEO settings not found")
    return jsonify(to_api(settings))


@catalog_bp.route('/seo/<int:settings_id>', methods=['DELETE'])
@admin_required
def delete_seo_settings(settings_id):
    if not get_storage().delete_seo_settings(settings_id):
        raise NotFoundError("SEO settings not found")
    return '', 204
