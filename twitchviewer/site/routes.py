# twitchviewer/site/routes.py

import logging

from flask import Response, current_app, jsonify, render_template, request

from database import db_healthcheck
from twitchviewer.site import site_bp
from twitchviewer.storage import get_storage

logger = logging.getLogger(__name__)


@site_bp.route('/sitemap.xml')
def sitemap():
    base_url = (current_app.config.get('SITE_URL') or request.host_url).rstrip('/')
    pages = [s for s in get_storage().get_all_seo_settings() if s['page_slug'] != 'home']
    xml = render_template('sitemap.xml', base_url=base_url, pages=pages)
    return Response(xml, mimetype='application/xml')


@site_bp.route('/api/metrics', methods=['POST'])
def web_vitals():
    """Web Vitals beacons from the browser; logged only."""
    payload = request.get_json(silent=True)
    if not current_app.config['PRODUCTION']:
        logger.info(f"Web Vitals metrics: {payload}")
    return 'ok', 200


@site_bp.route('/health')
def health():
    return jsonify({"status": "ok"})


@site_bp.route('/health/db')
def health_db():
    if current_app.config['STORAGE_BACKEND'] != 'database':
        return jsonify({"status": "ok", "database": "not in use"})
    ok, error = db_healthcheck()
    if not ok:
        logger.error(f"Database health check failed: {error}")
        return jsonify({"status": "error", "database": error}), 503
    return jsonify({"status": "ok", "database": "connected"})
