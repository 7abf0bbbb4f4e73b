# twitchviewer/__init__.py

import logging
import time

from flask import Flask, g, request

from config import Config
from database import init_db
from twitchviewer.auth.login import login_manager
from twitchviewer.errors import register_error_handlers
from twitchviewer.sessions import MemorySessionStore, ServerSideSessionInterface
from twitchviewer.storage import init_storage

logger = logging.getLogger(__name__)


def create_app(config_class=Config, storage=None, session_store=None):
    """
    Builds the Flask app. ``storage`` and ``session_store`` may be injected
    (tests do); otherwise they come from the configuration.
    """
    try:
        logging.basicConfig(
            level=getattr(logging, str(config_class.LOG_LEVEL).upper(), logging.INFO),
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        )
        logger.info("Starting Flask app creation...")

        app = Flask(__name__)
        app.config.from_object(config_class)
        logger.info("Flask app instance created successfully")

        # Tables are only needed when the database backs the storage
        init_db(app, create_tables=storage is None and app.config['STORAGE_BACKEND'] == 'database')
        logger.info("Database initialized with Flask app")

        storage = init_storage(app, storage)

        app.session_interface = ServerSideSessionInterface(
            session_store if session_store is not None else MemorySessionStore())
        login_manager.init_app(app)
        logger.info("Session store and login manager registered")

        register_error_handlers(app)

        logger.info("Registering blueprints...")
        from twitchviewer.admin import admin_bp
        from twitchviewer.auth import auth_bp
        from twitchviewer.billing import billing_bp
        from twitchviewer.catalog import catalog_bp
        from twitchviewer.content import content_bp
        from twitchviewer.media import media_bp
        from twitchviewer.site import site_bp

        app.register_blueprint(auth_bp)
        app.register_blueprint(catalog_bp)
        app.register_blueprint(content_bp)
        app.register_blueprint(media_bp)
        app.register_blueprint(admin_bp)
        app.register_blueprint(billing_bp)
        app.register_blueprint(site_bp)
        logger.info("All blueprints registered successfully")

        @app.before_request
        def start_timer():
            g.request_started = time.perf_counter()

        @app.after_request
        def log_api_request(response):
            if request.path.startswith('/api') and 'request_started' in g:
                duration_ms = (time.perf_counter() - g.request_started) * 1000
                logger.info(f"{request.method} {request.path} {response.status_code} in {duration_ms:.0f}ms")
            return response

        @app.after_request
        def set_security_headers(response):
            response.headers.setdefault('X-Content-Type-Options', 'nosniff')
            response.headers.setdefault('X-Frame-Options', 'SAMEORIGIN')
            response.headers.setdefault('Referrer-Policy', 'strict-origin-when-cross-origin')
            if app.config['PRODUCTION']:
                response.headers.setdefault('Strict-Transport-Security', 'max-age=31536000; includeSubDomains')
            return response

        if app.config['SEED_DEFAULT_CONTENT']:
            from twitchviewer.seed import seed_default_content
            with app.app_context():
                seed_default_content(storage)

        logger.info("Flask app creation completed successfully")
        return app

    except Exception as e:
        logger.error(f"Failed to create Flask app: {str(e)}")
        logger.error(f"Error type: {type(e).__name__}")
        raise
