# database.py

import logging
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import text

logger = logging.getLogger(__name__)

# Initialize SQLAlchemy without an app yet. The app factory calls init_db().
db = SQLAlchemy()


def init_db(app, create_tables=True):
    """
    Binds the SQLAlchemy extension to the app and, when asked, creates the
    tables defined by the models if they don't exist yet.
    """
    db.init_app(app)
    if create_tables:
        with app.app_context():
            # Import models so they're registered on the metadata before create_all
            from twitchviewer import models  # noqa: F401
            logger.info(f"Ensuring tables at {app.config['SQLALCHEMY_DATABASE_URI']}...")
            db.create_all()
            logger.info("Tables ensured.")


@contextmanager
def get_db_session():
    """
    Provides the request-scoped SQLAlchemy session, rolling back on error so
    a failed write never leaks into the next statement.
    """
    try:
        yield db.session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        logger.error(f"Error type: {type(e).__name__}")
        db.session.rollback()
        raise


def db_healthcheck():
    try:
        with get_db_session() as session:
            session.execute(text("SELECT 1"))
        return True, None
    except Exception as e:
        return False, str(e)
