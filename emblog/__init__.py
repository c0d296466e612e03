import logging
import os
import sys

from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException

from .config import DevConfig, ProdConfig
from .errors import ApiError
from .extensions import db, migrate


def _configure_logging(app):
    """Set up structured logging for production."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    ))
    level = logging.INFO if not app.debug else logging.DEBUG
    app.logger.setLevel(level)
    # app.logger is the 'emblog' logger, so emblog.* module loggers propagate here
    app.logger.addHandler(handler)
    logging.getLogger('gunicorn.error').setLevel(level)


def _ensure_schema(app):
    """Create missing tables.

    Covers deployments where Flask-Migrate isn't used; create_all only
    creates tables that don't exist yet.
    """
    with app.app_context():
        try:
            db.create_all()
            app.logger.info('Schema check completed')
        except Exception as e:
            db.session.rollback()
            app.logger.warning('Schema check failed: %s', e)


def _register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        db.session.rollback()
        return jsonify({'message': e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'message': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception('Unhandled error')
        return jsonify({'message': 'Internal server error'}), 500


def create_app(config=None):
    app = Flask(__name__, static_folder=None)

    if config is None:
        config = ProdConfig if os.environ.get('FLASK_ENV') == 'production' else DevConfig
    app.config.from_object(config)

    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so they are registered with SQLAlchemy (needed for migrations)
    from . import models  # noqa: F401

    _ensure_schema(app)

    from flask_cors import CORS
    CORS(app)

    from .api import register_blueprints
    register_blueprints(app)

    from .cli import register_commands
    register_commands(app)

    _register_error_handlers(app)

    # Health check endpoint (used by Docker and CI)
    @app.route('/healthz')
    def health_check():
        try:
            db.session.execute(db.text('SELECT 1'))
            return jsonify(status='healthy'), 200
        except Exception:
            app.logger.exception('Health check failed')
            return jsonify(status='unhealthy'), 503

    # Uploaded images are referenced by path and served from here
    @app.route('/uploads/<path:filename>')
    def serve_upload(filename):
        return send_from_directory(app.config['UPLOAD_FOLDER'], filename)

    return app
