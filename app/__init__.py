"""
Flask application factory.

Creates and configures the Flask app and registers the analysis blueprint.
"""
from flask import Flask


def create_app():
    """Create and configure the Flask application."""
    from app.logging_config import configure_logging

    app = Flask(__name__)

    configure_logging(app)

    from app.routes.analysis import bp as analysis_bp
    app.register_blueprint(analysis_bp)

    # Import models so Base.metadata knows about them (required for SQLAlchemy).
    import importlib
    importlib.import_module('app.models.profile')
    importlib.import_module('app.models.benchmark')

    return app
