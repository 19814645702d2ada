"""Flask application factory."""
from flask import Flask, request, jsonify
from pos_app.database import init_db, db_session
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    from pos_app.utils.formatters import PosJSONProvider
    app.json = PosJSONProvider(app)

    # Initialize Sentry for error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Setup Prometheus metrics instrumentation
    from pos_app.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Initialize database
    init_db(app)

    if app.config.get('INIT_DB_ON_STARTUP'):
        from pos_app.services.setup_service import initialize_database
        try:
            initialize_database(app, db_session)
            app.logger.info("Database initialized successfully")
        except Exception as e:
            # The server still starts; requests report StorageUnavailable
            db_session.rollback()
            app.logger.error(f"Error initializing database: {e}")
        finally:
            db_session.remove()

    # Error Handlers
    from pos_app.exceptions import PosError, NotFoundError

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Handle custom application exceptions."""
        if isinstance(error, NotFoundError):
            app.logger.info(f"NotFound [{request.path}]: {error.message}")
        elif error.status_code >= 500:
            app.logger.error(f"PosError [{error.status_code}]: {error.message} {error.payload or ''}")
        else:
            app.logger.warning(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'message': 'Method Not Allowed'}), 405

    @app.errorhandler(413)
    def payload_too_large(error):
        return jsonify({'message': 'Uploaded file is too large'}), 413

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        import traceback
        from werkzeug.exceptions import HTTPException
        if isinstance(error, HTTPException):
            return jsonify({'message': error.description}), error.code

        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'message': 'Internal Server Error', 'error': str(error)}), 500

    # Register blueprints
    from pos_app.blueprints.auth import auth_bp
    from pos_app.blueprints.bills import bills_bp
    from pos_app.blueprints.catalog import catalog_bp
    from pos_app.blueprints.dashboard import dashboard_bp
    from pos_app.blueprints.settings import settings_bp
    from pos_app.blueprints.metrics import metrics_bp
    from pos_app.blueprints.main import main_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(bills_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(main_bp)

    # Register CLI commands
    from pos_app.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Database: {app.config.get('SQLALCHEMY_DATABASE_URI', '').split('@')[-1]}")

    return app
