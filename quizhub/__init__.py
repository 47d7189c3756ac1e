from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
from flask_migrate import Migrate
from flask_compress import Compress
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables early so config is available for blueprint creation
load_dotenv()

from quizhub.config import config  # noqa: E402

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
compress = Compress()


def create_app(overrides: dict = None) -> Flask:
    """
    Application factory for the Flask app.
    Loads environment variables, configures the database,
    and registers blueprints.

    Args:
        overrides: Optional Flask config values applied on top of the
            environment (used by the test suite)
    """
    # Re-initialize config to ensure latest .env values are loaded
    from quizhub.config import Config
    global config
    config = Config()
    config.validate()

    overrides = dict(overrides or {})

    app = Flask(__name__)

    app.config["SECRET_KEY"] = config.SECRET_KEY
    db_uri = overrides.get("SQLALCHEMY_DATABASE_URI", config.SQLALCHEMY_DATABASE_URI)
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = config.SQLALCHEMY_TRACK_MODIFICATIONS
    app.config["SQLALCHEMY_ECHO"] = config.SQLALCHEMY_ECHO
    # SQLite uses its own pool; only tune pooling for server databases
    if not db_uri.startswith("sqlite"):
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {
            "pool_size": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "max_overflow": 20,
        }

    # Response compression settings
    app.config["COMPRESS_MIMETYPES"] = ['application/json', 'text/html']
    app.config["COMPRESS_LEVEL"] = 6
    app.config["COMPRESS_MIN_SIZE"] = 500

    app.config["DEFAULT_USER_EMAIL"] = config.DEFAULT_USER_EMAIL
    app.config["DEFAULT_USER_NAME"] = config.DEFAULT_USER_NAME
    app.config.update(overrides)

    app.logger.setLevel(config.LOG_LEVEL)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    compress.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        from quizhub.auth.models import User
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    # Identity is asserted by the caller, there is no credential check
    @login_manager.request_loader
    def load_user_from_request(req):
        from quizhub.auth.models import User
        user_id = req.headers.get("X-User-Id")
        if not user_id:
            return None
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            return None

    register_error_handlers(app)

    # Register blueprints
    from quizhub.quiz import quiz_bp
    app.register_blueprint(quiz_bp)

    from quizhub.cli import quiz_cli
    app.cli.add_command(quiz_cli)

    # Create tables if they do not exist
    with app.app_context():
        from quizhub.auth.models import User  # noqa: F401
        from quizhub.quiz.models import Quiz  # noqa: F401
        db.create_all()

    app.logger.info(f"QuizHub initialized (database: {db_uri.split('://')[0]})")
    return app


def register_error_handlers(app: Flask) -> None:
    """Render application and HTTP errors as JSON for API routes."""
    from quizhub.errors import QuizHubError, PersistenceError

    @app.errorhandler(QuizHubError)
    def handle_quizhub_error(e):
        if isinstance(e, PersistenceError):
            app.logger.error(f"Persistence failure on {request.method} {request.path}: {e.message}")
            return jsonify({'success': False, 'error': 'Internal server error'}), e.status_code
        app.logger.warning(f"{e.status_code} on {request.method} {request.path}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        db.session.rollback()
        app.logger.exception(f"Database error on {request.method} {request.path}")
        return jsonify({'success': False, 'error': 'Internal server error'}), 500

    @app.errorhandler(404)
    def handle_404(e):
        """Handle 404 errors - return JSON for API routes."""
        path = request.path
        method = request.method
        app.logger.warning(f"404 error: {method} {path}")
        if path.startswith(config.API_PREFIX + '/'):
            return jsonify({
                'success': False,
                'error': f'Route not found: {method} {path}',
                'path': path,
                'method': method
            }), 404
        return f"Page not found: {path}", 404

    @app.errorhandler(405)
    def handle_405(e):
        """Handle 405 Method Not Allowed - return JSON for API routes."""
        path = request.path
        method = request.method
        app.logger.warning(f"405 error: {method} {path}")
        if path.startswith(config.API_PREFIX + '/'):
            return jsonify({
                'success': False,
                'error': f'Method not allowed: {method} {path}',
                'path': path,
                'method': method
            }), 405
        return e
