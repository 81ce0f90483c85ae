# auth_server/__init__.py
from flask import Blueprint, Flask, request
from prometheus_client import CollectorRegistry, Counter
from pymongo.errors import PyMongoError
from werkzeug.exceptions import BadRequest, InternalServerError, RequestEntityTooLarge

from .managers.config import get_config
from .managers.formatter_management import configure_logging
from .managers.json_management import JSONBodyParser
from .managers.mongodb_management import DatabaseUnavailableError, MongoDBManager
from .managers.response_management import ResponseManager
from .constants.constants_server import API_USER_PREFIX, LoginStatus


def _is_api_request() -> bool:
    return request.path == API_USER_PREFIX or request.path.startswith(API_USER_PREFIX + "/")


def _register_error_handlers(app):
    # only the API answers with the JSON envelope; other paths keep Flask defaults

    @app.errorhandler(BadRequest)
    def bad_request(e):
        if not _is_api_request():
            return e
        return ResponseManager.bad_request(error="Invalid request", message=e.description)

    @app.errorhandler(RequestEntityTooLarge)
    def payload_too_large(e):
        if not _is_api_request():
            return e
        return ResponseManager.payload_too_large(message=e.description)

    @app.errorhandler(DatabaseUnavailableError)
    def database_unavailable(e):
        app.logger.warning(f"request rejected, {e}")
        return ResponseManager.service_unavailable(
            error="Database unavailable", message=str(e)
        )

    @app.errorhandler(PyMongoError)
    def database_error(e):
        # the connection dropped after READY, or the driver gave up on a query
        app.logger.error(f"❌ database operation failed: {e}")
        return ResponseManager.service_unavailable(
            error="Database unavailable", message="database operation failed"
        )

    @app.errorhandler(InternalServerError)
    def internal_error(e):
        if not _is_api_request():
            return e
        return ResponseManager.internal()


def create_flask_app(
    env: str = None,
    auth_blueprint: Blueprint = None,
    mongodb: MongoDBManager = None,
):
    """
    Build the single Flask app of the process.

    Args:
        env (str, optional): config name (development / production / testing),
            defaults to FLASK_ENV.
        auth_blueprint (Blueprint, optional): router mounted at /api/user,
            defaults to the bundled auth blueprint.
        mongodb (MongoDBManager, optional): database connector to use instead of
            one built from DB_ACCESS.
    """
    app = Flask(__name__)

    config = get_config(env)
    app.config.from_object(config)
    config.init_app(app)

    configure_logging(app)

    # Database connector: started here, never awaited
    if mongodb is None:
        mongodb = MongoDBManager.from_config(app.config, logger=app.logger)
    app.extensions["mongodb"] = mongodb
    mongodb.connect_async()

    # JSON body parser runs before every route
    JSONBodyParser.init_app(app)

    # Register Blueprints
    from .routes.site import site_bp
    from .routes.auth import auth_bp

    app.register_blueprint(site_bp)
    app.register_blueprint(auth_blueprint or auth_bp, url_prefix=API_USER_PREFIX)

    _register_error_handlers(app)

    @app.after_request
    def no_cache(response):
        if _is_api_request():
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, max-age=0"
            response.headers["Pragma"] = "no-cache"
        return response

    # Login attempts counter, one registry per app
    app.metrics_registry = CollectorRegistry()
    app.login_metrics = Counter(
        'auth_login_attempts_total',
        'Number of login attempts',
        ['status'],
        registry=app.metrics_registry,
    )

    # Initialize metrics to 0 so every series is exported from the start
    for status in LoginStatus.all():
        app.login_metrics.labels(status=status).inc(0)

    return app
