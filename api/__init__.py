import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage  # DBStorage singleton (scoped_session)
from models.credential_store import CredentialStore
from models.token_ledger import TokenLedger
from services.auth_gate import AuthGate
from services.session_manager import SessionManager
from utils.security import SigningKeys, build_password_hasher

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0.0",
    "info": {
        "title": "Task Tracker API",
        "version": "1.0.0",
        "description": "REST API for registering, authenticating and managing personal tasks.",
    },
    "basePath": "/",  # blueprints are mounted under /api
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def build_session_manager(config, signing_keys: SigningKeys) -> SessionManager:
    password_hasher = build_password_hasher(
        time_cost=config["PASSWORD_HASH_TIME_COST"],
        memory_cost=config["PASSWORD_HASH_MEMORY_COST"],
        parallelism=config["PASSWORD_HASH_PARALLELISM"],
    )
    return SessionManager(
        credential_store=CredentialStore(storage),
        token_ledger=TokenLedger(storage),
        signing_keys=signing_keys,
        access_ttl=config["JWT_ACCESS_EXPIRES"],
        refresh_ttl=config["JWT_REFRESH_EXPIRES"],
        password_hasher=password_hasher,
    )


def create_app(config_name: str | None = None, signing_keys: SigningKeys | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    The signing key pair is loaded once here (or injected, e.g. by tests) and
    handed to the SessionManager and the AuthGate; nothing else reads it.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Register global error handlers that return the uniform error envelope
    register_error_handlers(app)

    storage.reload(app.config["DATABASE_URL"])

    if signing_keys is None:
        signing_keys = SigningKeys.from_files(
            app.config["JWT_PRIVATE_KEY_PATH"],
            app.config["JWT_PUBLIC_KEY_PATH"],
            algorithm=app.config["JWT_ALGORITHM"],
        )
    app.extensions["session_manager"] = build_session_manager(app.config, signing_keys)
    app.extensions["auth_gate"] = AuthGate(signing_keys, leeway=app.config["JWT_LEEWAY_SECONDS"])

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .todos import bp as todos_bp

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(todos_bp, url_prefix="/api/todos")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        # calls scoped_session.remove(), preventing connection leaks
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Task Tracker API",
            "docs": "/apidocs/",
            "health": "/api/health",
        }, 200

    return app
