from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config
from .errors import register_error_handlers
from models import storage

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Sahwa API",
        "version": "1.0.0",
        "description": "Accountability circles: daily pillar check-ins, rotating clips and shared journals.",
    },
    "basePath": "/",
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


def create_app(config_name: str | None = None, **overrides) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    Keyword overrides are applied on top of the selected config class
    (tests use this to point DATABASE_URL at a scratch database).
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config)
    app.config.from_object(get_config(config_name))
    app.config.update(overrides)
    if not app.config.get("JWT_SECRET"):
        raise RuntimeError("JWT_SECRET must be set")

    # Bind the shared storage to this app's database
    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform {"error": ...} envelope for every failure
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .circles import bp as circles_bp
    from .checkins import bp as checkins_bp
    from .clips import bp as clips_bp
    from .journals import bp as journals_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(circles_bp)
    app.register_blueprint(checkins_bp)
    app.register_blueprint(clips_bp)
    app.register_blueprint(journals_bp)

    # Remove the scoped session at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to Sahwa API",
            "docs": "/apidocs/",
            "health": "/health",
        }, 200

    return app
