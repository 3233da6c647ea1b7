import os

from flask import Flask, jsonify

from .controllers.api import bp as api_bp
from .controllers.wizard import bp as wizard_bp
from .models.store import DEFAULT_DATA_PATH, Store
from .utils.constants import DEFAULT_TIMEZONE, OverlapPolicy
from .utils.logging import setup_logging


def _default_config() -> dict:
    app_env = os.getenv("APP_ENV", "development")
    return {
        "SECRET_KEY": os.getenv("SECRET_KEY", "dev-secret-change-me"),
        "APP_ENV": app_env,
        "DATA_PATH": os.getenv("DATA_PATH", str(DEFAULT_DATA_PATH)),
        "TIMEZONE": os.getenv("APP_TIMEZONE", DEFAULT_TIMEZONE),
        "OVERLAP_POLICY": os.getenv("OVERLAP_POLICY", OverlapPolicy.CLOSED),
        # invalid wizard transitions raise outside production, are ignored in it
        "WIZARD_STRICT": os.getenv("WIZARD_STRICT", "false" if app_env == "production" else "true").lower() == "true",
    }


def create_app(config: dict | None = None):
    setup_logging()
    app = Flask(__name__)
    app.config.update(_default_config())
    if config:
        app.config.update(config)

    if app.config["OVERLAP_POLICY"] not in OverlapPolicy.ALL:
        raise ValueError(f"Unknown OVERLAP_POLICY: {app.config['OVERLAP_POLICY']!r}")

    store = Store.instance(app.config["DATA_PATH"])  # load data.pkl or init empty
    if store.path != str(app.config["DATA_PATH"]):
        Store.reset_instance(app.config["DATA_PATH"])

    app.register_blueprint(api_bp)
    app.register_blueprint(wizard_bp)

    @app.get("/")
    def home():
        return jsonify({"status": "ok"})

    return app
