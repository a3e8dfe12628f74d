import logging

from flask import Flask

from .cli import register_cli
from .config import Config, from_env
from .controllers.auth import bp as auth_bp
from .controllers.dashboard import bp as dashboard_bp
from .extensions import limiter
from .models.panel import Panel, PanelRegistry
from .models.store import Store
from .services.auth_gate import SessionAuthGate
from .services.password_reset import PasswordResetService
from .utils.filters import fmt_iso_local


def create_app(config=None, store: Store | None = None, overrides: dict | None = None):
    app = Flask(__name__, static_folder="static", template_folder="templates")
    app.config.from_object(Config)
    app.config.update(from_env(Config))
    if config is not None:
        app.config.from_object(config)
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])

    if store is None:
        store = Store(app.config["STORE_PATH"])
    panels = PanelRegistry([Panel(id=app.config["PANEL_ID"], path="/", brand_name=app.config["PANEL_BRAND"])])
    panel = panels.get(app.config["PANEL_ID"])

    app.extensions["store"] = store
    app.extensions["panels"] = panels
    app.extensions["auth_gate"] = SessionAuthGate(
        store,
        panel,
        session_lifetime=app.config["AUTH_SESSION_LIFETIME"],
        remember_lifetime=app.config["AUTH_REMEMBER_LIFETIME"],
    )
    app.extensions["password_reset"] = PasswordResetService(
        store,
        expiry_minutes=app.config["PASSWORD_RESET_EXPIRY_MINUTES"],
        min_length=app.config["PASSWORD_MIN_LENGTH"],
        notifier=app.config.get("PASSWORD_RESET_NOTIFIER"),
    )

    limiter.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.jinja_env.filters["fmt_iso_local"] = fmt_iso_local
    app.context_processor(lambda: {"panel_brand": panel.brand_name})
    register_cli(app)

    return app
