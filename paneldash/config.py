"""
Application configuration.

Defaults live on `Config`; any key can be overridden with a
`PANELDASH_<KEY>` environment variable or by the mapping passed to
`create_app`.
"""

import os

ENV_PREFIX = "PANELDASH_"


class Config:
    SECRET_KEY = "dev-secret-change-me"

    # Credential store (None keeps users in memory only)
    STORE_PATH = "data.pkl"

    # Panel
    PANEL_ID = "app"
    PANEL_BRAND = "Admin"

    # Sessions
    AUTH_SESSION_LIFETIME = 2 * 3600  # seconds
    AUTH_REMEMBER_LIFETIME = 30 * 24 * 3600
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # Login throttling (Flask-Limiter)
    LOGIN_MAX_ATTEMPTS = 5
    LOGIN_DECAY_SECONDS = 60
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"

    # Passwords
    PASSWORD_MIN_LENGTH = 8
    PASSWORD_RESET_EXPIRY_MINUTES = 60

    # Display
    DISPLAY_TIMEZONE = "UTC"

    LOG_LEVEL = "INFO"


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    STORE_PATH = None
    LOG_LEVEL = "DEBUG"


def _coerce(default, raw: str):
    if isinstance(default, bool):
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(default, int):
        return int(raw)
    return raw


def from_env(config_obj) -> dict:
    """Collect PANELDASH_* environment overrides for keys defined on `config_obj`."""
    out = {}
    for key in dir(config_obj):
        if not key.isupper():
            continue
        raw = os.getenv(ENV_PREFIX + key)
        if raw is None:
            continue
        out[key] = _coerce(getattr(config_obj, key), raw)
    return out
