import hashlib
import secrets

from werkzeug.security import generate_password_hash, check_password_hash


def generate_hash(password: str) -> str:
    return generate_password_hash(password)


def check_hash(password: str, hashed: str) -> bool:
    try:
        return check_password_hash(hashed, password)
    except (TypeError, ValueError):
        return False


def new_token() -> str:
    """Return a url-safe random token suitable for emailing."""
    return secrets.token_urlsafe(48)


def token_digest(token: str) -> str:
    """Hash a raw token; only digests are ever stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def is_safe_path(target: str | None) -> bool:
    """Accept only local absolute paths (no scheme, no host, no '//')."""
    if not target:
        return False
    return target.startswith("/") and not target.startswith("//") and "\\" not in target
