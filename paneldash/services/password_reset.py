"""
Password reset service.

Handles:
- Issuing reset tokens (only a SHA-256 digest is kept, one live token per user)
- Handing the reset link to a notifier
- Verifying tokens
- Completing the reset
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..exceptions import InvalidResetToken, PasswordPolicyError
from ..models.store import Store
from ..models.user import User
from ..utils.security import generate_hash, new_token, token_digest

logger = logging.getLogger(__name__)


def log_notifier(user: User, token: str) -> None:
    """Default notifier: there is no mailer, so the token goes to the log."""
    logger.info("Password reset requested for %s (token=%s)", user.email, token)


class PasswordResetService:
    def __init__(
        self,
        store: Store,
        expiry_minutes: int = 60,
        min_length: int = 8,
        notifier: Callable[[User, str], None] | None = None,
        now: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.expiry = timedelta(minutes=expiry_minutes)
        self.min_length = min_length
        self.notifier = notifier or log_notifier
        self._now = now or (lambda: datetime.now(timezone.utc))
        # {token_digest: (user_id, expires_at)}
        self._tokens: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def request_reset(self, email: str) -> str | None:
        """
        Issue a reset token for `email` and notify the user.

        Returns the raw token, or None when no such user exists. Callers
        must not reveal which of the two happened.
        """
        user = User.from_dict(self.store.find_user_by_email(email))
        if user is None:
            logger.debug("Password reset requested for unknown email")
            return None

        token = new_token()
        with self._lock:
            self._invalidate(user.user_id)
            self._tokens[token_digest(token)] = (user.user_id, self._now() + self.expiry)
        self.notifier(user, token)
        return token

    def verify(self, token: str | None) -> User | None:
        """Return the user a live token belongs to, or None."""
        if not token:
            return None
        digest = token_digest(token)
        with self._lock:
            entry = self._tokens.get(digest)
            if entry is None:
                return None
            user_id, expires_at = entry
            if self._now() >= expires_at:
                del self._tokens[digest]
                logger.debug("Password reset token expired for user %s", user_id)
                return None
        user = User.from_dict(self.store.get_user(user_id))
        if user is None:
            with self._lock:
                self._tokens.pop(digest, None)
        return user

    def check_policy(self, password: str, confirmation: str) -> None:
        if len(password or "") < self.min_length:
            raise PasswordPolicyError(f"Password must be at least {self.min_length} characters.")
        if password != confirmation:
            raise PasswordPolicyError("Password confirmation does not match.")

    def reset(self, token: str, password: str, confirmation: str) -> User:
        """Set a new password for the token's user and burn all their tokens."""
        user = self.verify(token)
        if user is None:
            raise InvalidResetToken()
        self.check_policy(password, confirmation)

        self.store.update_password(user.user_id, generate_hash(password))
        with self._lock:
            self._invalidate(user.user_id)
        logger.info("Password reset completed for %s", user.email)
        return user

    def _invalidate(self, user_id: str) -> None:
        for digest in [d for d, (uid, _) in self._tokens.items() if uid == user_id]:
            del self._tokens[digest]
