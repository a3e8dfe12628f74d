"""
Session auth gate for a single admin panel.

The gate decides, per request, whether the client holds a valid signed-in
session. It never reaches for ambient request globals to find the session or
the panel: callers pass the session mapping in, and protected views receive
the signed-in user and the panel as an explicit `PanelContext`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, MutableMapping

from flask import abort, redirect, url_for

from ..exceptions import InvalidCredentials
from ..models.panel import Panel
from ..models.store import Store
from ..models.user import ANONYMOUS, AnonymousUser, User
from ..utils.security import is_safe_path, token_digest

logger = logging.getLogger(__name__)

# Session keys written by the gate
USER_KEY = "user_id"
PANEL_KEY = "panel_id"
AUTH_AT_KEY = "auth_at"
EXPIRES_KEY = "auth_expires"
REMEMBER_KEY = "remember"
PASSWORD_KEY = "password_fp"
INTENDED_KEY = "url_intended"

AUTH_KEYS = (USER_KEY, PANEL_KEY, AUTH_AT_KEY, EXPIRES_KEY, REMEMBER_KEY, PASSWORD_KEY)


@dataclass(frozen=True)
class AuthSession:
    """A user's signed-in binding to one panel."""
    user_id: str
    panel_id: str
    authenticated_at: float
    expires_at: float
    remember: bool = False


@dataclass(frozen=True)
class PanelContext:
    """What a protected view needs to know about the current request."""
    user: User
    panel: Panel
    session: AuthSession


class SessionAuthGate:
    def __init__(
        self,
        store: Store,
        panel: Panel,
        session_lifetime: int = 7200,
        remember_lifetime: int = 30 * 24 * 3600,
        login_endpoint: str = "auth.login_form",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.panel = panel
        self.session_lifetime = session_lifetime
        self.remember_lifetime = remember_lifetime
        self.login_endpoint = login_endpoint
        self._clock = clock

    # ---------- Sessions ----------
    def login(
        self,
        sess: MutableMapping,
        email: str,
        password: str,
        remember: bool = False,
    ) -> AuthSession:
        """
        Check credentials and bind `sess` to the matching user.

        Raises InvalidCredentials when the email/password pair is wrong.
        """
        user = self.store.verify_credentials(email, password)
        if user is None:
            logger.info("Failed login for %s", (email or "").strip().lower())
            raise InvalidCredentials()

        # New identity, new session: keep only where the user was heading
        intended = sess.get(INTENDED_KEY)
        sess.clear()
        if intended:
            sess[INTENDED_KEY] = intended

        now = self._clock()
        lifetime = self.remember_lifetime if remember else self.session_lifetime
        auth = AuthSession(
            user_id=user["user_id"],
            panel_id=self.panel.id,
            authenticated_at=now,
            expires_at=now + lifetime,
            remember=bool(remember),
        )
        sess[USER_KEY] = auth.user_id
        sess[PANEL_KEY] = auth.panel_id
        sess[AUTH_AT_KEY] = auth.authenticated_at
        sess[EXPIRES_KEY] = auth.expires_at
        sess[REMEMBER_KEY] = auth.remember
        sess[PASSWORD_KEY] = self.password_fingerprint(user["password_hash"])
        logger.info("User %s signed in to panel '%s'", auth.user_id, auth.panel_id)
        return auth

    def current_session(self, sess: MutableMapping) -> AuthSession | None:
        """Return the AuthSession stored in `sess`, or None if there is none."""
        user_id = sess.get(USER_KEY)
        if not user_id:
            return None
        try:
            return AuthSession(
                user_id=user_id,
                panel_id=sess.get(PANEL_KEY, ""),
                authenticated_at=float(sess.get(AUTH_AT_KEY, 0)),
                expires_at=float(sess.get(EXPIRES_KEY, 0)),
                remember=bool(sess.get(REMEMBER_KEY, False)),
            )
        except (TypeError, ValueError):
            return None

    def authorize(self, sess: MutableMapping) -> User | AnonymousUser:
        """
        Return the user bound to `sess`, or ANONYMOUS.

        Sessions for another panel, past their expiry, pointing at a
        deleted user, or issued before a password change are dropped.
        """
        auth = self.current_session(sess)
        if auth is None:
            if sess.get(USER_KEY):
                self._forget(sess)
            return ANONYMOUS

        if auth.panel_id != self.panel.id or self._clock() >= auth.expires_at:
            logger.debug("Dropping stale session for user %s", auth.user_id)
            self._forget(sess)
            return ANONYMOUS

        stored = self.store.get_user(auth.user_id)
        if stored is None:
            logger.debug("Dropping session for missing user %s", auth.user_id)
            self._forget(sess)
            return ANONYMOUS

        if sess.get(PASSWORD_KEY) != self.password_fingerprint(stored["password_hash"]):
            logger.debug("Dropping session for user %s after password change", auth.user_id)
            self._forget(sess)
            return ANONYMOUS
        return User.from_dict(stored)

    def logout(self, sess: MutableMapping):
        """Destroy the session (if any) and redirect to the login page."""
        user_id = sess.get(USER_KEY)
        sess.clear()
        if user_id:
            logger.info("User %s signed out", user_id)
        return redirect(url_for(self.login_endpoint))

    @staticmethod
    def password_fingerprint(password_hash: str) -> str:
        """Short digest of the password hash; a new password invalidates old sessions."""
        return token_digest(password_hash)[-16:]

    @staticmethod
    def _forget(sess: MutableMapping) -> None:
        for k in AUTH_KEYS:
            sess.pop(k, None)

    # ---------- Request guard ----------
    def guard(
        self,
        sess: MutableMapping,
        resource: Callable[[PanelContext], object],
        intended: str | None = None,
        on_anonymous: Callable[[], None] | None = None,
    ):
        """
        Run `resource` for a signed-in user allowed into the panel.

        Anonymous clients are redirected to the login page, remembering
        `intended` so login can send them back; `on_anonymous` runs first
        (the caller uses it to flash a message).
        """
        user = self.authorize(sess)
        if not user.is_authenticated:
            if intended:
                sess[INTENDED_KEY] = intended
            if on_anonymous is not None:
                on_anonymous()
            return redirect(url_for(self.login_endpoint))

        if not self.can_access_panel(user, self.panel):
            abort(403)

        return resource(PanelContext(user=user, panel=self.panel, session=self.current_session(sess)))

    def pull_intended(self, sess: MutableMapping, default: str) -> str:
        """Pop the path remembered by `guard`, falling back to `default`."""
        target = sess.pop(INTENDED_KEY, None)
        return target if is_safe_path(target) else default

    # ---------- Panel authorization ----------
    @staticmethod
    def can_access_panel(user, panel: Panel) -> bool:
        return bool(user.can_access_panel(panel))
