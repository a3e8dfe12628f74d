import logging
import math
import time

from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for
from flask_limiter.errors import RateLimitExceeded

from ..exceptions import InvalidCredentials, InvalidResetToken, PasswordPolicyError, TooManyLoginAttempts
from ..extensions import limiter
from ..utils.decorators import auth_gate, guest_only

bp = Blueprint("auth", __name__, url_prefix="/")

logger = logging.getLogger(__name__)


def _reset_service():
    return current_app.extensions["password_reset"]


def _login_limit() -> str:
    cfg = current_app.config
    return f"{cfg['LOGIN_MAX_ATTEMPTS']} per {cfg['LOGIN_DECAY_SECONDS']} seconds"


def _login_key() -> str:
    """Failed logins are counted per email and client address."""
    email = (request.form.get("email") or "").strip().lower()
    return f"{email}|{request.remote_addr or '-'}"


def _clear_login_limit() -> None:
    for lim in limiter.current_limits:
        limiter.limiter.clear(lim.limit, *lim.request_args)


@bp.errorhandler(RateLimitExceeded)
def login_rate_limited(e):
    current = limiter.current_limit
    if current is not None:
        retry_after = max(1, math.ceil(current.reset_at - time.time()))
    else:
        retry_after = current_app.config["LOGIN_DECAY_SECONDS"]
    email = (request.form.get("email") or "").strip()
    logger.warning("Login locked out for %s (retry in %ss)", _login_key(), retry_after)
    error = TooManyLoginAttempts(retry_after).message
    return render_template("auth/login.html", email=email, error=error), 429


@bp.get("login")
def login_form():
    return render_template("auth/login.html")


@bp.post("login")
@limiter.limit(_login_limit, key_func=_login_key, deduct_when=lambda response: response.status_code == 422)
@guest_only
def login_submit():
    email = (request.form.get("email") or "").strip()
    password = request.form.get("password") or ""
    remember = request.form.get("remember") in ("1", "on", "true")

    if not email or not password:
        return render_template("auth/login.html", email=email,
                               error="Email and password are required."), 422

    gate = auth_gate()
    try:
        gate.login(session, email, password, remember=remember)
    except InvalidCredentials as e:
        return render_template("auth/login.html", email=email, error=e.message), 422

    _clear_login_limit()
    session.permanent = remember
    return redirect(gate.pull_intended(session, url_for("dashboard.index")))


@bp.post("logout")
def logout():
    response = auth_gate().logout(session)
    flash("You have been signed out.", "info")
    return response


@bp.get("password-reset/request")
def password_reset_request_form():
    return render_template("auth/password_reset_request.html")


@bp.post("password-reset/request")
@guest_only
def password_reset_request_submit():
    email = (request.form.get("email") or "").strip()
    if not email:
        return render_template("auth/password_reset_request.html",
                               error="Email is required."), 422

    _reset_service().request_reset(email)
    # Same answer whether or not the account exists
    flash("If that email belongs to an account, we have sent a password reset link.", "success")
    return redirect(url_for("auth.password_reset_request_form"))


@bp.get("password-reset/reset")
def password_reset_form():
    token = request.args.get("token", "")
    user = _reset_service().verify(token)
    if user is None:
        flash(InvalidResetToken().message, "danger")
        return redirect(url_for("auth.password_reset_request_form"))
    return render_template("auth/password_reset.html", token=token, email=user.email)


@bp.post("password-reset/reset")
@guest_only
def password_reset_submit():
    token = request.form.get("token", "")
    password = request.form.get("password") or ""
    confirmation = request.form.get("password_confirmation") or ""

    service = _reset_service()
    try:
        service.reset(token, password, confirmation)
    except InvalidResetToken as e:
        flash(e.message, "danger")
        return redirect(url_for("auth.password_reset_request_form"))
    except PasswordPolicyError as e:
        user = service.verify(token)
        return render_template("auth/password_reset.html", token=token,
                               email=user.email if user else "", error=e.message), 422

    flash("Your password has been reset. Please sign in.", "success")
    return redirect(url_for("auth.login_form"))
