from functools import wraps

from flask import current_app, flash, redirect, request, session, url_for


def auth_gate():
    """The SessionAuthGate registered on the running app."""
    return current_app.extensions["auth_gate"]


def login_required(fn):
    """
    Protect a view with the auth gate. The wrapped view receives the
    PanelContext as its first argument.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        return auth_gate().guard(
            session,
            lambda ctx: fn(ctx, *args, **kwargs),
            intended=request.full_path.rstrip("?") if request.method == "GET" else None,
            on_anonymous=lambda: flash("Please sign in first", "warning"),
        )

    return wrapper


def guest_only(fn):
    """Send already signed-in users to the dashboard."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if auth_gate().authorize(session).is_authenticated:
            return redirect(url_for("dashboard.index"))
        return fn(*args, **kwargs)

    return wrapper
