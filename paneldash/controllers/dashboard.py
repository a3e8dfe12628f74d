from flask import Blueprint, render_template

from ..utils.decorators import login_required

bp = Blueprint("dashboard", __name__)


@bp.get("/")
@login_required
def index(ctx):
    return render_template(
        "dashboard.html",
        user=ctx.user,
        panel=ctx.panel,
        signed_in_at=ctx.session.authenticated_at,
    )
