"""Jinja filters and date formatting helpers."""
from datetime import datetime, timezone

import pytz
from flask import current_app


def fmt_iso_local(value, use_12h: bool = False, tz_name: str | None = None) -> str:
    """
    Format a timestamp into the configured display timezone.
    Supports:
      - epoch seconds (int/float), as stored in the session
      - 'YYYY-MM-DD HH:MM:SS' / 'YYYY-MM-DDTHH:MM:SS'
      - Above with 'Z' or timezone offsets like '+00:00'
    On parse error, returns the original value (so the UI never goes blank).
    """
    if value is None or value == "":
        return ""

    if isinstance(value, (int, float)):
        dt = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        s = str(value).strip().replace("T", " ")
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return str(value)

    # If naive datetime, assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    if tz_name is None:
        tz_name = current_app.config.get("DISPLAY_TIMEZONE", "UTC")
    try:
        zone = pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        zone = pytz.utc
    local = dt.astimezone(zone)

    if use_12h:
        # Avoid %-I (not portable on Windows). Strip any leading zero manually.
        hh = local.strftime("%I").lstrip("0") or "0"
        return f"{local.strftime('%d %b %Y')}, {hh}:{local.strftime('%M %p')}"
    return local.strftime("%d/%m/%Y %H:%M")
