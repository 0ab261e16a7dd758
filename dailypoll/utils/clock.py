from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app


def local_now() -> datetime:
    """Wall-clock time used for "today" and the poll window.

    Uses POLL_TIMEZONE when configured, server local time otherwise. The
    result is naive so it compares directly with the stored Date/Time columns.
    """
    tz_name = current_app.config.get("POLL_TIMEZONE")
    if tz_name:
        return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
    return datetime.now()
