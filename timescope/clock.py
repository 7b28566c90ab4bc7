from datetime import datetime, timezone

from timescope.config import settings


def now() -> datetime:
    """Return the current evaluation instant.

    Read on every call; scope operations never cache it.
    """
    if settings.utc_now:
        return datetime.now(timezone.utc)
    return datetime.now()
