import secrets
import string
import time
from datetime import datetime, timezone

_ALPHABET = string.digits + string.ascii_lowercase


def new_record_id() -> str:
    """Millisecond timestamp plus nine random base-36 characters.

    Collisions are unlikely, not impossible.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}_{suffix}"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
