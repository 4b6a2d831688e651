from datetime import datetime, timezone


def utc_now() -> datetime:
    """Naive UTC timestamp; every DateTime column in this service stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
