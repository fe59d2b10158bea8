from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timezone-aware current time; stored timestamps are always UTC."""
    return datetime.now(timezone.utc)
