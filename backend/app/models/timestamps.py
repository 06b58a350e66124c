from datetime import datetime, timezone

from sqlalchemy import DateTime

# All timestamps are timezone-aware UTC (TIMESTAMPTZ on PostgreSQL)
TZDateTime = DateTime(timezone=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
