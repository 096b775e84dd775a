"""Custom SQLAlchemy types for timezone-aware datetime handling."""

from datetime import UTC, datetime

from sqlalchemy import types
from sqlalchemy.engine import Dialect


class UTCDateTime(types.TypeDecorator):
    """
    DateTime column that stores naive UTC and always loads aware UTC values.

    SQLite drops tzinfo on round trip; this type makes ``password_changed_at``
    comparable with the recovery clock on every backend. Naive values are
    assumed to already be UTC.
    """

    impl = types.DateTime
    cache_ok = True

    def process_bind_param(
        self, value: datetime | None, _dialect: Dialect
    ) -> datetime | None:
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(UTC).replace(tzinfo=None)

    def process_result_value(
        self, value: datetime | None, _dialect: Dialect
    ) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
