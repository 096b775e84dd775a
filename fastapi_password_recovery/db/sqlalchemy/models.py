"""SQLAlchemy model mixin for users that can recover their password."""

from datetime import datetime

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column  # type: ignore[import-untyped]

from fastapi_password_recovery.db.sqlalchemy.types import UTCDateTime


class BaseRecoveryUserTable:
    """
    Mixin adding the columns SQLAlchemyUserStore reads and writes.

    Required fields:
        - email: User's email address (unique, indexed, stored lower-case)
        - password_hash: Current password hash
        - password_changed_at: When the password was last reset (nullable)

    Example:
        ```python
        from sqlalchemy.orm import DeclarativeBase

        class Base(DeclarativeBase):
            pass

        class User(BaseRecoveryUserTable, Base):
            __tablename__ = "users"

            id: Mapped[int] = mapped_column(Integer, primary_key=True)
            full_name: Mapped[str | None] = mapped_column(String(100))
        ```
    """

    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    password_changed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
