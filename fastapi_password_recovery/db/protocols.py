"""Protocols defining the user model interface the user stores rely on."""

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class RecoveryUserProtocol(Protocol):
    """
    Attributes a user model must provide to be used with a user store.

    Any user model (SQLAlchemy, Pydantic, etc.) used with the stores must
    provide these attributes.
    """

    email: str
    password_hash: str
    password_changed_at: datetime | None
