"""Protocols for the collaborators the recovery service depends on."""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class RecoveryAccount:
    """The parts of a user account the recovery flow needs."""

    email: str
    display_name: str | None = None


@runtime_checkable
class EmailDelivery(Protocol):
    """
    Out-of-band delivery of OTP codes.

    Delivery is best effort: returning False (or raising) does not invalidate
    the issued code.

    Example:
        ```python
        class ConsoleDelivery:
            async def send_otp(
                self, email: str, code: str, display_name: str | None
            ) -> bool:
                print(f"OTP for {display_name or email}: {code}")
                return True
        ```
    """

    async def send_otp(self, email: str, code: str, display_name: str | None) -> bool:
        """Send *code* to *email*; return whether delivery was accepted."""
        ...


@runtime_checkable
class UserStore(Protocol):
    """
    Access to the host application's user accounts.

    Implementations must match emails case-insensitively. Reference
    implementations are SQLAlchemyUserStore and MongoDBUserStore.
    """

    async def get_account(self, email: str) -> RecoveryAccount | None:
        """Return the account registered under *email*, if any."""
        ...

    async def set_password(self, email: str, password_hash: str) -> bool:
        """Persist *password_hash* for *email*; return False if nothing changed."""
        ...
