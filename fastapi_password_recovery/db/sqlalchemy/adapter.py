"""SQLAlchemy user store for password recovery."""

from datetime import UTC, datetime
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fastapi_password_recovery.db.protocols import RecoveryUserProtocol
from fastapi_password_recovery.protocols import RecoveryAccount
from fastapi_password_recovery.security import normalize_email


UserType = TypeVar("UserType", bound=RecoveryUserProtocol)


class SQLAlchemyUserStore(Generic[UserType]):
    """
    SQLAlchemy implementation of the UserStore protocol.

    Wraps an AsyncSession and a user model using BaseRecoveryUserTable.
    Emails are compared case-insensitively.

    Example:
        ```python
        async def get_user_store(
            session: AsyncSession = Depends(get_async_session)
        ) -> SQLAlchemyUserStore[User]:
            return SQLAlchemyUserStore(session, User, display_name_field="full_name")
        ```
    """

    def __init__(
        self,
        session: AsyncSession,
        user_model: type[UserType],
        display_name_field: str | None = None,
    ) -> None:
        """
        Initialize the user store.

        Args:
            session: SQLAlchemy async session
            user_model: User model class inheriting from BaseRecoveryUserTable
            display_name_field: Attribute used to greet the user in emails
        """
        self.session = session
        self.user_model = user_model
        self.display_name_field = display_name_field

    async def get_by_email(self, email: str) -> UserType | None:
        """
        Retrieve user by email address, ignoring case.

        Args:
            email: Email address to search for

        Returns:
            User object if found, None otherwise
        """
        column = self.user_model.email  # type: ignore[attr-defined]
        statement = select(self.user_model).where(
            func.lower(column) == normalize_email(email)
        )
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_account(self, email: str) -> RecoveryAccount | None:
        """
        Retrieve the account registered under *email*.

        Returns:
            RecoveryAccount if found, None otherwise
        """
        user = await self.get_by_email(email)
        if user is None:
            return None

        display_name = None
        if self.display_name_field:
            display_name = getattr(user, self.display_name_field, None)
        return RecoveryAccount(email=user.email, display_name=display_name)

    async def set_password(self, email: str, password_hash: str) -> bool:
        """
        Store a new password hash for *email*.

        Returns:
            True if a user was updated, False if no user has that email
        """
        user = await self.get_by_email(email)
        if user is None:
            return False

        user.password_hash = password_hash
        user.password_changed_at = datetime.now(UTC)
        await self.session.commit()
        return True
