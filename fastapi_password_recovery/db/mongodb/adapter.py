"""MongoDB user store for password recovery."""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

try:
    from bson import ObjectId  # type: ignore[import-untyped]
    from motor.motor_asyncio import AsyncIOMotorDatabase  # type: ignore[import-untyped]
except ImportError as e:
    raise ImportError(
        "MongoDB support requires motor and pymongo. "
        "Install with: pip install fastapi-password-recovery[mongodb]"
    ) from e

from fastapi_password_recovery.db.mongodb.models import BaseRecoveryUserDocument
from fastapi_password_recovery.protocols import RecoveryAccount
from fastapi_password_recovery.security import normalize_email


UserType = TypeVar("UserType", bound=BaseRecoveryUserDocument)


class MongoDBUserStore(Generic[UserType]):
    """
    MongoDB implementation of the UserStore protocol.

    Wraps a Motor AsyncIOMotorDatabase. Documents must store the email
    trimmed and lower-cased; lookups normalize the address and match it
    exactly, so the unique email index serves every query.

    Example:
        ```python
        client = AsyncIOMotorClient("mongodb://localhost:27017")
        user_store = MongoDBUserStore(
            database=client.library,
            user_collection_name="users",
            user_model_class=LibraryUser,
            display_name_field="name",
        )
        ```
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        user_collection_name: str,
        user_model_class: type[UserType],
        display_name_field: str | None = None,
    ) -> None:
        """
        Initialize the MongoDB user store.

        Args:
            database: Motor AsyncIOMotorDatabase instance
            user_collection_name: Name of the users collection
            user_model_class: Pydantic model class for user documents
            display_name_field: Document field used to greet the user in emails
        """
        self.database = database
        self.user_collection = database[user_collection_name]
        self.user_model_class = user_model_class
        self.display_name_field = display_name_field

    @staticmethod
    def _email_filter(email: str) -> dict[str, Any]:
        return {"email": normalize_email(email)}

    def _deserialize_user(self, doc: dict[str, Any] | None) -> UserType | None:
        """
        Convert a MongoDB document to a Pydantic user model.

        Args:
            doc: MongoDB document dictionary

        Returns:
            User model instance or None if doc is None
        """
        if doc is None:
            return None

        if "_id" in doc and isinstance(doc["_id"], ObjectId):
            doc["_id"] = str(doc["_id"])

        # Ensure datetime fields have timezone info (for mongomock compatibility)
        changed_at = doc.get("password_changed_at")
        if isinstance(changed_at, datetime) and changed_at.tzinfo is None:
            doc["password_changed_at"] = changed_at.replace(tzinfo=UTC)

        return self.user_model_class.model_validate(doc)

    async def get_by_email(self, email: str) -> UserType | None:
        """
        Retrieve user by email address, ignoring case.

        Args:
            email: Email address to search for

        Returns:
            User object if found, None otherwise
        """
        doc = await self.user_collection.find_one(self._email_filter(email))
        return self._deserialize_user(doc)

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
        result = await self.user_collection.update_one(
            self._email_filter(email),
            {
                "$set": {
                    "password_hash": password_hash,
                    "password_changed_at": datetime.now(UTC),
                }
            },
        )
        return result.matched_count > 0
