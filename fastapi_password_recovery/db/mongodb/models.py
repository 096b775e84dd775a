"""MongoDB document model for users that can recover their password."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class BaseRecoveryUserDocument(BaseModel):
    """
    Base Pydantic model for user documents read by MongoDBUserStore.

    Users should inherit from this class and add their custom fields.

    Required fields:
        - id: MongoDB ObjectId as string (optional for auto-generation)
        - email: User's email address (unique index recommended)
        - password_hash: Current password hash
        - password_changed_at: When the password was last reset (nullable)

    Example:
        ```python
        class LibraryUser(BaseRecoveryUserDocument):
            name: str
            role: str = "student"
        ```
    """

    id: str | None = Field(default=None, alias="_id")

    email: EmailStr = Field(..., description="User's email address")

    password_hash: str = Field(..., description="Current password hash")
    password_changed_at: datetime | None = Field(
        default=None, description="When the password was last reset"
    )

    model_config = ConfigDict(
        populate_by_name=True,  # Allow both 'id' and '_id'
        from_attributes=True,
        extra="allow",
    )
