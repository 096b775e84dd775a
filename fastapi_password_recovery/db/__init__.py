"""User store implementations for fastapi-password-recovery."""

from fastapi_password_recovery.db.protocols import RecoveryUserProtocol
from fastapi_password_recovery.db.sqlalchemy.adapter import SQLAlchemyUserStore
from fastapi_password_recovery.db.sqlalchemy.models import BaseRecoveryUserTable
from fastapi_password_recovery.db.sqlalchemy.types import UTCDateTime

__all__ = [
    "BaseRecoveryUserTable",
    "RecoveryUserProtocol",
    "SQLAlchemyUserStore",
    "UTCDateTime",
]

# Conditionally export MongoDB classes if motor is installed
try:
    from fastapi_password_recovery.db.mongodb.adapter import MongoDBUserStore
    from fastapi_password_recovery.db.mongodb.models import BaseRecoveryUserDocument

    __all__ += ["BaseRecoveryUserDocument", "MongoDBUserStore"]
except ImportError:
    # MongoDB support not installed
    pass
