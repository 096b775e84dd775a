"""Example FastAPI application with password recovery using MongoDB.

This example demonstrates:
- Setting up a user model with BaseRecoveryUserDocument (Pydantic)
- Creating a MongoDB connection and MongoDBUserStore
- Logging delivery instead of sending mail
- Registering the recovery router behind a trusted proxy
- Creating the email index the store relies on
"""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pydantic import Field

from fastapi_password_recovery import (
    BaseRecoveryUserDocument,
    CredentialRecoveryService,
    MongoDBUserStore,
    PasswordRecoveryConfig,
    RateLimitRule,
    RateLimitRuleType,
    configure_logging,
    get_logger,
    get_recovery_router,
)
from fastapi_password_recovery.logging import mask_email
from fastapi_password_recovery.rate_limit import DEFAULT_RATE_LIMITS

# MongoDB configuration
MONGODB_URL = "mongodb://localhost:27017"
DATABASE_NAME = "library_recovery_example"

# MongoDB client
client: AsyncIOMotorClient = AsyncIOMotorClient(MONGODB_URL)
database: AsyncIOMotorDatabase = client[DATABASE_NAME]

log = get_logger(__name__)


# User model with password recovery support
class Member(BaseRecoveryUserDocument):
    """Library member document."""

    name: str = Field(..., description="Display name", max_length=100)
    card_number: str | None = Field(None, description="Library card number")


class LoggingEmailDelivery:
    """Logs the delivery only. Developer mode codes are always 000000."""

    async def send_otp(self, email: str, code: str, display_name: str | None) -> bool:
        log.info("example_otp_sent", email=mask_email(email))
        return True


# Recovery configuration
class ProxyRecoveryConfig(PasswordRecoveryConfig):
    """Configuration for an app running behind a reverse proxy."""

    developer_mode = True  # Set to False in production!
    trust_forwarded_for = True

    otp_expiry = timedelta(minutes=5)
    rate_limits = {
        **DEFAULT_RATE_LIMITS,
        RateLimitRuleType.VERIFY_BY_IP: RateLimitRule(timedelta(minutes=1), 20),
    }


service = CredentialRecoveryService(
    config=ProxyRecoveryConfig(),
    email_delivery=LoggingEmailDelivery(),
    user_store=MongoDBUserStore(
        database=database,
        user_collection_name="members",
        user_model_class=Member,
        display_name_field="name",
    ),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create indexes, seed a member and run the cleanup sweeper."""
    configure_logging("INFO", json=True)

    members = database["members"]
    await members.create_index("email", unique=True)

    if await members.find_one({"email": "ada@library.org"}) is None:
        await members.insert_one(
            {
                "email": "ada@library.org",
                "name": "Ada Reader",
                "password_hash": service.config.hash_password("initial-password"),
                "password_changed_at": None,
            }
        )

    async with service:
        yield

    client.close()


app = FastAPI(
    title="FastAPI Password Recovery Example (MongoDB)",
    description="Example application demonstrating password recovery with MongoDB",
    lifespan=lifespan,
)
app.include_router(get_recovery_router(service), prefix="/auth", tags=["Recovery"])


@app.get("/")
async def root() -> dict[str, str]:
    """Public endpoint."""
    return {
        "message": "Welcome to FastAPI Password Recovery with MongoDB",
        "docs": "/docs",
        "database": "MongoDB",
    }


if __name__ == "__main__":
    import uvicorn

    print("""
    Starting FastAPI Password Recovery Example with MongoDB

    Prerequisites:
    - MongoDB running on localhost:27017

    Developer mode is on, so every code is 000000:

    1. POST http://localhost:8000/auth/forgot-password
       {"email": "ada@library.org"}

    2. POST http://localhost:8000/auth/verify-otp
       {"email": "ada@library.org", "code": "000000"}

    3. POST http://localhost:8000/auth/reset-password
       {"reset_token": "<reset_token>", "new_password": "a-new-password"}

    API Docs: http://localhost:8000/docs
    """)

    uvicorn.run(app, host="0.0.0.0", port=8000)
