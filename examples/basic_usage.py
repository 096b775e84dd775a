"""Example FastAPI application with password recovery.

This example demonstrates:
- Setting up a user model with BaseRecoveryUserTable
- Wrapping SQLAlchemyUserStore so each call gets its own session
- Implementing EmailDelivery with a console stand-in for a mail provider
- Registering the recovery router and running the cleanup sweeper
  from the application lifespan
"""
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from sqlalchemy import Integer, String
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from fastapi_password_recovery import (
    BaseRecoveryUserTable,
    CredentialRecoveryService,
    PasswordRecoveryConfig,
    RecoveryAccount,
    SQLAlchemyUserStore,
    configure_logging,
    get_logger,
    get_recovery_router,
)

# Database configuration
DATABASE_URL = "sqlite+aiosqlite:///./library.db"

log = get_logger(__name__)


# Create declarative base
class Base(DeclarativeBase):
    pass


# User model with password recovery support
class User(BaseRecoveryUserTable, Base):
    """Library member."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)


# Create async engine and session maker
engine = create_async_engine(DATABASE_URL)
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


class LibraryUserStore:
    """Opens a short-lived session for every user store call."""

    async def get_account(self, email: str) -> RecoveryAccount | None:
        async with async_session_maker() as session:
            store = SQLAlchemyUserStore(session, User, display_name_field="full_name")
            return await store.get_account(email)

    async def set_password(self, email: str, password_hash: str) -> bool:
        async with async_session_maker() as session:
            return await SQLAlchemyUserStore(session, User).set_password(
                email, password_hash
            )


class ConsoleEmailDelivery:
    """
    Prints codes instead of sending them.

    In production, call your mail provider here and return False (or raise)
    when the message could not be handed over.
    """

    async def send_otp(self, email: str, code: str, display_name: str | None) -> bool:
        greeting = display_name or "reader"
        print(f"\nTo {email}: Hello {greeting}, your password reset code is {code}\n")
        return True


# Recovery configuration
class LibraryRecoveryConfig(PasswordRecoveryConfig):
    """Custom recovery configuration."""

    developer_mode = False  # codes are 000000 when True; never in production!

    otp_expiry = timedelta(minutes=10)
    max_otp_attempts = 5
    reset_token_expiry = timedelta(minutes=15)
    min_password_length = 10


service = CredentialRecoveryService(
    config=LibraryRecoveryConfig(),
    email_delivery=ConsoleEmailDelivery(),
    user_store=LibraryUserStore(),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables, seed a member and run the cleanup sweeper."""
    configure_logging("INFO")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        existing = await SQLAlchemyUserStore(session, User).get_by_email(
            "ada@library.org"
        )
        if existing is None:
            session.add(
                User(
                    email="ada@library.org",
                    password_hash=service.config.hash_password("initial-password"),
                    full_name="Ada Reader",
                )
            )
            await session.commit()
            log.info("example_member_created", email="a***@library.org")

    async with service:
        yield

    await engine.dispose()


app = FastAPI(
    title="FastAPI Password Recovery Example",
    description="Example application demonstrating OTP based password recovery",
    lifespan=lifespan,
)
app.include_router(get_recovery_router(service), prefix="/auth", tags=["Recovery"])


@app.get("/")
async def root() -> dict[str, str]:
    """Public endpoint."""
    return {
        "message": "Welcome to FastAPI Password Recovery",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    print("""
    Starting FastAPI Password Recovery Example

    Try the following flow:

    1. Request a code:
       POST http://localhost:8000/auth/forgot-password
       {"email": "ada@library.org"}
       -> the code is printed to this console

    2. Exchange it for a reset token:
       POST http://localhost:8000/auth/verify-otp
       {"email": "ada@library.org", "code": "<code>"}

    3. Set a new password:
       POST http://localhost:8000/auth/reset-password
       {"reset_token": "<reset_token>", "new_password": "a-new-password"}

    API Docs: http://localhost:8000/docs
    """)

    uvicorn.run(app, host="0.0.0.0", port=8000)
