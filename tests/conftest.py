"""Test configuration and fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.db.sqlalchemy.adapter import SQLAlchemyUserStore
from fastapi_password_recovery.db.sqlalchemy.models import BaseRecoveryUserTable
from fastapi_password_recovery.protocols import RecoveryAccount
from fastapi_password_recovery.rate_limit import RateLimitRule, RateLimitRuleType
from fastapi_password_recovery.service import CredentialRecoveryService

# ============================================================================
# Database Models for Testing
# ============================================================================


class Base(DeclarativeBase):
    """Base class for test database models."""


class User(BaseRecoveryUserTable, Base):
    """Test user model."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)


# ============================================================================
# Test Doubles
# ============================================================================


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class RecordingEmailDelivery:
    """Stores sent OTPs instead of emailing them."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.error: Exception | None = None
        self.sent: list[tuple[str, str, str | None]] = []

    async def send_otp(self, email: str, code: str, display_name: str | None) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append((email, code, display_name))
        return self.result

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class InMemoryUserStore:
    """Dictionary backed user store."""

    def __init__(self) -> None:
        self.accounts: dict[str, RecoveryAccount] = {}
        self.password_hashes: dict[str, str] = {}
        self.accept_updates = True

    def add(self, email: str, display_name: str | None = None) -> None:
        self.accounts[email] = RecoveryAccount(email=email, display_name=display_name)

    async def get_account(self, email: str) -> RecoveryAccount | None:
        return self.accounts.get(email)

    async def set_password(self, email: str, password_hash: str) -> bool:
        if not self.accept_updates or email not in self.accounts:
            return False
        self.password_hashes[email] = password_hash
        return True


class MockRecoveryConfig(PasswordRecoveryConfig):
    """Recovery configuration for testing."""

    otp_expiry = timedelta(minutes=10)
    max_otp_attempts = 3
    reset_token_expiry = timedelta(minutes=10)
    token_quarantine = timedelta(seconds=60)
    rate_limits = {
        RateLimitRuleType.REQUEST_BY_IP: RateLimitRule(timedelta(minutes=1), 5),
        RateLimitRuleType.REQUEST_BY_EMAIL: RateLimitRule(timedelta(minutes=1), 3),
        RateLimitRuleType.VERIFY_BY_IP: RateLimitRule(timedelta(minutes=1), 10),
        RateLimitRuleType.VERIFY_BY_EMAIL: RateLimitRule(timedelta(minutes=1), 5),
    }

    def hash_password(self, password: str) -> str:
        """Cheap reversible hash so tests can assert on it."""
        return f"hashed:{password}"


# ============================================================================
# Basic Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock."""
    return FakeClock()


@pytest.fixture
def test_config() -> MockRecoveryConfig:
    """Provide a test configuration."""
    return MockRecoveryConfig()


@pytest.fixture
def email_delivery() -> RecordingEmailDelivery:
    """Provide an email delivery that records codes."""
    return RecordingEmailDelivery()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    """Provide a user store with one registered reader."""
    store = InMemoryUserStore()
    store.add("reader@library.org", display_name="Ada Reader")
    return store


@pytest.fixture
def service(
    test_config: MockRecoveryConfig,
    email_delivery: RecordingEmailDelivery,
    user_store: InMemoryUserStore,
    clock: FakeClock,
) -> CredentialRecoveryService:
    """Provide a recovery service wired to the test doubles."""
    return CredentialRecoveryService(
        config=test_config,
        email_delivery=email_delivery,
        user_store=user_store,
        clock=clock,
    )


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def async_engine():  # type: ignore[no-untyped-def]
    """Create an async SQLite engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def async_session(async_engine) -> AsyncSession:  # type: ignore[no-untyped-def]
    """Create an async database session."""
    async_session_maker = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def sql_user_store(async_session: AsyncSession) -> SQLAlchemyUserStore[User]:
    """Create a SQLAlchemyUserStore instance."""
    return SQLAlchemyUserStore(async_session, User, display_name_field="full_name")


@pytest.fixture
async def test_user(async_session: AsyncSession) -> User:
    """Create a test user."""
    user = User(
        email="reader@library.org",
        password_hash="old-hash",
        full_name="Ada Reader",
    )
    async_session.add(user)
    await async_session.commit()
    await async_session.refresh(user)
    return user
