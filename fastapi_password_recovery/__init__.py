"""FastAPI Password Recovery - OTP based password reset with single-use tokens."""

from fastapi_password_recovery.clock import Clock, SystemClock
from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.db import (
    BaseRecoveryUserTable,
    SQLAlchemyUserStore,
)
from fastapi_password_recovery.exceptions import ConfigurationError
from fastapi_password_recovery.logging import configure_logging, get_logger
from fastapi_password_recovery.otp import OtpStore
from fastapi_password_recovery.protocols import (
    EmailDelivery,
    RecoveryAccount,
    UserStore,
)
from fastapi_password_recovery.rate_limit import (
    DEFAULT_RATE_LIMITS,
    RateLimiter,
    RateLimitRule,
    RateLimitRuleType,
)
from fastapi_password_recovery.reset_token import ResetTokenStore
from fastapi_password_recovery.results import (
    OtpStatus,
    RateLimitDecision,
    RecoveryFailure,
    RecoveryResult,
    TokenStatus,
    TokenVerification,
)
from fastapi_password_recovery.router import get_recovery_router
from fastapi_password_recovery.schemas import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    ResetTokenResponse,
    VerifyOTPRequest,
)
from fastapi_password_recovery.service import CredentialRecoveryService
from fastapi_password_recovery.sweeper import CleanupSweeper, SweepReport

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_RATE_LIMITS",
    "BaseRecoveryUserTable",
    "CleanupSweeper",
    "Clock",
    "ConfigurationError",
    "CredentialRecoveryService",
    "EmailDelivery",
    "ForgotPasswordRequest",
    "MessageResponse",
    "OtpStatus",
    "OtpStore",
    "PasswordRecoveryConfig",
    "RateLimitDecision",
    "RateLimitRule",
    "RateLimitRuleType",
    "RateLimiter",
    "RecoveryAccount",
    "RecoveryFailure",
    "RecoveryResult",
    "ResetPasswordRequest",
    "ResetTokenResponse",
    "ResetTokenStore",
    "SQLAlchemyUserStore",
    "SweepReport",
    "SystemClock",
    "TokenStatus",
    "TokenVerification",
    "UserStore",
    "VerifyOTPRequest",
    "configure_logging",
    "get_logger",
    "get_recovery_router",
]

# Conditionally export MongoDB classes if motor is installed
try:
    from fastapi_password_recovery.db import (
        BaseRecoveryUserDocument,
        MongoDBUserStore,
    )

    __all__ += ["BaseRecoveryUserDocument", "MongoDBUserStore"]
except ImportError:
    # MongoDB support not installed
    pass
