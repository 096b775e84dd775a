"""Typed results returned by the recovery stores and service."""

from dataclasses import dataclass
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of a rate limit check."""

    allowed: bool
    retry_after_seconds: int = 0


class OtpStatus(StrEnum):
    """Outcome of verifying an OTP code."""

    CONSUMED = "consumed"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"
    MISMATCH = "mismatch"


class TokenStatus(StrEnum):
    """Outcome of verifying a password reset token."""

    CONSUMED = "consumed"
    INVALID = "invalid"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"


@dataclass(frozen=True, slots=True)
class TokenVerification:
    """Result of ResetTokenStore.verify; email is set only when consumed."""

    status: TokenStatus
    email: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.CONSUMED


class RecoveryFailure(StrEnum):
    """Caller-facing failure kinds of the recovery flow."""

    RATE_LIMITED = "rate_limited"
    OTP_NOT_FOUND = "otp_not_found"
    OTP_EXPIRED = "otp_expired"
    OTP_ATTEMPTS_EXCEEDED = "otp_attempts_exceeded"
    OTP_MISMATCH = "otp_mismatch"
    TOKEN_INVALID = "token_invalid"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_ALREADY_USED = "token_already_used"
    PASSWORD_UPDATE_FAILED = "password_update_failed"


OTP_FAILURES: dict[OtpStatus, RecoveryFailure] = {
    OtpStatus.NOT_FOUND: RecoveryFailure.OTP_NOT_FOUND,
    OtpStatus.EXPIRED: RecoveryFailure.OTP_EXPIRED,
    OtpStatus.ATTEMPTS_EXCEEDED: RecoveryFailure.OTP_ATTEMPTS_EXCEEDED,
    OtpStatus.MISMATCH: RecoveryFailure.OTP_MISMATCH,
}

TOKEN_FAILURES: dict[TokenStatus, RecoveryFailure] = {
    TokenStatus.INVALID: RecoveryFailure.TOKEN_INVALID,
    TokenStatus.EXPIRED: RecoveryFailure.TOKEN_EXPIRED,
    TokenStatus.ALREADY_USED: RecoveryFailure.TOKEN_ALREADY_USED,
}


@dataclass(frozen=True, slots=True)
class RecoveryResult:
    """
    Result of a CredentialRecoveryService operation.

    A result without a failure is a success. Rate limited results always carry
    a positive retry_after_seconds; a successful confirm_otp carries the
    reset token.
    """

    failure: RecoveryFailure | None = None
    retry_after_seconds: int | None = None
    reset_token: str | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, reset_token: str | None = None) -> "RecoveryResult":
        return cls(reset_token=reset_token)

    @classmethod
    def failed(cls, failure: RecoveryFailure) -> "RecoveryResult":
        return cls(failure=failure)

    @classmethod
    def rate_limited(cls, retry_after_seconds: int) -> "RecoveryResult":
        return cls(
            failure=RecoveryFailure.RATE_LIMITED,
            retry_after_seconds=retry_after_seconds,
        )
