"""Configuration class for password recovery."""

from datetime import timedelta
from typing import Any

from fastapi_password_recovery.exceptions import ConfigurationError
from fastapi_password_recovery.rate_limit import (
    DEFAULT_RATE_LIMITS,
    RateLimitRule,
    RateLimitRuleType,
)
from fastapi_password_recovery.security import hash_password


class PasswordRecoveryConfig:
    """
    Configuration for the credential recovery subsystem.

    Configuration can be set via class attributes on a subclass or as keyword
    arguments to the constructor. Values are validated on construction, so a
    bad configuration fails at startup.

    Example:
        ```python
        class LibraryRecoveryConfig(PasswordRecoveryConfig):
            otp_expiry = timedelta(minutes=5)
            max_otp_attempts = 3
            trust_forwarded_for = True

        config = LibraryRecoveryConfig()
        # or
        config = PasswordRecoveryConfig(max_otp_attempts=3)
        ```
    """

    # OTP configuration
    otp_length: int = 6
    otp_expiry: timedelta = timedelta(minutes=10)
    max_otp_attempts: int = 5

    # Reset tokens
    reset_token_expiry: timedelta = timedelta(minutes=10)
    token_quarantine: timedelta = timedelta(seconds=60)
    """How long a used token is remembered so replays report 'already used'."""

    # Background cleanup
    cleanup_interval: timedelta = timedelta(minutes=5)

    # Rate limiting, one rule per rule type
    rate_limits: dict[RateLimitRuleType, RateLimitRule] = DEFAULT_RATE_LIMITS

    # HTTP surface
    min_password_length: int = 6
    trust_forwarded_for: bool = False
    """Take the client IP from X-Forwarded-For (only behind a trusted proxy)."""

    # Security settings
    developer_mode: bool = False

    def __init__(self, **overrides: Any) -> None:  # noqa: ANN401
        """Apply keyword overrides and validate configuration."""
        for name, value in overrides.items():
            if (
                name.startswith("_")
                or not hasattr(type(self), name)
                or callable(getattr(type(self), name))
            ):
                raise ConfigurationError(f"Unknown configuration option: {name}")
            setattr(self, name, value)
        # Per-instance copy; the class-level mapping is shared by every config.
        self.rate_limits = dict(self.rate_limits)
        self.validate()

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If any option is out of range
        """
        if not 4 <= self.otp_length <= 10:
            raise ConfigurationError("otp_length must be between 4 and 10 digits")

        if self.max_otp_attempts < 1:
            raise ConfigurationError("max_otp_attempts must be at least 1")

        for name in ("otp_expiry", "reset_token_expiry", "cleanup_interval"):
            if getattr(self, name) <= timedelta(0):
                raise ConfigurationError(f"{name} must be a positive duration")

        if self.token_quarantine < timedelta(0):
            raise ConfigurationError("token_quarantine cannot be negative")

        if self.min_password_length < 1:
            raise ConfigurationError("min_password_length must be at least 1")

        missing = [rule for rule in RateLimitRuleType if rule not in self.rate_limits]
        if missing:
            raise ConfigurationError(
                "Missing rate limit rules: " + ", ".join(sorted(missing))
            )

    def hash_password(self, password: str) -> str:
        """
        Hash a new password before it is handed to the user store.

        Override this method to use the host application's password scheme.
        The default is argon2id.

        Example:
            ```python
            def hash_password(self, password: str) -> str:
                return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()
            ```
        """
        return hash_password(password)
