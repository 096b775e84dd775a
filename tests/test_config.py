"""Tests for password recovery configuration."""

from datetime import timedelta

import pytest

from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.exceptions import ConfigurationError
from fastapi_password_recovery.rate_limit import (
    DEFAULT_RATE_LIMITS,
    RateLimitRule,
    RateLimitRuleType,
)

# ============================================================================
# Test Configuration Classes
# ============================================================================


class ProductionConfig(PasswordRecoveryConfig):
    """Production-like configuration."""

    otp_expiry = timedelta(minutes=5)
    max_otp_attempts = 3
    trust_forwarded_for = True


class CustomHashConfig(PasswordRecoveryConfig):
    """Configuration with a custom password hasher."""

    def hash_password(self, password: str) -> str:
        return password[::-1]


# ============================================================================
# Default Configuration Tests
# ============================================================================


class TestDefaultConfiguration:
    """Test suite for default configuration values."""

    def test_defaults(self) -> None:
        config = PasswordRecoveryConfig()
        assert config.otp_length == 6
        assert config.otp_expiry == timedelta(minutes=10)
        assert config.max_otp_attempts == 5
        assert config.reset_token_expiry == timedelta(minutes=10)
        assert config.token_quarantine == timedelta(seconds=60)
        assert config.cleanup_interval == timedelta(minutes=5)
        assert config.developer_mode is False
        assert config.trust_forwarded_for is False

    def test_default_rate_limits(self) -> None:
        config = PasswordRecoveryConfig()
        assert config.rate_limits == DEFAULT_RATE_LIMITS
        by_email = config.rate_limits[RateLimitRuleType.REQUEST_BY_EMAIL]
        assert by_email.max_requests == 3
        assert by_email.cooldown == timedelta(minutes=1)
        assert config.rate_limits[RateLimitRuleType.VERIFY_BY_IP].max_requests == 10

    def test_rate_limits_are_not_shared(self) -> None:
        config = PasswordRecoveryConfig()
        config.rate_limits[RateLimitRuleType.REQUEST_BY_IP] = RateLimitRule(
            timedelta(minutes=1), 1
        )

        fresh = PasswordRecoveryConfig()
        assert fresh.rate_limits[RateLimitRuleType.REQUEST_BY_IP].max_requests == 5
        assert DEFAULT_RATE_LIMITS[RateLimitRuleType.REQUEST_BY_IP].max_requests == 5

    def test_default_hasher_is_argon2(self) -> None:
        assert PasswordRecoveryConfig().hash_password("secret").startswith("$argon2")


# ============================================================================
# Override Tests
# ============================================================================


class TestConfigOverrides:
    """Test suite for subclass and keyword overrides."""

    def test_subclass_overrides(self) -> None:
        config = ProductionConfig()
        assert config.otp_expiry == timedelta(minutes=5)
        assert config.max_otp_attempts == 3
        assert config.trust_forwarded_for is True
        assert config.otp_length == 6

    def test_keyword_overrides(self) -> None:
        config = PasswordRecoveryConfig(max_otp_attempts=4, developer_mode=True)
        assert config.max_otp_attempts == 4
        assert config.developer_mode is True
        assert PasswordRecoveryConfig.max_otp_attempts == 5

    def test_unknown_keyword_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown configuration option"):
            PasswordRecoveryConfig(otp_expiry_minutes=10)

    @pytest.mark.parametrize("name", ["hash_password", "validate"])
    def test_method_names_rejected(self, name: str) -> None:
        with pytest.raises(ConfigurationError, match="Unknown configuration option"):
            PasswordRecoveryConfig(**{name: lambda *args: "plain"})

    def test_custom_hasher(self) -> None:
        assert CustomHashConfig().hash_password("abc") == "cba"


# ============================================================================
# Validation Tests
# ============================================================================


class TestConfigValidation:
    """Test suite for configuration validation."""

    @pytest.mark.parametrize("length", [3, 11])
    def test_rejects_bad_otp_length(self, length: int) -> None:
        with pytest.raises(ConfigurationError, match="otp_length"):
            PasswordRecoveryConfig(otp_length=length)

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ConfigurationError, match="max_otp_attempts"):
            PasswordRecoveryConfig(max_otp_attempts=0)

    def test_rejects_non_positive_expiry(self) -> None:
        with pytest.raises(ConfigurationError, match="otp_expiry"):
            PasswordRecoveryConfig(otp_expiry=timedelta(0))

    def test_rejects_negative_quarantine(self) -> None:
        with pytest.raises(ConfigurationError, match="token_quarantine"):
            PasswordRecoveryConfig(token_quarantine=timedelta(seconds=-1))

    def test_allows_zero_quarantine(self) -> None:
        config = PasswordRecoveryConfig(token_quarantine=timedelta(0))
        assert config.token_quarantine == timedelta(0)

    def test_rejects_missing_rate_limit_rule(self) -> None:
        rules = {
            RateLimitRuleType.REQUEST_BY_IP: RateLimitRule(timedelta(minutes=1), 5),
        }
        with pytest.raises(ConfigurationError, match="Missing rate limit rules"):
            PasswordRecoveryConfig(rate_limits=rules)
