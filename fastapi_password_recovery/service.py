"""Orchestration of the request → verify → reset password recovery flow."""

import asyncio
from types import TracebackType
from typing import Self

from fastapi_password_recovery.clock import Clock, SystemClock
from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.logging import get_logger, mask_email
from fastapi_password_recovery.otp import OtpStore
from fastapi_password_recovery.protocols import EmailDelivery, UserStore
from fastapi_password_recovery.rate_limit import RateLimiter, RateLimitRuleType
from fastapi_password_recovery.reset_token import ResetTokenStore
from fastapi_password_recovery.results import (
    OTP_FAILURES,
    TOKEN_FAILURES,
    OtpStatus,
    RecoveryFailure,
    RecoveryResult,
)
from fastapi_password_recovery.security import normalize_email
from fastapi_password_recovery.sweeper import CleanupSweeper

log = get_logger(__name__)


class CredentialRecoveryService:
    """
    Password recovery through an emailed OTP and a single-use reset token.

    Construct one instance at startup and share it between request handlers.
    The service owns its OTP store, reset token store, rate limiter and
    cleanup sweeper; collaborators are awaited outside every store lock.

    Example:
        ```python
        service = CredentialRecoveryService(
            config=PasswordRecoveryConfig(),
            email_delivery=SendGridDelivery(),
            user_store=SQLAlchemyUserStore(session, User),
        )

        async with service:  # starts and stops the cleanup sweeper
            await service.request_recovery("reader@library.org", ip="10.0.0.1")
        ```
    """

    def __init__(
        self,
        config: PasswordRecoveryConfig,
        email_delivery: EmailDelivery,
        user_store: UserStore,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            config: Recovery configuration
            email_delivery: Delivers OTP codes out of band
            user_store: Looks up accounts and persists new passwords
            clock: Time source shared by all stores (defaults to system clock)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate()
        self.config = config
        self.email_delivery = email_delivery
        self.user_store = user_store
        self.clock = clock or SystemClock()

        self.rate_limiter = RateLimiter(config.rate_limits, self.clock)
        self.otp_store = OtpStore(config, self.clock)
        self.token_store = ResetTokenStore(config, self.clock)
        self.sweeper = CleanupSweeper(
            self.otp_store,
            self.token_store,
            self.rate_limiter,
            interval=config.cleanup_interval,
        )

    async def start(self) -> None:
        """Start background cleanup. Call from the application's startup."""
        self.sweeper.start()

    async def stop(self) -> None:
        """Stop background cleanup. Call from the application's shutdown."""
        await self.sweeper.stop()

    def stats(self) -> dict[str, int]:
        """Number of records currently held by each store."""
        return {
            "active_otps": len(self.otp_store),
            "active_tokens": len(self.token_store),
            "rate_limit_records": len(self.rate_limiter),
        }

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    def _gate(self, *checks: tuple[RateLimitRuleType, str]) -> RecoveryResult | None:
        for rule_type, identifier in checks:
            decision = self.rate_limiter.check(rule_type, identifier)
            if not decision.allowed:
                return RecoveryResult.rate_limited(decision.retry_after_seconds)
        return None

    async def request_recovery(self, email: str, ip: str) -> RecoveryResult:
        """
        Issue an OTP for *email* and deliver it if the account exists.

        The result is a success whether or not *email* belongs to an account,
        so callers cannot use this operation to enumerate users. Only rate
        limiting produces a failure.

        Args:
            email: Email address the user claims
            ip: Client IP address

        Returns:
            RecoveryResult (failure is RATE_LIMITED or None)
        """
        key = normalize_email(email)
        denied = self._gate(
            (RateLimitRuleType.REQUEST_BY_IP, ip),
            (RateLimitRuleType.REQUEST_BY_EMAIL, key),
        )
        if denied:
            return denied

        code = self.otp_store.generate()
        self.otp_store.store(key, code)

        account = await self.user_store.get_account(key)
        if account is None:
            log.info("recovery_requested_unknown_account", email=mask_email(key))
            return RecoveryResult.success()

        try:
            delivered = await self.email_delivery.send_otp(
                key, code, account.display_name
            )
        except Exception:
            log.exception("otp_delivery_error", email=mask_email(key))
            delivered = False

        if delivered:
            log.info("otp_delivered", email=mask_email(key))
        else:
            log.warning("otp_delivery_failed", email=mask_email(key))

        return RecoveryResult.success()

    async def confirm_otp(self, email: str, code: str, ip: str) -> RecoveryResult:
        """
        Verify the OTP for *email* and exchange it for a reset token.

        Args:
            email: Email the code was sent to
            code: Code entered by the user
            ip: Client IP address

        Returns:
            RecoveryResult carrying reset_token on success
        """
        key = normalize_email(email)
        denied = self._gate(
            (RateLimitRuleType.VERIFY_BY_IP, ip),
            (RateLimitRuleType.VERIFY_BY_EMAIL, key),
        )
        if denied:
            return denied

        status = self.otp_store.verify(key, code)
        if status is not OtpStatus.CONSUMED:
            return RecoveryResult.failed(OTP_FAILURES[status])

        return RecoveryResult.success(reset_token=self.token_store.issue(key))

    async def reset_password(self, token: str, new_password: str) -> RecoveryResult:
        """
        Consume *token* and set *new_password* for the email it is bound to.

        The token is consumed before the user store is called; a refused
        update does not make it reusable.

        Args:
            token: Reset token returned by confirm_otp
            new_password: New plain-text password

        Returns:
            RecoveryResult
        """
        verification = self.token_store.verify(token)
        if not verification.ok:
            return RecoveryResult.failed(TOKEN_FAILURES[verification.status])

        email = verification.email or ""
        # Hashing is CPU bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.config.hash_password, new_password)
        updated = await self.user_store.set_password(email, password_hash)
        if not updated:
            log.warning("password_update_failed", email=mask_email(email))
            return RecoveryResult.failed(RecoveryFailure.PASSWORD_UPDATE_FAILED)

        log.info("password_reset", email=mask_email(email))
        return RecoveryResult.success()
