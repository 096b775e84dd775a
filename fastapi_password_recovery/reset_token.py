"""In-memory store for single-use password reset tokens."""

from dataclasses import dataclass
from datetime import datetime
from threading import Lock

from fastapi_password_recovery.clock import Clock, SystemClock
from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.logging import get_logger, mask_email
from fastapi_password_recovery.results import TokenStatus, TokenVerification
from fastapi_password_recovery.security import generate_reset_token, normalize_email

log = get_logger(__name__)


@dataclass
class ResetTokenRecord:
    token: str
    email: str
    expires_at: datetime
    used: bool = False
    purge_at: datetime | None = None

    def quarantine_elapsed(self, now: datetime) -> bool:
        return self.purge_at is not None and now >= self.purge_at


class ResetTokenStore:
    """
    Issues opaque reset tokens and consumes each at most once.

    A token is the caller's proof that OTP verification succeeded. After it is
    consumed the record is kept for ``config.token_quarantine`` so that a
    replay reports ALREADY_USED rather than INVALID; once the quarantine has
    elapsed the token behaves as if it never existed.
    """

    def __init__(
        self, config: PasswordRecoveryConfig, clock: Clock | None = None
    ) -> None:
        self.config = config
        self.clock = clock or SystemClock()
        self._records: dict[str, ResetTokenRecord] = {}
        self._lock = Lock()

    def issue(self, email: str) -> str:
        """
        Issue a new token bound to *email*.

        Returns:
            The token (64 hex characters)
        """
        token = generate_reset_token()
        key = normalize_email(email)
        with self._lock:
            expires_at = self.clock.now() + self.config.reset_token_expiry
            self._records[token] = ResetTokenRecord(
                token=token, email=key, expires_at=expires_at
            )

        log.info(
            "reset_token_issued",
            email=mask_email(key),
            expires_at=expires_at.isoformat(),
        )
        return token

    def verify(self, token: str) -> TokenVerification:
        """
        Verify and consume *token*.

        Returns:
            TokenVerification with status CONSUMED and the bound email, or the
            rejection reason
        """
        email: str | None = None

        with self._lock:
            now = self.clock.now()
            record = self._records.get(token)

            if record is not None and record.quarantine_elapsed(now):
                del self._records[token]
                record = None

            if record is None:
                status = TokenStatus.INVALID
            elif now > record.expires_at:
                del self._records[token]
                status = TokenStatus.EXPIRED
            elif record.used:
                status = TokenStatus.ALREADY_USED
            else:
                record.used = True
                record.purge_at = now + self.config.token_quarantine
                email = record.email
                status = TokenStatus.CONSUMED

        if status is TokenStatus.CONSUMED:
            log.info("reset_token_consumed", email=mask_email(email))
        else:
            log.info("reset_token_rejected", reason=str(status))
        return TokenVerification(status=status, email=email)

    def is_valid(self, token: str) -> bool:
        """Whether *token* could be consumed right now; does not consume it."""
        with self._lock:
            record = self._records.get(token)
            return (
                record is not None
                and not record.used
                and self.clock.now() <= record.expires_at
            )

    def purge_expired(self) -> int:
        """
        Delete unused expired tokens and used tokens past their quarantine.

        Returns:
            Number of records removed
        """
        with self._lock:
            now = self.clock.now()
            stale = [
                token
                for token, record in self._records.items()
                if record.quarantine_elapsed(now)
                or (not record.used and now > record.expires_at)
            ]
            for token in stale:
                del self._records[token]
        return len(stale)

    def clear(self) -> None:
        """Drop all tokens."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
