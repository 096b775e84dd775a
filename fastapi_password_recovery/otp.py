"""In-memory store for password recovery OTP codes."""

import math
from dataclasses import dataclass
from datetime import datetime
from threading import Lock

from fastapi_password_recovery.clock import Clock, SystemClock
from fastapi_password_recovery.config import PasswordRecoveryConfig
from fastapi_password_recovery.logging import get_logger, mask_email
from fastapi_password_recovery.results import OtpStatus
from fastapi_password_recovery.security import (
    codes_match,
    generate_otp,
    normalize_email,
)

log = get_logger(__name__)


@dataclass
class OtpRecord:
    email: str
    code: str
    expires_at: datetime
    attempts: int = 0


class OtpStore:
    """
    Issues and verifies one-time codes keyed by normalized email.

    At most one code is active per email; storing a new code discards the
    previous one. Codes are single use, expire after ``config.otp_expiry`` and
    allow ``config.max_otp_attempts`` verification attempts.

    All methods are thread-safe. ``verify`` runs its whole
    lookup/check/mutate sequence under the store lock, so concurrent
    verifications of the same code consume it exactly once.
    """

    def __init__(
        self, config: PasswordRecoveryConfig, clock: Clock | None = None
    ) -> None:
        self.config = config
        self.clock = clock or SystemClock()
        self._records: dict[str, OtpRecord] = {}
        self._lock = Lock()

    def generate(self) -> str:
        """Generate a new code of the configured length."""
        return generate_otp(self.config.otp_length, self.config.developer_mode)

    def store(self, email: str, code: str) -> datetime:
        """
        Store *code* as the active OTP for *email*.

        Any earlier, unconsumed code for the same email is discarded.

        Returns:
            Expiry time of the stored code
        """
        key = normalize_email(email)
        with self._lock:
            expires_at = self.clock.now() + self.config.otp_expiry
            self._records[key] = OtpRecord(
                email=key, code=code, expires_at=expires_at
            )

        log.info(
            "otp_issued", email=mask_email(key), expires_at=expires_at.isoformat()
        )
        return expires_at

    def verify(self, email: str, code: str) -> OtpStatus:
        """
        Verify and consume the OTP for *email*.

        Checks run in a fixed order: missing record, expiry, attempt budget.
        The attempt counter is charged before the codes are compared, so the
        number of guesses per issued code is bounded whichever one succeeds.

        Args:
            email: Email the code was issued for (any case)
            code: Code submitted by the caller

        Returns:
            OtpStatus.CONSUMED on success, otherwise the rejection reason
        """
        key = normalize_email(email)
        attempts = 0

        with self._lock:
            record = self._records.get(key)

            if record is None:
                status = OtpStatus.NOT_FOUND
            elif self.clock.now() > record.expires_at:
                del self._records[key]
                status = OtpStatus.EXPIRED
            elif record.attempts >= self.config.max_otp_attempts:
                del self._records[key]
                status = OtpStatus.ATTEMPTS_EXCEEDED
            else:
                record.attempts += 1
                attempts = record.attempts
                if codes_match(record.code, code):
                    del self._records[key]
                    status = OtpStatus.CONSUMED
                else:
                    status = OtpStatus.MISMATCH

        if status is OtpStatus.CONSUMED:
            log.info("otp_consumed", email=mask_email(key))
        else:
            log.info(
                "otp_verification_failed",
                email=mask_email(key),
                reason=str(status),
                attempts=attempts,
            )
        return status

    def has_active(self, email: str) -> bool:
        """Whether *email* has an unexpired code (expired records are dropped)."""
        key = normalize_email(email)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return False
            if self.clock.now() > record.expires_at:
                del self._records[key]
                return False
            return True

    def remaining_seconds(self, email: str) -> int:
        """Seconds until the active code for *email* expires, 0 if none."""
        key = normalize_email(email)
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return 0
            remaining = (record.expires_at - self.clock.now()).total_seconds()
        return max(0, math.ceil(remaining))

    def purge_expired(self) -> int:
        """
        Delete every expired record.

        Returns:
            Number of records removed
        """
        with self._lock:
            now = self.clock.now()
            expired = [
                key for key, record in self._records.items() if now > record.expires_at
            ]
            for key in expired:
                del self._records[key]
        return len(expired)

    def clear(self) -> None:
        """Drop all codes."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
