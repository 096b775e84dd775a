"""Periodic background cleanup of expired recovery state."""

import asyncio
import contextlib
from datetime import timedelta
from typing import NamedTuple

from fastapi_password_recovery.logging import get_logger
from fastapi_password_recovery.otp import OtpStore
from fastapi_password_recovery.rate_limit import RateLimiter
from fastapi_password_recovery.reset_token import ResetTokenStore

log = get_logger(__name__)


class SweepReport(NamedTuple):
    """Number of records removed from each store in one sweep."""

    otps: int
    tokens: int
    rate_limits: int

    @property
    def total(self) -> int:
        return self.otps + self.tokens + self.rate_limits


class CleanupSweeper:
    """
    Purges expired OTPs, reset tokens and rate limit records on an interval.

    Only bounds memory: every store checks expiry on access, so verification
    results do not depend on when (or whether) a sweep has run.

    The sweeper owns a single asyncio task. ``start()`` must be called from a
    running event loop and ``stop()`` cancels and awaits the task.
    """

    def __init__(
        self,
        otp_store: OtpStore,
        token_store: ResetTokenStore,
        rate_limiter: RateLimiter,
        interval: timedelta = timedelta(minutes=5),
    ) -> None:
        self.otp_store = otp_store
        self.token_store = token_store
        self.rate_limiter = rate_limiter
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self) -> SweepReport:
        """Run one cleanup pass over all stores."""
        report = SweepReport(
            otps=self.otp_store.purge_expired(),
            tokens=self.token_store.purge_expired(),
            rate_limits=self.rate_limiter.cleanup(),
        )
        if report.total:
            log.info(
                "cleanup_completed",
                otps=report.otps,
                tokens=report.tokens,
                rate_limits=report.rate_limits,
            )
        return report

    async def _run(self) -> None:
        seconds = self.interval.total_seconds()
        while True:
            await asyncio.sleep(seconds)
            try:
                self.sweep()
            except Exception:
                log.exception("cleanup_failed")

    def start(self) -> None:
        """Start the background task; does nothing if already running."""
        if self.running:
            return
        self._task = asyncio.create_task(
            self._run(), name="password-recovery-sweeper"
        )
        log.info(
            "cleanup_task_started", interval_seconds=self.interval.total_seconds()
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        log.info("cleanup_task_stopped")
