"""In-memory fixed-window rate limiting for recovery endpoints."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from threading import Lock
from typing import NamedTuple

from fastapi_password_recovery.clock import Clock, SystemClock
from fastapi_password_recovery.exceptions import ConfigurationError
from fastapi_password_recovery.logging import get_logger
from fastapi_password_recovery.results import RateLimitDecision

log = get_logger(__name__)


class RateLimitRuleType(StrEnum):
    """Rate limit rules guarding the recovery flow."""

    REQUEST_BY_IP = "request_by_ip"
    REQUEST_BY_EMAIL = "request_by_email"
    VERIFY_BY_IP = "verify_by_ip"
    VERIFY_BY_EMAIL = "verify_by_email"


class RateLimitRule(NamedTuple):
    """Window size, request budget and optional cooldown for one rule type."""

    window: timedelta
    max_requests: int
    cooldown: timedelta | None = None


DEFAULT_RATE_LIMITS: dict[RateLimitRuleType, RateLimitRule] = {
    RateLimitRuleType.REQUEST_BY_IP: RateLimitRule(timedelta(minutes=1), 5),
    RateLimitRuleType.REQUEST_BY_EMAIL: RateLimitRule(
        timedelta(minutes=1), 3, cooldown=timedelta(minutes=1)
    ),
    RateLimitRuleType.VERIFY_BY_IP: RateLimitRule(timedelta(minutes=1), 10),
    RateLimitRuleType.VERIFY_BY_EMAIL: RateLimitRule(timedelta(minutes=1), 5),
}


@dataclass
class RateLimitRecord:
    count: int
    window_start: datetime
    last_attempt: datetime


def _seconds_until(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now).total_seconds())


class RateLimiter:
    """
    Per-identifier fixed-window rate limiter with optional cooldown.

    Identifiers are IP addresses or normalized emails. Each
    ``(rule_type, identifier)`` pair has its own window. Thread-safe: every
    check is a single critical section.

    Example:
        ```python
        limiter = RateLimiter(DEFAULT_RATE_LIMITS)
        decision = limiter.check(RateLimitRuleType.REQUEST_BY_IP, "10.0.0.1")
        if not decision.allowed:
            retry_in = decision.retry_after_seconds
        ```
    """

    def __init__(
        self,
        rules: dict[RateLimitRuleType, RateLimitRule],
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the rate limiter.

        Args:
            rules: One rule for every RateLimitRuleType
            clock: Time source (defaults to the system clock)

        Raises:
            ConfigurationError: If a rule type is missing or a rule is invalid
        """
        for rule_type in RateLimitRuleType:
            rule = rules.get(rule_type)
            if rule is None:
                raise ConfigurationError(
                    f"No rate limit rule configured for {rule_type}"
                )
            if rule.window <= timedelta(0) or rule.max_requests < 1:
                raise ConfigurationError(
                    f"Rate limit rule {rule_type} needs a positive window "
                    "and max_requests"
                )
            if rule.cooldown is not None and rule.cooldown < timedelta(0):
                raise ConfigurationError(
                    f"Rate limit rule {rule_type} has a negative cooldown"
                )

        self.rules = dict(rules)
        self.clock = clock or SystemClock()
        self._records: dict[tuple[RateLimitRuleType, str], RateLimitRecord] = {}
        self._lock = Lock()

    def check(
        self, rule_type: RateLimitRuleType, identifier: str
    ) -> RateLimitDecision:
        """
        Record a request and decide whether it is allowed.

        A new window starts when none exists or the previous one has elapsed.
        Within a window, a configured cooldown since the last allowed attempt
        is enforced first, then the request budget.

        Args:
            rule_type: Which rule to apply
            identifier: IP address or normalized email

        Returns:
            RateLimitDecision, with a retry hint in seconds when denied
        """
        rule = self.rules[rule_type]
        key = (rule_type, identifier)
        reason: str | None = None
        retry_after = 0

        with self._lock:
            now = self.clock.now()
            record = self._records.get(key)

            if record is None or now - record.window_start >= rule.window:
                self._records[key] = RateLimitRecord(
                    count=1, window_start=now, last_attempt=now
                )
            elif rule.cooldown and now < record.last_attempt + rule.cooldown:
                reason = "cooldown"
                retry_after = _seconds_until(record.last_attempt + rule.cooldown, now)
            elif record.count >= rule.max_requests:
                reason = "window"
                retry_after = _seconds_until(record.window_start + rule.window, now)
            else:
                record.count += 1
                record.last_attempt = now

        if reason is None:
            return RateLimitDecision(allowed=True)

        log.info(
            "rate_limit_denied",
            rule=str(rule_type),
            reason=reason,
            retry_after=retry_after,
        )
        return RateLimitDecision(allowed=False, retry_after_seconds=retry_after)

    def reset(self, rule_type: RateLimitRuleType, identifier: str) -> None:
        """Forget the record for one identifier."""
        with self._lock:
            self._records.pop((rule_type, identifier), None)

    def cleanup(self) -> int:
        """
        Remove records that can no longer affect any decision.

        A record is stale once its window started longer ago than the longest
        window plus cooldown of any configured rule.

        Returns:
            Number of records removed
        """
        max_age = max(
            rule.window + (rule.cooldown or timedelta(0))
            for rule in self.rules.values()
        )

        with self._lock:
            now = self.clock.now()
            stale = [
                key
                for key, record in self._records.items()
                if now - record.window_start > max_age
            ]
            for key in stale:
                del self._records[key]

        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
