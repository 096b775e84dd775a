"""Tests for the reset token store."""

from datetime import timedelta

from fastapi_password_recovery.reset_token import ResetTokenStore
from fastapi_password_recovery.results import TokenStatus
from tests.conftest import FakeClock, MockRecoveryConfig

EMAIL = "reader@library.org"


class TestIssue:
    """Test suite for issuing tokens."""

    def test_issue_returns_opaque_token(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)

        token = store.issue(EMAIL)

        assert len(token) == 64
        assert store.is_valid(token)
        assert len(store) == 1

    def test_tokens_are_distinct(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        assert store.issue(EMAIL) != store.issue(EMAIL)

    def test_token_is_bound_to_normalized_email(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        token = store.issue(" Reader@Library.ORG")

        assert store.verify(token).email == EMAIL


class TestVerify:
    """Test suite for consuming tokens."""

    def test_token_is_single_use(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        token = store.issue(EMAIL)

        first = store.verify(token)
        second = store.verify(token)

        assert first.ok
        assert first.status is TokenStatus.CONSUMED
        assert first.email == EMAIL
        assert second.status is TokenStatus.ALREADY_USED
        assert second.email is None
        assert not store.is_valid(token)

    def test_unknown_token(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        assert store.verify("0" * 64).status is TokenStatus.INVALID

    def test_invalid_after_quarantine(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        token = store.issue(EMAIL)
        store.verify(token)

        clock.advance(seconds=59)
        assert store.verify(token).status is TokenStatus.ALREADY_USED

        clock.advance(seconds=1)
        assert store.verify(token).status is TokenStatus.INVALID
        assert len(store) == 0

    def test_zero_quarantine(self, clock: FakeClock) -> None:
        store = ResetTokenStore(
            MockRecoveryConfig(token_quarantine=timedelta(0)), clock
        )
        token = store.issue(EMAIL)
        store.verify(token)

        assert store.verify(token).status is TokenStatus.INVALID

    def test_expired_token(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        token = store.issue(EMAIL)

        clock.advance(minutes=10, seconds=1)

        assert not store.is_valid(token)
        assert store.verify(token).status is TokenStatus.EXPIRED
        assert store.verify(token).status is TokenStatus.INVALID

    def test_is_valid_does_not_consume(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        token = store.issue(EMAIL)

        assert store.is_valid(token)
        assert store.is_valid(token)
        assert store.verify(token).ok


class TestPurge:
    """Test suite for purging stale tokens."""

    def test_purge_keeps_quarantined_tokens(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        used = store.issue(EMAIL)
        store.verify(used)
        store.issue("patron@library.org")

        clock.advance(seconds=30)
        assert store.purge_expired() == 0

        clock.advance(seconds=30)
        assert store.purge_expired() == 1
        assert len(store) == 1

    def test_purge_removes_expired_unused_tokens(
        self, test_config: MockRecoveryConfig, clock: FakeClock
    ) -> None:
        store = ResetTokenStore(test_config, clock)
        store.issue(EMAIL)
        clock.advance(minutes=11)

        assert store.purge_expired() == 1
        assert len(store) == 0

    def test_clear(self, test_config: MockRecoveryConfig, clock: FakeClock) -> None:
        store = ResetTokenStore(test_config, clock)
        store.issue(EMAIL)
        store.clear()
        assert len(store) == 0
