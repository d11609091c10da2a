"""Unit tests for navguard.engine.waiter: ConditionWaiter and Deadline."""

from __future__ import annotations

import pytest

from navguard.engine.protocols import ErrorKind, FatalMismatch, TimedOut
from navguard.engine.waiter import ConditionWaiter, Deadline


# ---------------------------------------------------------------------------
# 1. Satisfied conditions
# ---------------------------------------------------------------------------

class TestSatisfied:
    """A condition that holds returns its value with no error."""

    def test_already_satisfied_returns_after_one_poll(self, waiter, clock):
        result = waiter.wait(lambda s: "ready", timeout=5.0)
        assert result.ok
        assert result.value == "ready"
        assert result.polls == 1
        assert clock.sleeps == []

    def test_repeat_waits_are_idempotent(self, waiter):
        first = waiter.wait(lambda s: 42, timeout=5.0)
        second = waiter.wait(lambda s: 42, timeout=5.0)
        assert first.value == second.value == 42
        assert first.polls == second.polls == 1

    def test_satisfied_mid_wait_within_timeout_plus_interval(self, waiter, clock):
        result = waiter.wait(lambda s: True if clock.now >= 1.0 else None, timeout=2.0)
        assert result.ok
        assert result.elapsed_s <= 2.0 + waiter.poll_interval
        assert result.elapsed_s == pytest.approx(1.0)
        assert result.polls == 5

    def test_falsy_non_none_values_count_as_satisfied(self, waiter):
        assert waiter.wait(lambda s: 0, timeout=1.0).value == 0
        assert waiter.wait(lambda s: "", timeout=1.0).ok

    def test_condition_receives_the_session(self, waiter, session):
        seen = []
        waiter.wait(lambda s: seen.append(s) or True, timeout=1.0)
        assert seen == [session]


# ---------------------------------------------------------------------------
# 2. Timeouts
# ---------------------------------------------------------------------------

class TestTimeout:
    """A condition that never holds yields TimedOut, never an exception."""

    def test_never_satisfied_returns_timed_out(self, waiter):
        result = waiter.wait(lambda s: None, timeout=1.0, description="the moon")
        assert not result.ok
        assert result.value is None
        assert isinstance(result.error, TimedOut)
        assert result.error.kind is ErrorKind.TIMED_OUT
        assert result.error.timeout_s == 1.0
        assert "the moon" in str(result.error)

    def test_timeout_is_not_overrun_by_more_than_one_interval(self, waiter):
        result = waiter.wait(lambda s: None, timeout=1.0)
        assert result.elapsed_s <= 1.0 + waiter.poll_interval

    def test_last_sleep_is_clipped_to_remaining_budget(self, waiter, clock):
        result = waiter.wait(lambda s: None, timeout=0.6)
        assert clock.sleeps == pytest.approx([0.25, 0.25, 0.1])
        assert result.elapsed_s == pytest.approx(0.6)

    def test_zero_timeout_evaluates_exactly_once(self, waiter, clock):
        calls = []
        result = waiter.wait(lambda s: calls.append(1), timeout=0)
        assert len(calls) == 1
        assert result.polls == 1
        assert isinstance(result.error, TimedOut)
        assert clock.sleeps == []

    def test_negative_timeout_behaves_like_zero(self, waiter):
        result = waiter.wait(lambda s: None, timeout=-3)
        assert result.polls == 1
        assert result.error.timeout_s == 0.0


# ---------------------------------------------------------------------------
# 3. Errors raised by conditions
# ---------------------------------------------------------------------------

class TestConditionErrors:
    """Transient errors are absorbed; FatalMismatch stops the wait."""

    def test_transient_exception_is_treated_as_not_yet(self, waiter, clock):
        def flaky(session):
            if clock.now < 0.5:
                raise RuntimeError("element is detached from the DOM")
            return "attached"

        result = waiter.wait(flaky, timeout=2.0)
        assert result.ok
        assert result.value == "attached"

    def test_always_raising_condition_times_out(self, waiter):
        def broken(session):
            raise RuntimeError("stale")

        result = waiter.wait(broken, timeout=0.5)
        assert isinstance(result.error, TimedOut)

    def test_fatal_mismatch_stops_immediately(self, waiter, clock):
        def fatal(session):
            raise FatalMismatch("wrong page entirely")

        result = waiter.wait(fatal, timeout=10.0)
        assert isinstance(result.error, FatalMismatch)
        assert result.polls == 1
        assert clock.now == 0.0


# ---------------------------------------------------------------------------
# 4. Poll interval
# ---------------------------------------------------------------------------

class TestPollInterval:

    def test_non_positive_interval_is_rejected(self, session):
        with pytest.raises(ValueError):
            ConditionWaiter(session, poll_interval=0)

    def test_per_call_interval_overrides_default(self, waiter, clock):
        waiter.wait(lambda s: None, timeout=1.0, poll_interval=0.5)
        assert clock.sleeps == [0.5, 0.5]


# ---------------------------------------------------------------------------
# 5. Deadline
# ---------------------------------------------------------------------------

class TestDeadline:
    """A shared budget across consecutive waits."""

    def test_remaining_and_elapsed_track_the_clock(self, waiter, clock):
        deadline = Deadline(waiter, 3.0)
        clock.advance(1.0)
        assert deadline.elapsed() == pytest.approx(1.0)
        assert deadline.remaining() == pytest.approx(2.0)
        assert not deadline.expired()

    def test_remaining_never_negative(self, waiter, clock):
        deadline = Deadline(waiter, 1.0)
        clock.advance(5.0)
        assert deadline.remaining() == 0.0
        assert deadline.expired()

    def test_budget_is_clipped_to_remaining(self, waiter, clock):
        deadline = Deadline(waiter, 2.0)
        assert deadline.budget(1.5) == pytest.approx(1.5)
        clock.advance(1.0)
        assert deadline.budget(1.5) == pytest.approx(1.0)
        assert deadline.budget(-1) == 0.0
