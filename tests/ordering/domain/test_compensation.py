"""Tests for recorded reversing steps."""

from storefront.ordering.compensation import Compensation


class TestCompensation:
    def test_unwinds_newest_first(self):
        calls = []
        compensation = Compensation()
        compensation.record("first", lambda: calls.append("first"))
        compensation.record("second", lambda: calls.append("second"))

        assert compensation.unwind() == []
        assert calls == ["second", "first"]

    def test_failing_step_does_not_stop_the_rest(self):
        calls = []
        compensation = Compensation()
        compensation.record("first", lambda: calls.append("first"))
        compensation.record("broken", lambda: 1 / 0)

        failures = compensation.unwind()

        assert calls == ["first"]
        assert [description for description, _ in failures] == ["broken"]
        assert isinstance(failures[0][1], ZeroDivisionError)

    def test_steps_run_once(self):
        calls = []
        compensation = Compensation()
        compensation.record("only", lambda: calls.append("only"))
        compensation.unwind()
        compensation.unwind()
        assert calls == ["only"]
        assert len(compensation) == 0
