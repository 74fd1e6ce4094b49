"""Tests for RegistrationAccumulator."""

import pytest

from language_registration.accumulator import RegistrationAccumulator
from language_registration.errors import ProcessorStateError


class TestRegistrationAccumulator:
    """Tests for run-scoped accumulation."""

    def test_drain_returns_declarations_in_order_and_clears(self, make_candidate) -> None:
        accumulator = RegistrationAccumulator("run-1")
        first = make_candidate("com.example.A")
        second = make_candidate("com.example.B")

        accumulator.add(first)
        accumulator.add(second)
        drained = accumulator.drain_all()

        assert drained == [first, second]
        assert drained[0] is first
        assert len(accumulator) == 0
        assert accumulator.drained

    def test_same_declaration_is_recorded_twice(self, make_candidate) -> None:
        """Test that the accumulator does not deduplicate."""
        accumulator = RegistrationAccumulator()
        candidate = make_candidate()

        accumulator.add(candidate)
        accumulator.add(candidate)

        assert len(accumulator.drain_all()) == 2

    def test_add_after_drain_raises(self, make_candidate) -> None:
        accumulator = RegistrationAccumulator("run-7")
        accumulator.drain_all()

        with pytest.raises(ProcessorStateError) as exc_info:
            accumulator.add(make_candidate())

        assert "run-7" in str(exc_info.value)

    def test_drain_twice_raises(self) -> None:
        accumulator = RegistrationAccumulator()
        accumulator.drain_all()

        with pytest.raises(ProcessorStateError):
            accumulator.drain_all()

    def test_snapshot_does_not_drain(self, make_candidate) -> None:
        accumulator = RegistrationAccumulator()
        candidate = make_candidate()
        accumulator.add(candidate)

        assert accumulator.snapshot() == (candidate,)
        assert len(accumulator) == 1
        assert not accumulator.drained

    def test_run_id_is_generated_when_missing(self) -> None:
        first = RegistrationAccumulator()
        second = RegistrationAccumulator()

        assert first.run_id
        assert first.run_id != second.run_id
