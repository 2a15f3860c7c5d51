"""Tests for the bounded bracketing/refining search driver."""

import logging
import math

import pytest

from ephemjax.search import (
    EventSearch,
    SearchPhase,
    SearchResult,
    SearchState,
    SearchStatus,
    SearchTarget,
    refine_extremum,
    refine_zero,
)


# ---------------------------------------------------------------------------
# Refinement helpers
# ---------------------------------------------------------------------------


class TestRefineZero:
    def test_sine_zero(self):
        t, y = refine_zero(math.sin, 3.0, math.sin(3.0), 3.5, math.sin(3.5), tolerance=1e-12)
        assert t == pytest.approx(math.pi, abs=1e-10)
        assert abs(y) < 1e-10

    def test_reversed_bracket(self):
        t, _ = refine_zero(math.sin, 3.5, math.sin(3.5), 3.0, math.sin(3.0), tolerance=1e-12)
        assert t == pytest.approx(math.pi, abs=1e-10)

    def test_zero_at_end(self):
        assert refine_zero(math.sin, 0.0, 0.0, 1.0, math.sin(1.0)) == (0.0, 0.0)

    def test_cubic(self):
        def f(t):
            return t**3 - 2.0

        t, _ = refine_zero(f, 1.0, f(1.0), 2.0, f(2.0), tolerance=1e-12)
        assert t == pytest.approx(2.0 ** (1.0 / 3.0), abs=1e-10)

    def test_iteration_cap_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ephemjax.search._driver"):
            refine_zero(math.sin, 3.0, math.sin(3.0), 3.5, math.sin(3.5), tolerance=1e-300, max_iterations=2)
        assert any("without convergence" in r.message for r in caplog.records)


class TestRefineExtremum:
    def test_cosine_maximum(self):
        t, value = refine_extremum(math.cos, 0.3, 0.5, tolerance=1e-10)
        assert t == pytest.approx(0.0, abs=1e-7)
        assert value == pytest.approx(1.0, abs=1e-12)

    def test_known_samples(self):
        def f(t):
            return -((t - 1.25) ** 2)

        samples = (f(0.0), f(1.0), f(2.0))
        t, value = refine_extremum(f, 1.0, 1.0, samples=samples, tolerance=1e-9)
        assert t == pytest.approx(1.25, abs=1e-9)
        assert value == pytest.approx(0.0, abs=1e-12)


# ---------------------------------------------------------------------------
# Search state
# ---------------------------------------------------------------------------


class TestSearchState:
    def test_initial_phase(self):
        state = SearchState(SearchTarget.ZERO, 1, 0.5)
        assert state.phase is SearchPhase.BRACKETING
        assert not state.done

    def test_terminal_phases(self):
        for phase, status in (
            (SearchPhase.FOUND, SearchStatus.FOUND),
            (SearchPhase.NOT_FOUND, SearchStatus.NOT_FOUND),
            (SearchPhase.OUT_OF_RANGE, SearchStatus.OUT_OF_RANGE),
        ):
            state = SearchState(SearchTarget.EXTREMUM, -1, 1.0)
            state.transition(phase)
            assert state.done
            assert state.result().status is status

    def test_found_counts_accepted_attempt(self):
        state = SearchState(SearchTarget.ZERO, 1, 1.0, retries=2)
        state.transition(SearchPhase.FOUND)
        result = state.result(10.0, 0.0)
        assert result.attempts == 3
        assert result.found

    def test_transition_logs(self, caplog):
        state = SearchState(SearchTarget.ZERO, 1, 1.0)
        with caplog.at_level(logging.DEBUG, logger="ephemjax.search._state"):
            state.transition(SearchPhase.REFINING)
        assert any("bracketing -> refining" in r.message for r in caplog.records)

    def test_result_defaults(self):
        result = SearchResult(SearchStatus.NOT_FOUND)
        assert result.jd is None
        assert not result.found


# ---------------------------------------------------------------------------
# Event search
# ---------------------------------------------------------------------------


class TestEventSearchZero:
    def test_first_zero_forward(self):
        result = EventSearch(math.sin, step=0.5, tolerance=1e-10).find_zero(0.1)
        assert result.found
        assert result.jd == pytest.approx(math.pi, abs=1e-9)
        assert result.attempts == 1

    def test_first_zero_backward(self):
        result = EventSearch(math.sin, step=0.5, tolerance=1e-10, direction=-1).find_zero(6.0)
        assert result.found
        assert result.jd == pytest.approx(math.pi, abs=1e-9)

    def test_zero_at_start(self):
        result = EventSearch(math.sin, step=0.5).find_zero(0.0)
        assert result.found
        assert result.jd == 0.0

    def test_accept_skips_candidates(self):
        search = EventSearch(math.sin, step=0.5, tolerance=1e-10)
        result = search.find_zero(0.1, accept=lambda t, v: t > 5.0)
        assert result.found
        assert result.jd == pytest.approx(2.0 * math.pi, abs=1e-9)
        assert result.attempts == 2

    def test_rejected_sampled_root_keeps_scanning(self):
        def f(t):
            return (t - 1.0) * (t - 1.25) * (t - 3.0)

        # The coarse grid lands exactly on the root at 1.0; the root at 1.25
        # lies in the same step interval after it
        search = EventSearch(f, step=0.5, tolerance=1e-10)
        result = search.find_zero(0.0, accept=lambda t, v: t > 1.1)
        assert result.found
        assert result.jd == pytest.approx(1.25, abs=1e-9)
        assert result.attempts == 2

    def test_never_crossing_is_out_of_range(self):
        result = EventSearch(lambda t: 1.0 + t * t, step=1.0, max_steps=25).find_zero(0.0)
        assert result.status is SearchStatus.OUT_OF_RANGE
        assert result.iterations == 25
        assert result.jd is None

    def test_rejecting_everything_is_not_found(self):
        search = EventSearch(math.sin, step=0.5, max_attempts=3)
        result = search.find_zero(0.1, accept=lambda t, v: False)
        assert result.status is SearchStatus.NOT_FOUND
        assert result.attempts == 3

    def test_single_attempt(self):
        search = EventSearch(math.sin, step=0.5, single_attempt=True)
        result = search.find_zero(0.1, accept=lambda t, v: False)
        assert result.status is SearchStatus.NOT_FOUND
        assert result.attempts == 1

    @pytest.mark.parametrize(
        "kwargs",
        [{"step": 0.0}, {"step": -1.0}, {"step": 1.0, "tolerance": 0.0}, {"step": 1.0, "direction": 0}],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            EventSearch(math.sin, **kwargs)


class TestEventSearchExtremum:
    def test_first_maximum(self):
        result = EventSearch(math.sin, step=0.4, tolerance=1e-9).find_extremum(0.0)
        assert result.found
        assert result.jd == pytest.approx(math.pi / 2.0, abs=1e-6)
        assert result.value == pytest.approx(1.0, abs=1e-10)

    def test_first_minimum(self):
        result = EventSearch(math.sin, step=0.4, tolerance=1e-9).find_extremum(0.0, minimum=True)
        assert result.found
        assert result.jd == pytest.approx(1.5 * math.pi, abs=1e-6)
        assert result.value == pytest.approx(-1.0, abs=1e-10)

    def test_backward_maximum(self):
        search = EventSearch(math.sin, step=0.4, tolerance=1e-9, direction=-1)
        result = search.find_extremum(7.0)
        assert result.jd == pytest.approx(math.pi / 2.0, abs=1e-6)

    def test_accept_skips_extrema(self):
        search = EventSearch(math.cos, step=0.4, tolerance=1e-9)
        result = search.find_extremum(0.5, accept=lambda t, v: t > 7.0)
        assert result.jd == pytest.approx(4.0 * math.pi, abs=1e-6)
        assert result.attempts == 2

    def test_monotonic_is_out_of_range(self):
        result = EventSearch(lambda t: t, step=1.0, max_steps=10).find_extremum(0.0)
        assert result.status is SearchStatus.OUT_OF_RANGE
