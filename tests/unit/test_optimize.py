"""
Tests for the optimize module (Brent minimizer, root finder, bracketing).
"""

import math

import pytest

from pass_predictor.exceptions import OptimizerExhausted
from pass_predictor.optimize import bracket_minimum, brent_minimize, brent_root


class TestBrentMinimize:

    def test_parabola(self) -> None:
        result = brent_minimize(lambda x: (x - 2.0) ** 2 + 1.0, (0.0, 1.0, 5.0), 1e-8)
        assert result.converged
        assert result.x == pytest.approx(2.0, abs=1e-7)
        assert result.fun == pytest.approx(1.0)

    def test_cosine(self) -> None:
        result = brent_minimize(math.cos, (2.0, 3.0, 4.5), 1e-9)
        assert result.x == pytest.approx(math.pi, abs=1e-8)

    def test_descending_bracket(self) -> None:
        result = brent_minimize(lambda x: (x + 1.0) ** 2, (1.0, -0.5, -3.0), 1e-8)
        assert result.x == pytest.approx(-1.0, abs=1e-7)

    def test_julian_date_scale(self) -> None:
        # absolute tolerance works at large abscissae
        centre = 2457473.5123
        result = brent_minimize(lambda x: (x - centre) ** 2, (centre - 0.02, centre + 0.001,
                                                              centre + 0.02), 5e-6)
        assert result.converged
        assert result.x == pytest.approx(centre, abs=1e-5)

    def test_exhausted_returns_best_estimate(self) -> None:
        result = brent_minimize(lambda x: (x - 2.0) ** 2, (0.0, 1.0, 5.0), 1e-12,
                                max_iterations=2)
        assert not result.converged
        assert result.iterations == 2
        assert 0.0 < result.x < 5.0

    def test_bad_bracket(self) -> None:
        with pytest.raises(ValueError, match="Bracket"):
            brent_minimize(lambda x: x * x, (0.0, 5.0, 1.0), 1e-6)


class TestBrentRoot:

    def test_linear(self) -> None:
        assert brent_root(lambda x: 2.0 * x - 3.0, 0.0, 10.0, 1e-10) == pytest.approx(1.5)

    def test_reversed_interval(self) -> None:
        assert brent_root(math.sin, 4.0, 2.0, 1e-10) == pytest.approx(math.pi, abs=1e-9)

    def test_cubic(self) -> None:
        root = brent_root(lambda x: x ** 3 - 2.0 * x - 5.0, 2.0, 3.0, 1e-12)
        assert root == pytest.approx(2.0945514815423265, abs=1e-10)

    def test_endpoint_root(self) -> None:
        assert brent_root(lambda x: x - 1.0, 0.0, 1.0, 1e-10) == pytest.approx(1.0)

    def test_no_sign_change(self) -> None:
        assert brent_root(lambda x: x * x + 1.0, -1.0, 1.0, 1e-10) is None

    def test_budget_exhausted(self) -> None:
        assert brent_root(lambda x: x - 0.123456789, 0.0, 1.0, 1e-15, max_iterations=1) is None


class TestBracketMinimum:

    def test_walks_backward(self) -> None:
        f = lambda x: (x + 3.0) ** 2  # noqa: E731
        a, b, c = bracket_minimum(f, 0.0, -0.5, -1.0, 30)
        assert f(b) <= f(a)
        assert f(b) <= f(c)
        assert a < -3.0 + 1.0
        assert min(a, c) < b < max(a, c)

    def test_immediate_bracket(self) -> None:
        f = lambda x: (x + 0.5) ** 2  # noqa: E731
        assert bracket_minimum(f, 0.0, -0.5, -1.0, 30) == (-1.0, -0.5, 0.0)

    def test_exhausted(self) -> None:
        with pytest.raises(OptimizerExhausted):
            bracket_minimum(lambda x: x, 0.0, -0.5, -1.0, 5)
