"""
Derivative-free scalar optimization.

Brent's minimizer (golden section search with parabolic interpolation) and
Brent's root finder (bisection with secant and inverse quadratic steps).
Both work on any callable taking and returning a float, so callers supply
closures over whatever state the evaluation needs.

Reference: Press et al., Numerical Recipes in C, 2nd ed., sections 9.3 and 10.2.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from .exceptions import OptimizerExhausted

logger = logging.getLogger(__name__)

ScalarFunction = Callable[[float], float]

GOLDEN_SECTION = 0.3819660
ZEPS = 1.0e-10
MACHINE_EPS = float(np.finfo(float).eps)
DEFAULT_MAX_ITERATIONS = 100


@dataclass(frozen=True)
class MinimizeResult:
    """Outcome of brent_minimize."""

    x: float
    fun: float
    iterations: int
    converged: bool


def _sign(a: float, b: float) -> float:
    return abs(a) if b >= 0.0 else -abs(a)


def brent_minimize(f: ScalarFunction, bracket: Tuple[float, float, float],
                   tolerance: float,
                   max_iterations: int = DEFAULT_MAX_ITERATIONS) -> MinimizeResult:
    """
    Find a local minimum of f inside a bracket.

    Args:
        f: Function to minimize
        bracket: (low, mid, high) with mid strictly between low and high;
            f(mid) should not exceed f(low) or f(high)
        tolerance: Absolute tolerance on the abscissa
        max_iterations: Iteration budget

    Returns:
        MinimizeResult; on exhaustion the best point so far with
        ``converged=False``

    Raises:
        ValueError: If mid is not strictly between low and high
    """
    ax, bx, cx = bracket
    a = min(ax, cx)
    b = max(ax, cx)
    if not a < bx < b:
        raise ValueError(f"Bracket middle {bx} is not strictly inside ({a}, {b})")

    d = 0.0
    e = 0.0
    x = w = v = bx
    fx = fw = fv = f(x)

    for iteration in range(1, max_iterations + 1):
        xm = 0.5 * (a + b)
        tol1 = tolerance + ZEPS
        tol2 = 2.0 * tol1
        if abs(x - xm) <= tol2 - 0.5 * (b - a):
            return MinimizeResult(x, fx, iteration, True)

        if abs(e) > tol1:
            # trial parabolic fit
            r = (x - w) * (fx - fv)
            q = (x - v) * (fx - fw)
            p = (x - v) * q - (x - w) * r
            q = 2.0 * (q - r)
            if q > 0.0:
                p = -p
            q = abs(q)
            etemp = e
            e = d
            if abs(p) >= abs(0.5 * q * etemp) or p <= q * (a - x) or p >= q * (b - x):
                e = a - x if x >= xm else b - x
                d = GOLDEN_SECTION * e
            else:
                d = p / q
                u = x + d
                if u - a < tol2 or b - u < tol2:
                    d = _sign(tol1, xm - x)
        else:
            e = a - x if x >= xm else b - x
            d = GOLDEN_SECTION * e

        u = x + d if abs(d) >= tol1 else x + _sign(tol1, d)
        fu = f(u)

        if fu <= fx:
            if u >= x:
                a = x
            else:
                b = x
            v, w, x = w, x, u
            fv, fw, fx = fw, fx, fu
        else:
            if u < x:
                a = u
            else:
                b = u
            if fu <= fw or w == x:
                v, w = w, u
                fv, fw = fw, fu
            elif fu <= fv or v == x or v == w:
                v = u
                fv = fu

    logger.debug(f"brent_minimize: no convergence after {max_iterations} iterations")
    return MinimizeResult(x, fx, max_iterations, False)


def brent_root(f: ScalarFunction, x1: float, x2: float, tolerance: float,
               max_iterations: int = DEFAULT_MAX_ITERATIONS) -> Optional[float]:
    """
    Find a root of f between x1 and x2.

    Args:
        f: Function whose zero is wanted
        x1: One end of the interval
        x2: Other end of the interval
        tolerance: Absolute tolerance on the root
        max_iterations: Iteration budget

    Returns:
        The root, or None when f(x1) and f(x2) have the same sign or the
        budget runs out
    """
    a = x1
    b = x2
    c = x2
    d = e = 0.0
    fa = f(a)
    fb = f(b)

    if (fa > 0.0 and fb > 0.0) or (fa < 0.0 and fb < 0.0):
        logger.debug(f"brent_root: no sign change between {x1} and {x2}")
        return None

    fc = fb
    for _ in range(max_iterations):
        if (fb > 0.0 and fc > 0.0) or (fb < 0.0 and fc < 0.0):
            c = a
            fc = fa
            e = d = b - a
        if abs(fc) < abs(fb):
            a, b, c = b, c, b
            fa, fb, fc = fb, fc, fb

        tol1 = 2.0 * MACHINE_EPS * abs(b) + 0.5 * tolerance
        xm = 0.5 * (c - b)
        if abs(xm) <= tol1 or fb == 0.0:
            return b

        if abs(e) >= tol1 and abs(fa) > abs(fb):
            # inverse quadratic interpolation
            s = fb / fa
            if a == c:
                p = 2.0 * xm * s
                q = 1.0 - s
            else:
                q = fa / fc
                r = fb / fc
                p = s * (2.0 * xm * q * (q - r) - (b - a) * (r - 1.0))
                q = (q - 1.0) * (r - 1.0) * (s - 1.0)
            if p > 0.0:
                q = -q
            p = abs(p)
            min1 = 3.0 * xm * q - abs(tol1 * q)
            min2 = abs(e * q)
            if 2.0 * p < min(min1, min2):
                e = d
                d = p / q
            else:
                d = xm
                e = d
        else:
            d = xm
            e = d

        a = b
        fa = fb
        if abs(d) > tol1:
            b += d
        else:
            b += _sign(tol1, xm)
        fb = f(b)

    logger.debug(f"brent_root: no convergence after {max_iterations} iterations")
    return None


def bracket_minimum(f: ScalarFunction, start: float, step: float, first_step: float,
                    max_steps: int) -> Tuple[float, float, float]:
    """
    Walk a ladder of points away from start until they bracket a minimum.

    The ladder starts with start, start + step and start + first_step. Each
    further rung drops the inner point and adds start + step * (rung + 3).

    Args:
        f: Function to bracket
        start: Starting abscissa (the inner end of the ladder)
        step: Rung spacing; its sign sets the walking direction
        first_step: Offset of the first outer point from start
        max_steps: Maximum number of rungs

    Returns:
        (outer, middle, inner) with f(middle) <= f(outer), f(inner)

    Raises:
        OptimizerExhausted: If no bracket is found within max_steps
    """
    c = start
    fc = f(c)
    b = start + step
    fb = f(b)
    a = start + first_step
    fa = f(a)

    for i in range(max_steps):
        if fb <= fa and fb <= fc:
            return a, b, c
        c, fc = b, fb
        b, fb = a, fa
        a = start + step * (i + 3)
        fa = f(a)

    raise OptimizerExhausted(f"No minimum bracketed within {max_steps} steps of {start}")
