"""Tests for the root finder and Romberg integrator."""

import math

import numpy as np
import pytest

from blowsnow.errors import BracketError, ConvergenceError, FatalError
from blowsnow.solvers import (
    TrapezoidRefinement,
    polint,
    romberg,
    rtsafe,
    shear_residual,
    solve_shear_velocity,
)


def test_rtsafe_sqrt2() -> None:
    root = rtsafe(lambda x: (x * x - 2.0, 2.0 * x), 0.0, 2.0, tol=1e-10)
    assert math.isclose(root, math.sqrt(2.0), abs_tol=1e-9)


def test_rtsafe_linear_root() -> None:
    root = rtsafe(lambda x: (x - 0.3, 1.0), -1.0, 1.0, tol=1e-10)
    assert math.isclose(root, 0.3, abs_tol=1e-10)


def test_rtsafe_odd_function_symmetric_bracket() -> None:
    root = rtsafe(lambda x: (x ** 3 + x, 3.0 * x * x + 1.0), -1.0, 1.0, tol=1e-8)
    assert root == 0.0


def test_rtsafe_reversed_bracket() -> None:
    root = rtsafe(lambda x: (2.0 - x * x, -2.0 * x), 2.0, 0.0, tol=1e-10)
    assert math.isclose(root, math.sqrt(2.0), abs_tol=1e-9)


def test_rtsafe_endpoint_root() -> None:
    assert rtsafe(lambda x: (x, 1.0), 0.0, 1.0) == 0.0
    assert rtsafe(lambda x: (x - 1.0, 1.0), 0.0, 1.0) == 1.0


def test_rtsafe_not_bracketed() -> None:
    with pytest.raises(BracketError) as excinfo:
        rtsafe(lambda x: (x * x + 1.0, 2.0 * x), -1.0, 1.0)
    assert isinstance(excinfo.value, FatalError)
    assert excinfo.value.x1 == -1.0


def test_rtsafe_iteration_cap() -> None:
    with pytest.raises(ConvergenceError) as excinfo:
        rtsafe(lambda x: (x * x - 2.0, 2.0 * x), 0.0, 2.0, tol=1e-12, max_iter=1)
    assert excinfo.value.routine == 'rtsafe'
    assert excinfo.value.iterations == 1


def test_shear_velocity_root_changes_sign() -> None:
    """The solved shear velocity sits on a sign change of the residual."""
    u10 = 17.44
    guess = 0.4 * u10 / np.log(10.0 / 0.0001)
    ushear = solve_shear_velocity(u10, 10.0, 1e-7, guess + 5.0)
    f_below, _ = shear_residual(ushear - 1e-5, u10, 10.0)
    f_above, _ = shear_residual(ushear + 1e-5, u10, 10.0)
    assert f_below > 0.0 > f_above
    assert 0.8 < ushear < 1.0


def test_shear_residual_derivative() -> None:
    x, h = 0.7, 1e-6
    f_plus, _ = shear_residual(x + h, 12.0, 10.0)
    f_minus, _ = shear_residual(x - h, 12.0, 10.0)
    _, df = shear_residual(x, 12.0, 10.0)
    assert math.isclose(df, (f_plus - f_minus) / (2 * h), rel_tol=1e-5)


def _bisect_shear_root(u10: float, lo: float, hi: float) -> float:
    """Reference root of the shear residual by plain bisection."""
    f_lo, _ = shear_residual(lo, u10, 10.0)
    while hi - lo > 1e-13:
        mid = 0.5 * (lo + hi)
        f_mid, _ = shear_residual(mid, u10, 10.0)
        if (f_mid > 0.0) == (f_lo > 0.0):
            lo, f_lo = mid, f_mid
        else:
            hi = mid
    return 0.5 * (lo + hi)


@pytest.mark.parametrize(
    "u10", [0.5, 2.0, 5.0, 8.0, 12.0, 17.44, 25.0],
)
def test_shear_velocity_matches_bisection(u10: float) -> None:
    hi = 0.4 * u10 / np.log(10.0 / 0.0001) + 5.0
    reference = _bisect_shear_root(u10, 1e-7, hi)
    assert math.isclose(solve_shear_velocity(u10, 10.0, 1e-7, hi),
                        reference, abs_tol=1e-6)
    assert math.isclose(solve_shear_velocity(u10, 10.0, 1e-7, hi, tol=1e-10),
                        reference, abs_tol=1e-9)


def test_polint_quadratic_extrapolation() -> None:
    xa = [1.0, 2.0, 3.0]
    ya = [x * x + 1.0 for x in xa]
    y, dy = polint(xa, ya, 0.0)
    assert math.isclose(y, 1.0, abs_tol=1e-12)


def test_trapezoid_refinement_sequence() -> None:
    trap = TrapezoidRefinement(lambda x: x * x, 0.0, 1.0)
    estimates = [trap.refine() for _ in range(6)]
    errors = [abs(s - 1.0 / 3.0) for s in estimates]
    assert estimates[0] == 0.5
    # Error drops by 4 with each halving of the step
    for e1, e2 in zip(errors, errors[1:]):
        assert math.isclose(e1 / e2, 4.0, rel_tol=1e-6)


def test_romberg_polynomial() -> None:
    value, n_iter = romberg(lambda x: x ** 4, 0.0, 1.0, full_output=True)
    assert math.isclose(value, 0.2, rel_tol=1e-6)
    assert n_iter < 20


def test_romberg_exponential() -> None:
    value, n_iter = romberg(np.exp, 0.0, 2.0, full_output=True)
    assert math.isclose(value, math.exp(2.0) - 1.0, rel_tol=1e-6)
    assert n_iter < 20


def test_romberg_zero_integrand() -> None:
    assert romberg(lambda x: 0.0, 0.0, 1.0) == 0.0


def test_romberg_iteration_cap() -> None:
    with pytest.raises(ConvergenceError):
        romberg(np.exp, 0.0, 2.0, max_iter=3)


def test_interleaved_trapezoid_sessions() -> None:
    """Two sessions refined in turn match sessions refined separately."""
    a = TrapezoidRefinement(np.sin, 0.0, np.pi)
    b = TrapezoidRefinement(np.exp, 0.0, 1.0)
    interleaved = [(a.refine(), b.refine()) for _ in range(5)]

    a_alone = TrapezoidRefinement(np.sin, 0.0, np.pi)
    b_alone = TrapezoidRefinement(np.exp, 0.0, 1.0)
    separate = list(zip([a_alone.refine() for _ in range(5)],
                        [b_alone.refine() for _ in range(5)]))
    assert interleaved == separate


def test_nested_romberg() -> None:
    """An integrand that itself integrates does not disturb the outer sum."""
    def inner(x):
        return romberg(lambda y: x * y, 0.0, 1.0)

    value = romberg(inner, 0.0, 1.0)
    assert math.isclose(value, 0.25, rel_tol=1e-6)
