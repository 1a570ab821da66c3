"""
Numerical solvers used by the blowing snow kernel.

Includes:
- Safeguarded Newton-Raphson root finding (shear velocity)
- Neville polynomial extrapolation
- Romberg integration built on trapezoid refinement sessions

All state lives in local variables or in objects created per call, so
independent integrations can run concurrently.
"""

import logging

import numpy as np

from .constants import VON_KARMAN, GRAVITY
from .errors import BracketError, ConvergenceError, FatalError

logger = logging.getLogger(__name__)


# =============================================================================
# Root Finding
# =============================================================================

def shear_residual(x, ur, zr):
    """
    Implicit shear velocity equation and its derivative.

    f(x) = exp(k Ur / x) - 2 g Zr / (0.12 x²)

    Parameters
    ----------
    x : float
        Trial shear velocity [m/s]
    ur : float
        Wind speed at the reference height [m/s]
    zr : float
        Reference height [m]

    Returns
    -------
    f, df : float
        Function value and derivative with respect to x
    """
    with np.errstate(over='ignore', invalid='ignore'):
        e = np.exp(VON_KARMAN * ur / x)
        f = e - (2.0 * GRAVITY * zr) / (0.12 * x * x)
        df = -e * VON_KARMAN * ur / (x * x) + 2.0 * (2.0 * GRAVITY * zr) / (0.12 * x * x * x)
    return float(f), float(df)


def rtsafe(func, x1, x2, tol=1e-6, max_iter=100):
    """
    Find a root of func bracketed by [x1, x2].

    Newton-Raphson steps are taken where they stay inside the bracket and
    shrink fast enough; otherwise the step falls back to bisection.

    Parameters
    ----------
    func : callable
        func(x) -> (f, df)
    x1, x2 : float
        Interval endpoints; f(x1) and f(x2) must differ in sign
    tol : float
        Absolute tolerance on the step size
    max_iter : int
        Maximum number of iterations

    Returns
    -------
    x : float
        Root estimate

    Raises
    ------
    BracketError
        If the interval does not bracket a root
    ConvergenceError
        If max_iter is exceeded
    """
    fl, _ = func(x1)
    fh, _ = func(x2)

    if (fl > 0.0 and fh > 0.0) or (fl < 0.0 and fh < 0.0):
        logger.error("Root must be bracketed in rtsafe: x1=%g, x2=%g, "
                     "f1=%g, f2=%g", x1, x2, fl, fh)
        raise BracketError(x1, x2, fl, fh)

    if fl == 0.0:
        return x1
    if fh == 0.0:
        return x2

    # Orient so that f(xl) < 0
    if fl < 0.0:
        xl, xh = x1, x2
    else:
        xl, xh = x2, x1

    rts = 0.5 * (x1 + x2)
    dxold = abs(x2 - x1)
    dx = dxold
    f, df = func(rts)

    for _ in range(max_iter):
        if f == 0.0:
            return rts
        out_of_range = ((rts - xh) * df - f) * ((rts - xl) * df - f) > 0.0
        too_slow = abs(2.0 * f) > abs(dxold * df)
        if out_of_range or too_slow:
            # Bisect
            dxold = dx
            dx = 0.5 * (xh - xl)
            rts = xl + dx
            if xl == rts:
                return rts
        else:
            dxold = dx
            dx = f / df
            temp = rts
            rts -= dx
            if temp == rts:
                return rts

        if abs(dx) < tol:
            return rts

        f, df = func(rts)
        if f < 0.0:
            xl = rts
        else:
            xh = rts

    logger.error("Maximum number of iterations exceeded in rtsafe: "
                 "x1=%g, x2=%g, last=%g", x1, x2, rts)
    raise ConvergenceError('rtsafe', max_iter, x1=x1, x2=x2, last=rts)


def solve_shear_velocity(ur, zr, x1, x2, tol=1e-6, max_iter=100):
    """Solve the implicit shear velocity equation on [x1, x2]."""
    return rtsafe(lambda x: shear_residual(x, ur, zr), x1, x2,
                  tol=tol, max_iter=max_iter)


# =============================================================================
# Integration
# =============================================================================

def polint(xa, ya, x):
    """
    Neville polynomial interpolation through (xa, ya), evaluated at x.

    Returns
    -------
    y : float
        Interpolated value
    dy : float
        Error estimate (last correction applied)
    """
    xa = np.asarray(xa, dtype=float)
    c = np.array(ya, dtype=float)
    d = c.copy()
    n = len(xa)

    ns = int(np.argmin(np.abs(x - xa)))
    y = c[ns]
    ns -= 1
    dy = 0.0

    for m in range(1, n):
        for i in range(n - m):
            ho = xa[i] - x
            hp = xa[i + m] - x
            w = c[i + 1] - d[i]
            den = ho - hp
            if den == 0.0:
                # Two identical abscissas
                raise FatalError("Error in routine polint: duplicate abscissas")
            den = w / den
            d[i] = hp * den
            c[i] = ho * den
        if 2 * (ns + 1) < n - m:
            dy = c[ns + 1]
        else:
            dy = d[ns]
            ns -= 1
        y += dy

    return float(y), float(dy)


class TrapezoidRefinement:
    """
    Successive trapezoid-rule estimates of an integral over [a, b].

    Each call to :meth:`refine` doubles the number of interior points and
    returns the updated estimate. The running estimate is held on the
    instance, so one session belongs to exactly one integration.
    """

    def __init__(self, func, a, b):
        self.func = func
        self.a = a
        self.b = b
        self.n = 0
        self.s = 0.0

    def refine(self):
        """Return the next trapezoid estimate."""
        a, b = self.a, self.b
        self.n += 1

        if self.n == 1:
            self.s = 0.5 * (b - a) * (self.func(a) + self.func(b))
            return self.s

        it = 1 << (self.n - 2)
        delta = (b - a) / it
        x = a + 0.5 * delta
        total = 0.0
        for _ in range(it):
            total += self.func(x)
            x += delta
        self.s = 0.5 * (self.s + (b - a) * total / it)
        return self.s


def romberg(func, a, b, tol=1e-6, max_iter=100, order=5, full_output=False):
    """
    Integrate func from a to b with Romberg's method.

    Trapezoid estimates are extrapolated to zero step size once `order`
    refinements are available.

    Parameters
    ----------
    func : callable
        Integrand func(x) -> float
    a, b : float
        Integration limits
    tol : float
        Relative tolerance on the extrapolation error
    max_iter : int
        Maximum number of refinements
    order : int
        Number of points used in the extrapolation
    full_output : bool
        Also return the number of refinements used

    Returns
    -------
    integral : float
    n_iter : int
        Only when full_output is True

    Raises
    ------
    ConvergenceError
        If max_iter refinements do not converge
    """
    trap = TrapezoidRefinement(func, a, b)
    h = [1.0]
    s = []

    for j in range(1, max_iter + 1):
        s.append(trap.refine())
        if j >= order:
            ss, dss = polint(h[j - order:j], s[j - order:j], 0.0)
            if abs(dss) <= tol * abs(ss):
                if full_output:
                    return ss, j
                return ss
        h.append(0.25 * h[j - 1])

    logger.error("Too many steps in routine romberg: a=%g, b=%g", a, b)
    raise ConvergenceError('romberg', max_iter, a=a, b=b)
