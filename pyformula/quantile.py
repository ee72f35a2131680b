"""
Distribution quantiles by Newton iteration.

Solves cdf(theta) = q starting from the distribution mean. The pdf is the
derivative of the cdf, so each step is

    theta <- theta - (cdf(theta) - q) / pdf(theta)

Termination is guaranteed: the loop is capped at ``max_iter`` steps and a
vanishing density stops it immediately.
"""

import numpy as np

from ._utils import check_probability
from .exceptions import NoConvergence, DerivativeVanished


DEFAULT_TOLERANCE = 1e-5
DEFAULT_MAX_ITER = 1000
DEFAULT_MIN_DENSITY = 1e-12


def newton_quantile(
    dist,
    q: float,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iter: int = DEFAULT_MAX_ITER,
    min_density: float = DEFAULT_MIN_DENSITY,
) -> float:
    """
    Quantile of a distribution via Newton's method.
    
    Parameters
    ----------
    dist : Distribution
        Any object with mean(), cdf(x) and pdf(x) methods, including
        frozen scipy.stats distributions
    q : float
        Target probability, 0 < q < 1
    tolerance : float, default=1e-5
        Stop once successive iterates differ by at most this much
    max_iter : int, default=1000
        Maximum number of Newton steps
    min_density : float, default=1e-12
        Densities at or below this magnitude count as zero
    
    Returns
    -------
    float
        theta with cdf(theta) ~= q
    
    Raises
    ------
    DerivativeVanished
        If pdf(theta) is zero (or non-finite) at some iterate
    NoConvergence
        If max_iter steps pass without meeting the tolerance, or an
        iterate becomes non-finite
    
    Examples
    --------
    >>> newton_quantile(Normal(0, 1), 0.975)
    1.959963...
    """
    q = check_probability(q)
    if not tolerance > 0:
        raise ValueError(f"tolerance must be positive, got {tolerance}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be at least 1, got {max_iter}")
    
    theta = float(dist.mean())
    if not np.isfinite(theta):
        raise NoConvergence(
            f"Starting point (distribution mean) is not finite: {theta}",
            theta=theta,
            iterations=0,
        )
    
    for iteration in range(1, max_iter + 1):
        density = float(dist.pdf(theta))
        if not np.isfinite(density) or abs(density) <= min_density:
            raise DerivativeVanished(
                f"Density vanished at theta={theta!r} (pdf={density!r}) "
                f"after {iteration - 1} iteration(s)",
                theta=theta,
                iterations=iteration - 1,
            )
        
        theta_next = theta - (float(dist.cdf(theta)) - q) / density
        if not np.isfinite(theta_next):
            raise NoConvergence(
                f"Newton iterate diverged at iteration {iteration}",
                theta=theta,
                iterations=iteration,
            )
        
        if abs(theta_next - theta) <= tolerance:
            return theta_next
        theta = theta_next
    
    raise NoConvergence(
        f"No convergence to tolerance {tolerance} within {max_iter} iterations "
        f"(last theta={theta!r})",
        theta=theta,
        iterations=max_iter,
    )


# Short alias
quantile = newton_quantile


__all__ = [
    "newton_quantile",
    "quantile",
    "DEFAULT_TOLERANCE",
    "DEFAULT_MAX_ITER",
    "DEFAULT_MIN_DENSITY",
]
