"""
Parametric distribution objects.

Each distribution exposes mean(), cdf(x) and pdf(x), which is all the
Newton quantile routine needs. The implementations wrap frozen scipy.stats
distributions.
"""

import numpy as np
from abc import ABC, abstractmethod
from scipy import stats

from .quantile import newton_quantile


class Distribution(ABC):
    """Base class for distributions."""
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Distribution name."""
        pass
    
    @abstractmethod
    def mean(self) -> float:
        """Expected value."""
        pass
    
    @abstractmethod
    def cdf(self, x):
        """Cumulative distribution function: P(X <= x)"""
        pass
    
    @abstractmethod
    def pdf(self, x):
        """Probability density function: dF/dx"""
        pass
    
    def ppf(self, q: float, **kwargs) -> float:
        """Quantile by Newton iteration (see newton_quantile)."""
        return newton_quantile(self, q, **kwargs)


class _ScipyDistribution(Distribution):
    """Distribution backed by a frozen scipy.stats object."""
    
    def __init__(self, frozen):
        self._frozen = frozen
    
    def mean(self) -> float:
        return float(self._frozen.mean())
    
    def cdf(self, x):
        return self._frozen.cdf(x)
    
    def pdf(self, x):
        return self._frozen.pdf(x)


def _require_positive(**params):
    for key, value in params.items():
        if not np.isfinite(value) or value <= 0:
            raise ValueError(f"{key} must be positive and finite, got {value}")


class Normal(_ScipyDistribution):
    """Normal distribution N(mu, sigma^2)."""
    
    def __init__(self, mu: float = 0.0, sigma: float = 1.0):
        _require_positive(sigma=sigma)
        self.mu = float(mu)
        self.sigma = float(sigma)
        super().__init__(stats.norm(loc=self.mu, scale=self.sigma))
    
    @property
    def name(self) -> str:
        return "normal"
    
    def __repr__(self):
        return f"Normal(mu={self.mu}, sigma={self.sigma})"


class Gamma(_ScipyDistribution):
    """Gamma distribution with shape k and scale theta (mean k * theta)."""
    
    def __init__(self, shape: float, scale: float = 1.0):
        _require_positive(shape=shape, scale=scale)
        self.shape = float(shape)
        self.scale = float(scale)
        super().__init__(stats.gamma(a=self.shape, scale=self.scale))
    
    @property
    def name(self) -> str:
        return "gamma"
    
    def __repr__(self):
        return f"Gamma(shape={self.shape}, scale={self.scale})"


class Beta(_ScipyDistribution):
    """Beta distribution on [0, 1]."""
    
    def __init__(self, a: float, b: float):
        _require_positive(a=a, b=b)
        self.a = float(a)
        self.b = float(b)
        super().__init__(stats.beta(a=self.a, b=self.b))
    
    @property
    def name(self) -> str:
        return "beta"
    
    def __repr__(self):
        return f"Beta(a={self.a}, b={self.b})"


class Exponential(_ScipyDistribution):
    """Exponential distribution with rate lambda (mean 1 / lambda)."""
    
    def __init__(self, rate: float = 1.0):
        _require_positive(rate=rate)
        self.rate = float(rate)
        super().__init__(stats.expon(scale=1.0 / self.rate))
    
    @property
    def name(self) -> str:
        return "exponential"
    
    def __repr__(self):
        return f"Exponential(rate={self.rate})"


__all__ = ["Distribution", "Normal", "Gamma", "Beta", "Exponential"]
