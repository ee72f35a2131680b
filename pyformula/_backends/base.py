"""
Abstract base classes for backends.

Defines the interface all backends must implement.
"""

from abc import ABC, abstractmethod
import numpy as np
from dataclasses import dataclass


@dataclass
class LeastSquaresResult:
    """Complete least-squares results."""
    coef: np.ndarray
    residuals: np.ndarray
    fitted_values: np.ndarray
    rank: int
    df_residual: int
    qr_R: np.ndarray
    qr_pivot: np.ndarray
    qr_tol: float


class BackendBase(ABC):
    """Abstract base class for all backends."""
    
    @abstractmethod
    def fit_least_squares(
        self,
        X: np.ndarray,
        y: np.ndarray,
        stacklevel: int = 2,
    ) -> LeastSquaresResult:
        """
        Solve min ||y - X b||^2 - complete computation.
        
        Backends implement ALL computation internally using their
        native types, only converting at entry/exit.
        
        Parameters
        ----------
        X : ndarray, shape (n, k)
            Design matrix, used as given (no intercept is added)
        y : ndarray, shape (n,)
            Response vector
        stacklevel : int
            Frame that numerical warnings are attributed to, counted
            from this method (2 = its caller)
            
        Returns
        -------
        LeastSquaresResult
            Complete least-squares results (all numpy arrays)
        
        Raises
        ------
        SingularSystem
            If X has no columns or is not of full column rank
        """
        pass
    
    @abstractmethod
    def get_device_info(self) -> dict:
        """Get backend information."""
        pass


class CPUBackend(BackendBase):
    """CPU backend base class (always FP64)."""
    pass
