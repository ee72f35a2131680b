"""
CPU backend using NumPy + SciPy.

This is the reference implementation: Householder QR with column pivoting
followed by a triangular back-solve.
"""

import warnings
import numpy as np
from scipy.linalg import qr, solve_triangular

from .base import CPUBackend, LeastSquaresResult
from ..exceptions import SingularSystem


# Condition number of R above which a full-rank fit is still reported but flagged
CONDITION_WARN_THRESHOLD = 1e10


class CPUBackendFP64(CPUBackend):
    """
    CPU backend using NumPy + SciPy.
    
    Always uses FP64 precision.
    """
    
    def __init__(self):
        self.name = "cpu_fp64"
        self.precision = "fp64"
    
    def fit_least_squares(
        self,
        X: np.ndarray,
        y: np.ndarray,
        stacklevel: int = 2,
    ) -> LeastSquaresResult:
        """
        Solve the least-squares problem using NumPy/LAPACK.
        
        Never inverts X'X; coefficients come from R b = Q'y.
        """
        X_work = np.asarray(X, dtype=np.float64)
        y_work = np.asarray(y, dtype=np.float64)
        n, p = X_work.shape
        
        if p == 0 or n == 0:
            raise SingularSystem(0, p)

        # QR decomposition with column pivoting
        Q, R, P = qr(X_work, mode='economic', pivoting=True)

        # Determine rank (pivoting makes |R[0, 0]| the largest diagonal entry)
        R_diag = np.abs(np.diag(R))
        eps = np.finfo(np.float64).eps
        tol = max(n, p) * eps * R_diag[0]
        if R_diag[0] == 0:
            rank = 0
        else:
            rank = int(np.sum(R_diag > tol))
        
        # n < p leaves at most n nonzero pivots, so it lands here as well
        if rank < p:
            raise SingularSystem(rank, p)
        
        R_active = R[:p, :p]
        cond = np.linalg.cond(R_active)
        if cond > CONDITION_WARN_THRESHOLD:
            warnings.warn(
                f"Design matrix is ill-conditioned (condition number {cond:.2e}); "
                f"coefficients may be inaccurate",
                RuntimeWarning,
                stacklevel=stacklevel
            )
        
        # Solve R b = Q'y
        qty = Q.T @ y_work
        coef = np.empty(p, dtype=np.float64)
        coef[P] = solve_triangular(R_active, qty[:p], lower=False)
        
        fitted = X_work @ coef
        residuals = y_work - fitted
        
        return LeastSquaresResult(
            coef=coef,
            residuals=residuals,
            fitted_values=fitted,
            rank=rank,
            df_residual=n - rank,
            qr_R=R_active,
            qr_pivot=P.astype(np.int64) + 1,  # 1-indexed, like column terms
            qr_tol=tol
        )
    
    def get_device_info(self) -> dict:
        """Get backend information."""
        import scipy
        return {
            'backend': 'cpu',
            'precision': 'fp64',
            'library': f'NumPy {np.__version__}, SciPy {scipy.__version__}',
        }
