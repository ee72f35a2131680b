"""
Formula-driven linear regression with R-style interface and output.

This is the user-facing API: parse a formula, build the design matrix,
solve by pivoted QR and report the usual inference statistics.
"""

import numpy as np
import pandas as pd
from typing import Optional, Union
from scipy import stats
from scipy.linalg import solve_triangular

from ._backends import get_backend
from ._core.ols_solver import fit_least_squares
from .design import design_from_formula, as_source, assemble_columns
from .formula import Formula, Intercept


# Bin edges for the R significance codes, left-closed
_SIGNIF_BREAKS = [0.0, 0.001, 0.01, 0.05, 0.1, 1.0 + 1e-12]
_SIGNIF_CODES = ["***", "**", "*", ".", ""]


class LinearModel:
    """
    Fit a linear regression model from a formula (like R's lm()).

    The formula says exactly which columns enter the design: no intercept
    is added unless the formula contains ``1``.

    Examples
    --------
    >>> import numpy as np
    >>> from pyformula import lm
    >>>
    >>> X = np.random.randn(100, 2)
    >>> y = 1.0 + 2.0 * X[:, 0] - X[:, 1] + 0.1 * np.random.randn(100)
    >>>
    >>> model = lm("y ~ 1 + X1 + X2", X, response=y)
    >>> model.summary()
    >>>
    >>> model.coef         # Named coefficients
    >>> model.pvalues      # P-values for each coefficient
    >>> model.conf_int()   # Confidence intervals
    >>> model.predict(X_new)
    """

    def __init__(
        self,
        formula: Union[str, Formula],
        data: Union[pd.DataFrame, np.ndarray],
        response: Optional[np.ndarray] = None,
        backend: str = 'auto',
        _stacklevel: int = 1,
    ):
        """
        Fit linear regression model.

        Parameters
        ----------
        formula : str or Formula
            E.g. ``"y ~ 1 + X1 + X2"``; with a DataFrame, terms may
            use column names (``"mpg ~ 1 + wt + hp"``)
        data : DataFrame or array
            Source matrix the terms refer to
        response : array, optional
            Response vector; taken from ``data`` when omitted
        backend : str
            Computational backend: 'auto', 'cpu'
        _stacklevel : int
            Frame that fit warnings are attributed to (1 = the caller)
        """
        self.y_values, self.design = design_from_formula(formula, data, response=response)

        self.y_name = formula.response if isinstance(formula, Formula) else formula.split('~')[0].strip()
        self.terms = self.design.terms
        self.var_names = list(self.design.names)
        self.has_intercept = any(isinstance(t, Intercept) for t in self.terms)
        self._source_columns = list(data.columns) if isinstance(data, pd.DataFrame) else None

        # Store metadata
        self.n_obs = self.design.rows
        self.n_coef = self.design.columns

        # Fit model using backend
        self.backend = get_backend(backend)
        self._backend_result = fit_least_squares(
            self.y_values,
            self.design,
            backend=self.backend,
            _stacklevel=_stacklevel + 1,
        )

        # Compute statistical inference
        self._compute_statistics()

    def _compute_statistics(self):
        """Compute standard errors, t-stats, p-values, etc."""
        result = self._backend_result

        # Extract from backend
        self.coefficients = result.coef
        self.residuals = result.residuals
        self.fitted_values = result.fitted_values
        self.rank = result.rank
        self.df_residual = result.df_residual

        # Residual standard error
        rss = float(np.sum(self.residuals**2))
        self.sigma = np.sqrt(rss / self.df_residual) if self.df_residual > 0 else np.nan

        # Var(b) = sigma^2 (R'R)^-1, in pivoted column order
        R = result.qr_R
        R_inv = solve_triangular(R, np.eye(R.shape[0]), lower=False)
        XtX_inv = R_inv @ R_inv.T

        pivot = result.qr_pivot - 1
        self.vcov = np.empty((self.n_coef, self.n_coef))
        self.vcov[np.ix_(pivot, pivot)] = XtX_inv * (self.sigma ** 2)

        # Standard errors
        self.std_errors = np.sqrt(np.diag(self.vcov))

        # t-statistics and two-tailed p-values
        with np.errstate(divide='ignore', invalid='ignore'):
            self.t_values = self.coefficients / self.std_errors
        if self.df_residual > 0:
            self.pvalues = 2 * stats.t.sf(np.abs(self.t_values), self.df_residual)
        else:
            self.pvalues = np.full(self.n_coef, np.nan)

        # R-squared (uncentered when the model has no intercept, as in R)
        if self.has_intercept:
            tss = float(np.sum((self.y_values - np.mean(self.y_values))**2))
        else:
            tss = float(np.sum(self.y_values**2))
        self.r_squared = 1 - (rss / tss) if tss > 0 else 0.0

        # Adjusted R-squared
        n = self.n_obs
        n_null = n - 1 if self.has_intercept else n
        if self.df_residual > 0:
            self.adj_r_squared = 1 - (1 - self.r_squared) * n_null / self.df_residual
        else:
            self.adj_r_squared = np.nan

        # F-statistic against the intercept-only model
        p = self.rank - 1
        if self.has_intercept and p > 0 and self.df_residual > 0 and rss > 0:
            self.f_statistic = ((tss - rss) / p) / (rss / self.df_residual)
            self.f_pvalue = stats.f.sf(self.f_statistic, p, self.df_residual)
        else:
            self.f_statistic = np.nan
            self.f_pvalue = np.nan

    @property
    def coef(self):
        """Named coefficients (pandas Series)."""
        return pd.Series(self.coefficients, index=self.var_names)

    def conf_int(self, alpha: float = 0.05):
        """
        Confidence intervals for coefficients.

        Parameters
        ----------
        alpha : float
            Significance level (default: 0.05 for 95% CI)

        Returns
        -------
        DataFrame
            Confidence intervals with columns 'lower' and 'upper'
        """
        if not 0 < alpha < 1:
            raise ValueError(f"alpha must lie strictly between 0 and 1, got {alpha}")
        t_crit = stats.t.ppf(1 - alpha/2, self.df_residual)
        lower = self.coefficients - t_crit * self.std_errors
        upper = self.coefficients + t_crit * self.std_errors

        return pd.DataFrame({
            'lower': lower,
            'upper': upper
        }, index=self.var_names)

    def coef_table(self) -> pd.DataFrame:
        """
        Coefficient table: estimate, standard error, t value, p-value and
        significance code per term, indexed by term name.
        """
        codes = pd.Series(
            pd.cut(self.pvalues, bins=_SIGNIF_BREAKS, labels=_SIGNIF_CODES, right=False),
            index=self.var_names,
        ).astype(object).fillna('')
        return pd.DataFrame({
            'Estimate': self.coefficients,
            'Std. Error': self.std_errors,
            't value': self.t_values,
            'Pr(>|t|)': self.pvalues,
            '': codes,
        }, index=self.var_names)

    def summary(self):
        """
        Print summary of regression results (like R's summary.lm).
        """
        rule = "=" * 72
        formula = f"{self.y_name} ~ {' + '.join(t.name for t in self.terms)}"

        quartiles = np.quantile(self.residuals, [0.0, 0.25, 0.5, 0.75, 1.0])
        resid = pd.DataFrame(
            [quartiles], columns=['Min', '1Q', 'Median', '3Q', 'Max'], index=['']
        )

        table = self.coef_table()
        table['Pr(>|t|)'] = [
            'NA' if np.isnan(p) else ('<2e-16' if p < 2e-16 else f"{p:.3g}")
            for p in self.pvalues
        ]

        lines = [
            rule,
            f"Linear model: {formula}",
            f"  n = {self.n_obs}, k = {self.n_coef}, backend = {self.backend.name}",
            rule,
            "",
            "Residuals:",
            resid.to_string(float_format=lambda v: f"{v:.4f}"),
            "",
            "Coefficients:",
            table.to_string(float_format=lambda v: f"{v:.4f}"),
            "---",
            "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1",
            "",
            f"Residual standard error: {self.sigma:.4f} on {self.df_residual} degrees of freedom",
            f"Multiple R-squared: {self.r_squared:.4f},  Adjusted R-squared: {self.adj_r_squared:.4f}",
        ]

        if not np.isnan(self.f_statistic):
            f_p = "< 2.2e-16" if self.f_pvalue < 2.2e-16 else f"{self.f_pvalue:.4g}"
            lines.append(
                f"F-statistic: {self.f_statistic:.2f} on {self.rank - 1} and "
                f"{self.df_residual} DF,  p-value: {f_p}"
            )

        print("\n".join(lines))

    def predict(self, newdata: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Predict response for new data.

        Parameters
        ----------
        newdata : DataFrame or array
            New source rows, laid out like the data the model was fit on
            (same column positions; a DataFrame is reordered to the
            original labels when the model was fit on a DataFrame)

        Returns
        -------
        array
            Predicted values
        """
        if isinstance(newdata, pd.DataFrame) and self._source_columns is not None:
            used = {self._source_columns[t.index - 1] for t in self.terms if not isinstance(t, Intercept)}
            missing = [c for c in used if c not in newdata.columns]
            if missing:
                raise ValueError(f"newdata is missing columns: {missing}")
            # The response and unused columns may be absent; they never reach the design
            newdata = newdata.reindex(columns=self._source_columns, fill_value=0.0)

        return assemble_columns(self.terms, as_source(newdata)) @ self.coefficients

    def __repr__(self):
        return f"LinearModel(n={self.n_obs}, k={self.n_coef}, R²={self.r_squared:.3f})"


def lm(formula, data, response=None, **kwargs):
    """
    Fit linear regression model (convenience function).

    Parameters
    ----------
    formula : str or Formula
        Model formula, e.g. ``"y ~ 1 + X1 + X2"``
    data : DataFrame or array
        Source matrix
    response : array, optional
        Response vector (taken from ``data`` if omitted)
    **kwargs
        Additional arguments passed to LinearModel

    Returns
    -------
    LinearModel
        Fitted model object

    Examples
    --------
    >>> model = lm("mpg ~ 1 + wt + hp", mtcars)
    >>> model.summary()
    >>> model.coef
    >>> model.conf_int()
    """
    kwargs.setdefault('_stacklevel', 2)
    return LinearModel(formula, data, response=response, **kwargs)
