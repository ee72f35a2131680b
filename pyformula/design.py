"""
Design matrix construction from formula terms.
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Sequence, Tuple, List, Union

from ._utils import check_vector
from .exceptions import ShapeMismatch, OutOfRange
from .formula import Formula, Intercept, Column, TermRef, parse_formula, term_names


@dataclass
class DesignMatrix:
    """Numeric design matrix, one column per term."""
    values: np.ndarray        # Matrix, shape (n, k)
    terms: Tuple[TermRef, ...]
    names: List[str]          # Display name per column

    @property
    def rows(self) -> int:
        return self.values.shape[0]

    @property
    def columns(self) -> int:
        return self.values.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def to_frame(self) -> pd.DataFrame:
        """Design matrix as a DataFrame with named columns."""
        return pd.DataFrame(self.values, columns=self.names)

    def __array__(self, dtype=None, copy=None):
        if dtype is not None and np.dtype(dtype) != self.values.dtype:
            if copy is False:
                raise ValueError("Cannot convert DesignMatrix dtype without a copy")
            return self.values.astype(dtype)
        if copy:
            return self.values.copy()
        return self.values


def build_design_matrix(
    response,
    terms: Sequence[TermRef],
    source: Union[np.ndarray, pd.DataFrame],
) -> Tuple[np.ndarray, DesignMatrix]:
    """
    Build a design matrix from a list of terms.

    Parameters
    ----------
    response : array-like, shape (n,)
        Response vector
    terms : sequence of Intercept / Column
        Terms in output column order. Column indices are 1-based.
    source : ndarray or DataFrame, shape (n, m)
        Data the Column terms refer to

    Returns
    -------
    response : ndarray, shape (n,)
        Validated response vector
    design : DesignMatrix
        Matrix of shape (n, len(terms))

    Raises
    ------
    ShapeMismatch
        If ``len(response)`` differs from the source row count
    OutOfRange
        If a Column index is below 1 or above the source column count
    """
    labels = list(source.columns) if isinstance(source, pd.DataFrame) else None

    y = check_vector(response, name='response')
    source = as_source(source)
    n = source.shape[0]

    if len(y) != n:
        raise ShapeMismatch(len(y), n)

    terms = tuple(terms)
    design = DesignMatrix(
        values=assemble_columns(terms, source),
        terms=terms,
        names=term_names(terms, labels),
    )
    return y, design


def as_source(source) -> Union[np.ndarray, pd.DataFrame]:
    """
    Check that a source is two-dimensional, without converting its values.

    Column contents are only validated when a term pulls them, so text or
    missing values in unreferenced columns are allowed.
    """
    if isinstance(source, pd.DataFrame):
        return source
    source = np.asarray(source)
    if source.ndim != 2:
        raise ValueError(f"source must be 2-dimensional, got {source.ndim} dimension(s)")
    return source


def assemble_columns(terms: Sequence[TermRef], source) -> np.ndarray:
    """Stack one float64 column per term from an (n, m) source."""
    n, m = source.shape
    values = np.empty((n, len(terms)), dtype=np.float64)

    for j, term in enumerate(terms):
        if isinstance(term, Intercept):
            values[:, j] = 1.0
        elif isinstance(term, Column):
            if term.index < 1 or term.index > m:
                raise OutOfRange(term.index, m)
            if isinstance(source, pd.DataFrame):
                raw = source.iloc[:, term.index - 1].to_numpy()
            else:
                raw = source[:, term.index - 1]
            values[:, j] = check_vector(raw, name=f"source column {term.index}")
        else:
            raise TypeError(
                f"Terms must be Intercept or Column, got {type(term).__name__}"
            )

    return values


def design_from_formula(
    formula: Union[str, Formula],
    data: Union[np.ndarray, pd.DataFrame],
    response=None,
) -> Tuple[np.ndarray, DesignMatrix]:
    """
    Parse a formula and build its design matrix.

    Parameters
    ----------
    formula : str or Formula
        E.g. ``"y ~ 1 + X1 + X2"`` or ``"mpg ~ 1 + wt + hp"``
    data : ndarray or DataFrame
        Source matrix. With a DataFrame, terms may use column names.
    response : array-like, optional
        Response vector. Required unless ``data`` is a DataFrame
        holding a column named like the formula's response.

    Returns
    -------
    response, design
        As returned by build_design_matrix

    Examples
    --------
    >>> y, design = design_from_formula("y ~ 1 + X1", X, response=y)
    >>> y, design = design_from_formula("mpg ~ 1 + wt + hp", mtcars)
    """
    is_frame = isinstance(data, pd.DataFrame)

    if isinstance(formula, str):
        formula = parse_formula(formula, columns=list(data.columns) if is_frame else None)

    if response is None:
        if not is_frame:
            raise ValueError("Must provide response when data is not a DataFrame")
        if formula.response not in data.columns:
            raise ValueError(f"Response column {formula.response!r} not found in data")
        response = data[formula.response].values

    return build_design_matrix(response, formula.terms, data)


__all__ = [
    "DesignMatrix",
    "build_design_matrix",
    "as_source",
    "assemble_columns",
    "design_from_formula",
]
