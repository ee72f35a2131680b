"""
Formula terms and R-style formula parsing.

A formula is a response name plus an ordered, additive list of terms:

    y ~ 1 + X1 + X3

The literal ``1`` is the intercept, ``X<k>`` refers to the k-th column
(1-indexed) of the source matrix, and any other name is resolved against an
optional sequence of column labels (e.g. ``DataFrame.columns``).
"""

import ast
import numbers
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union, List

import numpy as np

from .exceptions import FormulaError


_COLUMN_NAME = re.compile(r"^X([1-9][0-9]*)$")


@dataclass(frozen=True)
class Intercept:
    """Constant regressor (a column of ones)."""

    @property
    def name(self) -> str:
        return "1"


@dataclass(frozen=True)
class Column:
    """Reference to a 1-indexed column of the source matrix."""
    index: int

    def __post_init__(self):
        # bool is Integral but never a column number
        if isinstance(self.index, (bool, np.bool_)) or not isinstance(self.index, numbers.Integral):
            raise TypeError(
                f"Column index must be an integer, got {type(self.index).__name__}"
            )
        # numpy integers are stored as plain int
        object.__setattr__(self, "index", int(self.index))

    @property
    def name(self) -> str:
        return f"X{self.index}"


TermRef = Union[Intercept, Column]


@dataclass(frozen=True)
class Formula:
    """Parsed formula: response name and ordered terms."""
    response: str
    terms: Tuple[TermRef, ...]

    def __str__(self):
        rhs = " + ".join(term.name for term in self.terms)
        return f"{self.response} ~ {rhs}"


def parse_formula(text: str, columns: Optional[Sequence[str]] = None) -> Formula:
    """
    Parse a formula string into a Formula.

    Parameters
    ----------
    text : str
        Formula such as ``"y ~ 1 + X1 + X2"``
    columns : sequence of str, optional
        Column labels of the source; lets terms be written by name
        (``"mpg ~ 1 + wt + hp"``)

    Returns
    -------
    Formula
        Response name and terms in written order

    Examples
    --------
    >>> parse_formula("y ~ 1 + X1 + X3")
    Formula(response='y', terms=(Intercept(), Column(index=1), Column(index=3)))
    """
    if not isinstance(text, str):
        raise FormulaError(f"Formula must be a string, got {type(text).__name__}")

    parts = text.split("~")
    if len(parts) != 2:
        raise FormulaError(
            f"Formula must contain exactly one '~', got: {text!r}"
        )
    lhs, rhs = parts[0].strip(), parts[1].strip()

    if not lhs.isidentifier():
        raise FormulaError(f"Response must be a single name, got: {lhs!r}")
    if not rhs:
        raise FormulaError("Formula has no terms on the right-hand side")

    try:
        tree = ast.parse(rhs, mode="eval")
    except SyntaxError as e:
        raise FormulaError(f"Invalid formula terms {rhs!r}: {e.msg}") from e

    nodes = _flatten_sum(tree.body)
    lookup = {str(label): i + 1 for i, label in enumerate(columns)} if columns is not None else {}
    terms = tuple(_to_term(node, lookup) for node in nodes)

    return Formula(response=lhs, terms=terms)


def _flatten_sum(node) -> List[ast.AST]:
    """Flatten ``a + b + c`` into its operands, left to right."""
    if isinstance(node, ast.BinOp):
        if not isinstance(node.op, ast.Add):
            raise FormulaError(
                f"Only '+' may join formula terms, got {type(node.op).__name__}"
            )
        return _flatten_sum(node.left) + _flatten_sum(node.right)
    return [node]


def _to_term(node, lookup) -> TermRef:
    if isinstance(node, ast.Constant):
        if type(node.value) is int and node.value == 1:
            return Intercept()
        raise FormulaError(f"Only the constant 1 is allowed as a term, got {node.value!r}")

    if isinstance(node, ast.Name):
        # Explicit labels win over the X<k> shorthand
        if node.id in lookup:
            return Column(lookup[node.id])
        match = _COLUMN_NAME.match(node.id)
        if match:
            return Column(int(match.group(1)))
        raise FormulaError(f"Unknown variable in formula: {node.id!r}")

    raise FormulaError(f"Unsupported formula term: {ast.dump(node)}")


def term_names(terms: Sequence[TermRef], columns: Optional[Sequence[str]] = None) -> List[str]:
    """Display names for terms ('Intercept', column labels or X<k>)."""
    names = []
    for term in terms:
        if isinstance(term, Intercept):
            names.append("Intercept")
        elif columns is not None and 1 <= term.index <= len(columns):
            names.append(str(columns[term.index - 1]))
        else:
            names.append(term.name)
    return names


__all__ = [
    "Intercept",
    "Column",
    "TermRef",
    "Formula",
    "parse_formula",
    "term_names",
]
