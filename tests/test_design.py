"""
Test design matrix construction.
"""

import pytest
import numpy as np
import pandas as pd

from pyformula import (
    Intercept,
    Column,
    DesignMatrix,
    build_design_matrix,
    design_from_formula,
    ShapeMismatch,
    OutOfRange,
)


@pytest.fixture
def source():
    np.random.seed(42)
    return np.random.randn(20, 4)


@pytest.fixture
def response():
    np.random.seed(7)
    return np.random.randn(20)


class TestBuildDesignMatrix:
    """Test build_design_matrix."""
    
    def test_shape_matches_terms(self, response, source):
        """One column per term, one row per observation."""
        for terms in ([Intercept()],
                      [Intercept(), Column(1)],
                      [Column(4), Column(2), Intercept()]):
            y, design = build_design_matrix(response, terms, source)
            assert design.columns == len(terms)
            assert design.rows == len(response)
            assert design.shape == (20, len(terms))
            assert len(y) == len(response)
    
    def test_intercept_column_is_ones(self, response, source):
        """Intercept column is all 1.0."""
        _, design = build_design_matrix(response, [Column(2), Intercept()], source)
        assert np.all(design.values[:, 1] == 1.0)
    
    def test_columns_copied_verbatim(self, response, source):
        """Column terms copy the 1-indexed source column."""
        _, design = build_design_matrix(
            response, [Intercept(), Column(3), Column(1)], source
        )
        np.testing.assert_array_equal(design.values[:, 1], source[:, 2])
        np.testing.assert_array_equal(design.values[:, 2], source[:, 0])
        assert design.names == ['Intercept', 'X3', 'X1']
    
    def test_repeated_column(self, response, source):
        """The same column may appear twice."""
        _, design = build_design_matrix(response, [Column(2), Column(2)], source)
        np.testing.assert_array_equal(design.values[:, 0], design.values[:, 1])
    
    def test_source_not_modified(self, response, source):
        """Output is a new array; the source is untouched."""
        original = source.copy()
        _, design = build_design_matrix(response, [Column(1)], source)
        design.values[:] = 0.0
        np.testing.assert_array_equal(source, original)
    
    def test_empty_terms(self, response, source):
        """No terms gives an n x 0 matrix."""
        _, design = build_design_matrix(response, [], source)
        assert design.shape == (20, 0)
    
    def test_out_of_range_high(self, response, source):
        """Column 5 of a 4-column source is out of range."""
        with pytest.raises(OutOfRange) as exc_info:
            build_design_matrix(response, [Intercept(), Column(5)], source)
        assert exc_info.value.index == 5
        assert exc_info.value.n_columns == 4
    
    def test_out_of_range_low(self, response, source):
        """Column indices below 1 are out of range."""
        with pytest.raises(OutOfRange):
            build_design_matrix(response, [Column(0)], source)
        with pytest.raises(IndexError):
            build_design_matrix(response, [Column(-1)], source)
    
    def test_shape_mismatch(self, source):
        """Response length must match source rows."""
        with pytest.raises(ShapeMismatch) as exc_info:
            build_design_matrix(np.ones(19), [Intercept()], source)
        assert exc_info.value.n_response == 19
        assert exc_info.value.n_rows == 20
    
    def test_invalid_term_type(self, response, source):
        """Only Intercept and Column are valid terms."""
        with pytest.raises(TypeError):
            build_design_matrix(response, ["X1"], source)
    
    def test_non_finite_source(self, response, source):
        """NaN in a referenced source column is rejected."""
        source[3, 1] = np.nan
        with pytest.raises(ValueError, match="source column 2"):
            build_design_matrix(response, [Column(2)], source)
    
    def test_non_finite_unused_column(self, response, source):
        """NaN in a column no term references is ignored."""
        source[3, 1] = np.nan
        _, design = build_design_matrix(response, [Intercept(), Column(3)], source)
        assert np.all(np.isfinite(design.values))
        np.testing.assert_array_equal(design.values[:, 1], source[:, 2])
    
    def test_text_column_in_dataframe(self, response, source):
        """Non-numeric DataFrame columns are fine while unreferenced."""
        df = pd.DataFrame(source, columns=['a', 'b', 'c', 'd'])
        df['label'] = ['row%d' % i for i in range(20)]
        _, design = build_design_matrix(response, [Intercept(), Column(2)], df)
        np.testing.assert_array_equal(design.values[:, 1], source[:, 1])
        with pytest.raises(ValueError):
            build_design_matrix(response, [Column(5)], df)
    
    def test_one_dimensional_source(self, response):
        """A source must be a matrix."""
        with pytest.raises(ValueError, match="2-dimensional"):
            build_design_matrix(response, [Intercept()], np.ones(20))
    
    def test_dataframe_source_names(self, response, source):
        """DataFrame labels become column names."""
        df = pd.DataFrame(source, columns=['a', 'b', 'c', 'd'])
        _, design = build_design_matrix(response, [Intercept(), Column(4)], df)
        assert design.names == ['Intercept', 'd']
        frame = design.to_frame()
        assert list(frame.columns) == ['Intercept', 'd']
        np.testing.assert_array_equal(frame['d'].values, source[:, 3])
    
    def test_array_protocol(self, response, source):
        """DesignMatrix converts to a plain ndarray."""
        _, design = build_design_matrix(response, [Column(1)], source)
        assert isinstance(design, DesignMatrix)
        np.testing.assert_array_equal(np.asarray(design), design.values)
        assert np.shares_memory(np.asarray(design), design.values)
    
    def test_array_copy(self, response, source):
        """np.array(..., copy=True) returns an independent array."""
        _, design = build_design_matrix(response, [Intercept(), Column(1)], source)
        copied = np.array(design, copy=True)
        copied[:] = -1.0
        assert np.all(design.values[:, 0] == 1.0)
        np.testing.assert_array_equal(design.values[:, 1], source[:, 0])
    
    def test_array_dtype(self, response, source):
        """Requesting another dtype converts the values."""
        _, design = build_design_matrix(response, [Intercept()], source)
        as_float32 = np.asarray(design, dtype=np.float32)
        assert as_float32.dtype == np.float32
        assert np.all(as_float32 == 1.0)


class TestDesignFromFormula:
    """Test the formula front-end."""
    
    def test_array_data(self, response, source):
        """X<k> names index the array columns."""
        y, design = design_from_formula("y ~ 1 + X2 + X4", source, response=response)
        np.testing.assert_array_equal(y, response)
        np.testing.assert_array_equal(design.values[:, 1], source[:, 1])
        np.testing.assert_array_equal(design.values[:, 2], source[:, 3])
    
    def test_dataframe_data(self):
        """Response and terms resolve by name in a DataFrame."""
        df = pd.DataFrame({
            'mpg': [21.0, 22.8, 21.4, 18.7],
            'wt': [2.62, 2.32, 3.215, 3.44],
            'hp': [110.0, 93.0, 110.0, 175.0],
        })
        y, design = design_from_formula("mpg ~ 1 + wt + hp", df)
        np.testing.assert_array_equal(y, df['mpg'].values)
        assert design.names == ['Intercept', 'wt', 'hp']
        np.testing.assert_array_equal(design.values[:, 2], df['hp'].values)
    
    def test_array_requires_response(self, source):
        """Array data needs an explicit response."""
        with pytest.raises(ValueError):
            design_from_formula("y ~ 1 + X1", source)
    
    def test_missing_response_column(self):
        """Response must exist in the DataFrame."""
        df = pd.DataFrame({'a': [1.0, 2.0], 'b': [3.0, 4.0]})
        with pytest.raises(ValueError):
            design_from_formula("y ~ 1 + a", df)
    
    def test_dataframe_with_text_column(self):
        """An unused text column does not block a numeric formula."""
        df = pd.DataFrame({
            'mpg': [21.0, 22.8, 21.4, 18.7],
            'wt': [2.62, 2.32, 3.215, 3.44],
            'model': ['Mazda RX4', 'Datsun 710', 'Hornet 4 Drive', 'Hornet Sportabout'],
        })
        y, design = design_from_formula("mpg ~ 1 + wt", df)
        assert design.names == ['Intercept', 'wt']
        np.testing.assert_array_equal(design.values[:, 1], df['wt'].values)
