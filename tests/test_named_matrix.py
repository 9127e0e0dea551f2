"""
Tests for the named_matrix module.
"""

import pytest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from textmap.math.named_matrix import IndexHash, NamedMatrix


class TestIndexHash:
    """Tests for the IndexHash class."""

    def test_init_empty(self):
        """Test creating an empty IndexHash."""
        idx = IndexHash()
        assert idx.get_names() == []
        assert len(idx) == 0

    def test_init_with_names(self):
        """Test creating an IndexHash with initial names."""
        idx = IndexHash(['a', 'b', 'c'])
        assert idx.get_names() == ['a', 'b', 'c']
        assert idx.index('a') == 0
        assert idx.index('c') == 2
        assert idx.index('d') is None
        assert 'b' in idx
        assert 'd' not in idx

    def test_duplicates_rejected(self):
        """Names must be distinct."""
        with pytest.raises(ValueError):
            IndexHash(['a', 'a'])

    def test_subset(self):
        """Subset keeps requested order and skips unknown names."""
        idx = IndexHash(['a', 'b', 'c'])
        sub = idx.subset(['c', 'x', 'a'])
        assert sub.get_names() == ['c', 'a']


class TestNamedMatrix:
    """Tests for the NamedMatrix class."""

    def setup_method(self):
        self.data = np.array([
            [1.0, 2.0, 3.0],
            [4.0, 5.0, 6.0],
            [7.0, 8.0, 9.0]
        ])
        self.nmat = NamedMatrix(self.data, [10, 11, 12], ['x', 'y', 'z'])

    def test_init(self):
        """Names and values are stored."""
        assert self.nmat.rownames() == [10, 11, 12]
        assert self.nmat.colnames() == ['x', 'y', 'z']
        assert self.nmat.shape == (3, 3)
        assert np.array_equal(self.nmat.values, self.data)

    def test_default_names(self):
        """Names default to positions."""
        nmat = NamedMatrix(np.zeros((2, 3)))
        assert nmat.rownames() == [0, 1]
        assert nmat.colnames() == [0, 1, 2]

    def test_empty(self):
        """No data gives an empty matrix."""
        nmat = NamedMatrix()
        assert nmat.shape == (0, 0)

    def test_shape_mismatch(self):
        """Names must match the data shape."""
        with pytest.raises(ValueError):
            NamedMatrix(np.zeros((2, 2)), ['a'], ['x', 'y'])

    def test_values_read_only(self):
        """Values cannot be modified in place."""
        with pytest.raises(ValueError):
            self.nmat.values[0, 0] = 100.0

        # The source array is copied
        self.data[0, 0] = 100.0
        assert self.nmat.values[0, 0] == 1.0

    def test_row_subset(self):
        """Subset by position keeps the given order."""
        sub = self.nmat.row_subset([2, 0])
        assert sub.rownames() == [12, 10]
        assert np.array_equal(sub.values, self.data[[2, 0]])

    def test_rowname_subset(self):
        """Subset by name skips unknown names."""
        sub = self.nmat.rowname_subset([11, 99])
        assert sub.rownames() == [11]
        assert sub.colnames() == ['x', 'y', 'z']

    def test_colname_subset(self):
        """Column subset keeps rows."""
        sub = self.nmat.colname_subset(['z', 'x'])
        assert sub.colnames() == ['z', 'x']
        assert np.array_equal(sub.get_row_by_name(10), [3.0, 1.0])

    def test_get_by_name(self):
        """Lookup rows and columns by name."""
        assert np.array_equal(self.nmat.get_row_by_name(11), [4.0, 5.0, 6.0])
        assert np.array_equal(self.nmat.get_col_by_name('y'), [2.0, 5.0, 8.0])

        with pytest.raises(KeyError):
            self.nmat.get_row_by_name(99)
        with pytest.raises(KeyError):
            self.nmat.get_col_by_name('w')

    def test_to_dataframe(self):
        """DataFrame export uses the names."""
        df = self.nmat.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert list(df.index) == [10, 11, 12]
        assert list(df.columns) == ['x', 'y', 'z']
        assert df.loc[12, 'y'] == 8.0

    def test_rows_as_dict(self):
        rows = self.nmat.rows_as_dict()
        assert set(rows) == {10, 11, 12}
        assert np.array_equal(rows[10], [1.0, 2.0, 3.0])
