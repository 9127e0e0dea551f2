"""
Named Matrix implementation for the textmap math modules.

This module provides a dense, immutable matrix with named rows and columns.
Rows are documents and columns are vocabulary terms (or principal
components after projection); column order is fixed at construction and
carried through every downstream matrix.
"""

import numpy as np
import pandas as pd
from typing import Any, Dict, Iterable, List, Optional, Sequence


class IndexHash:
    """
    Maintains an ordered index of names with fast lookup.
    """

    def __init__(self, names: Optional[Iterable[Any]] = None):
        """
        Initialize an IndexHash with optional initial names.

        Args:
            names: Optional list of distinct names
        """
        self._names = [] if names is None else list(names)
        self._index_hash = {name: idx for idx, name in enumerate(self._names)}

        if len(self._index_hash) != len(self._names):
            raise ValueError("IndexHash names must be distinct")

    def get_names(self) -> List[Any]:
        """Return the ordered list of names."""
        return self._names.copy()

    def index(self, name: Any) -> Optional[int]:
        """
        Get the position of a name, or None if not found.

        Args:
            name: The name to look up

        Returns:
            The position if found, None otherwise
        """
        return self._index_hash.get(name)

    def subset(self, names: Iterable[Any]) -> 'IndexHash':
        """
        Create an index holding only the given names, in the given order.

        Names that are not in this index are skipped.
        """
        return IndexHash([name for name in names if name in self._index_hash])

    def __len__(self) -> int:
        return len(self._names)

    def __contains__(self, name: Any) -> bool:
        return name in self._index_hash


class NamedMatrix:
    """
    A numeric matrix with named rows and columns.

    Values are stored as a float numpy array; operations return new
    matrices rather than modifying this one.
    """

    def __init__(self,
                 matrix: Optional[np.ndarray] = None,
                 rownames: Optional[Sequence[Any]] = None,
                 colnames: Optional[Sequence[Any]] = None):
        """
        Initialize a NamedMatrix.

        Args:
            matrix: 2-D numeric data (defaults to an empty matrix)
            rownames: Row names (defaults to 0..n_rows-1)
            colnames: Column names (defaults to 0..n_cols-1)
        """
        if matrix is None:
            n_rows = 0 if rownames is None else len(rownames)
            n_cols = 0 if colnames is None else len(colnames)
            values = np.zeros((n_rows, n_cols))
        else:
            values = np.array(matrix, dtype=float)
            if values.ndim != 2:
                raise ValueError(f"NamedMatrix needs 2-D data, got {values.ndim}-D")

        n_rows, n_cols = values.shape
        rows = list(range(n_rows)) if rownames is None else list(rownames)
        cols = list(range(n_cols)) if colnames is None else list(colnames)

        if len(rows) != n_rows or len(cols) != n_cols:
            raise ValueError(
                f"Names ({len(rows)} rows, {len(cols)} cols) do not match "
                f"data shape {values.shape}"
            )

        values.setflags(write=False)
        self._values = values
        self._row_index = IndexHash(rows)
        self._col_index = IndexHash(cols)

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a read-only numpy array."""
        return self._values

    @property
    def shape(self):
        return self._values.shape

    @property
    def matrix(self) -> pd.DataFrame:
        """Get the matrix as a pandas DataFrame."""
        return self.to_dataframe()

    def rownames(self) -> List[Any]:
        """Get the list of row names."""
        return self._row_index.get_names()

    def colnames(self) -> List[Any]:
        """Get the list of column names."""
        return self._col_index.get_names()

    def get_row_index(self) -> IndexHash:
        return self._row_index

    def get_col_index(self) -> IndexHash:
        return self._col_index

    def row_subset(self, positions: Sequence[int]) -> 'NamedMatrix':
        """
        Create a matrix holding the rows at the given positions, in order.

        Args:
            positions: Row positions

        Returns:
            A new NamedMatrix
        """
        positions = list(positions)
        names = self.rownames()
        return NamedMatrix(
            self._values[positions, :] if positions else np.zeros((0, self.shape[1])),
            [names[i] for i in positions],
            self.colnames()
        )

    def rowname_subset(self, rownames: Iterable[Any]) -> 'NamedMatrix':
        """
        Create a subset of the matrix with only the specified rows.

        Unknown row names are skipped.

        Args:
            rownames: Row names to include

        Returns:
            A new NamedMatrix with only the specified rows
        """
        positions = [self._row_index.index(name) for name in rownames if name in self._row_index]
        return self.row_subset(positions)

    def colname_subset(self, colnames: Iterable[Any]) -> 'NamedMatrix':
        """
        Create a subset of the matrix with only the specified columns.

        Args:
            colnames: Column names to include

        Returns:
            A new NamedMatrix with only the specified columns
        """
        valid_cols = [col for col in colnames if col in self._col_index]
        positions = [self._col_index.index(col) for col in valid_cols]
        return NamedMatrix(self._values[:, positions], self.rownames(), valid_cols)

    def get_row_by_name(self, row_name: Any) -> np.ndarray:
        """
        Get a row of the matrix by name.

        Args:
            row_name: The name of the row

        Returns:
            The row as a numpy array
        """
        idx = self._row_index.index(row_name)
        if idx is None:
            raise KeyError(f"Row name '{row_name}' not found")
        return self._values[idx]

    def get_col_by_name(self, col_name: Any) -> np.ndarray:
        """
        Get a column of the matrix by name.

        Args:
            col_name: The name of the column

        Returns:
            The column as a numpy array
        """
        idx = self._col_index.index(col_name)
        if idx is None:
            raise KeyError(f"Column name '{col_name}' not found")
        return self._values[:, idx]

    def rows_as_dict(self) -> Dict[Any, np.ndarray]:
        """Map each row name to its row vector."""
        return {name: self._values[i] for i, name in enumerate(self.rownames())}

    def to_dataframe(self) -> pd.DataFrame:
        """Copy the matrix into a DataFrame indexed by row and column names."""
        return pd.DataFrame(self._values.copy(), index=self.rownames(), columns=self.colnames())

    def __repr__(self) -> str:
        return f"NamedMatrix(rows={len(self._row_index)}, cols={len(self._col_index)})"

    def __str__(self) -> str:
        return (f"NamedMatrix with {len(self._row_index)} rows and "
                f"{len(self._col_index)} columns\n{self.to_dataframe()}")
