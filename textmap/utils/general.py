"""
General utility functions for the textmap package.

Helpers shared by the math modules for validating row-index sets and
resolving injected random sources.
"""

import numbers
import numpy as np
from typing import Iterable, Optional, Union


RandomState = Optional[Union[int, np.random.Generator]]


def as_index_array(indices: Iterable[int], n_rows: int, name: str = 'indices') -> np.ndarray:
    """
    Convert a sequence of row positions into a validated integer array.

    Order is preserved. Positions must be integers in [0, n_rows) and
    must not repeat.

    Args:
        indices: Row positions
        n_rows: Number of rows in the matrix the positions refer to
        name: Name used in error messages

    Returns:
        1-D integer array of positions
    """
    idx = np.asarray(list(indices))

    if idx.size == 0:
        return np.zeros(0, dtype=int)

    if idx.ndim != 1 or not np.issubdtype(idx.dtype, np.integer):
        raise ValueError(f"{name} must be a flat sequence of integers")

    if idx.min() < 0 or idx.max() >= n_rows:
        raise ValueError(f"{name} out of range for {n_rows} rows")

    if len(np.unique(idx)) != len(idx):
        raise ValueError(f"{name} contains duplicate positions")

    return idx.astype(int)


def check_random_state(random_state: RandomState = None) -> np.random.Generator:
    """
    Turn a seed or generator into a numpy Generator.

    Args:
        random_state: None for fresh entropy, an int seed, or a Generator
            which is returned unchanged

    Returns:
        numpy Generator
    """
    if isinstance(random_state, np.random.Generator):
        return random_state

    if random_state is None or isinstance(random_state, numbers.Integral):
        return np.random.default_rng(random_state)

    raise TypeError(f"Cannot use {random_state!r} as a random source")
