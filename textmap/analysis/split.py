"""
Train/test split of document positions.

Training rows are the only rows allowed to influence fitted statistics
(standardization, covariance, centroids); test rows are only scored.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from textmap.errors import InsufficientTrainDataError
from textmap.utils.general import RandomState, check_random_state


@dataclass(frozen=True)
class Split:
    """
    Partition of document positions into train (ordered) and test.
    """
    train: Tuple[int, ...]
    test: Tuple[int, ...]

    def __post_init__(self):
        object.__setattr__(self, 'train', tuple(int(i) for i in self.train))
        object.__setattr__(self, 'test', tuple(int(i) for i in self.test))

    def validate(self, n_docs: int) -> 'Split':
        """
        Check that train and test are disjoint and cover range(n_docs).

        Args:
            n_docs: Number of documents

        Returns:
            self, for chaining
        """
        train_set = set(self.train)
        test_set = set(self.test)

        if len(train_set) != len(self.train) or len(test_set) != len(self.test):
            raise ValueError("Split contains duplicate positions")

        if train_set & test_set:
            raise ValueError(f"Train and test overlap at {sorted(train_set & test_set)}")

        if train_set | test_set != set(range(n_docs)):
            raise ValueError(f"Split does not cover exactly the {n_docs} documents")

        if len(self.train) < 2:
            raise InsufficientTrainDataError(
                f"Need at least 2 training documents, got {len(self.train)}"
            )

        return self

    def labels(self, n_docs: int) -> List[str]:
        """'Train' or 'Test' for every document position."""
        train_set = set(self.train)
        return ['Train' if i in train_set else 'Test' for i in range(n_docs)]


def train_test_split(n_docs: int,
                     train_ratio: float,
                     random_state: RandomState = None) -> Split:
    """
    Shuffle document positions uniformly and cut at floor(n_docs * train_ratio).

    Args:
        n_docs: Number of documents
        train_ratio: Fraction of documents used for training, in (0, 1]
        random_state: Seed or Generator for the shuffle

    Returns:
        Split with the shuffled order kept in train and test
    """
    if not 0.0 < train_ratio <= 1.0:
        raise ValueError(f"train_ratio must be in (0, 1], got {train_ratio}")

    rng = check_random_state(random_state)
    order = rng.permutation(n_docs).tolist()
    n_train = math.floor(n_docs * train_ratio)

    return Split(tuple(order[:n_train]), tuple(order[n_train:]))
