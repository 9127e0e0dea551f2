"""
Errors raised by the textmap core.

All analysis stages fail fast: a failure on a given input recurs identically,
so callers should validate their input instead of retrying.
"""


class TextMapError(Exception):
    """Base class for textmap errors."""


class EmptyVocabularyError(TextMapError, ValueError):
    """
    Raised when document-frequency filters remove every candidate term.

    Relax min_df / max_df or enlarge the corpus.
    """


class InsufficientTrainDataError(TextMapError, ValueError):
    """Raised when fewer than two training rows are available."""


class InvalidComponentCountError(TextMapError, ValueError):
    """Raised when the requested component count is outside 1..n_features."""


class DegenerateClusterWarning(UserWarning):
    """
    Issued when a centroid has no training members and is frozen in place,
    or when there are fewer training points than requested clusters.
    """
