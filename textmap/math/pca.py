"""
PCA (Principal Component Analysis) implementation for textmap.

This module provides a split-aware PCA: column statistics and the covariance
matrix are fitted on training rows only, the covariance is diagonalized with
the classical Jacobi eigenvalue algorithm, and every row (train and test) is
projected onto the leading eigenvectors.
"""

import logging
from typing import Any, Dict, Iterable, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from textmap.errors import InsufficientTrainDataError, InvalidComponentCountError
from textmap.math.named_matrix import NamedMatrix
from textmap.utils.general import as_index_array

logger = logging.getLogger(__name__)


class StandardizationStats(NamedTuple):
    """Per-column mean and (floored) standard deviation."""
    mean: np.ndarray
    std: np.ndarray


def _train_positions(matrix: np.ndarray, train_indices: Iterable[int]) -> np.ndarray:
    idx = as_index_array(train_indices, matrix.shape[0], 'train_indices')
    if len(idx) < 2:
        raise InsufficientTrainDataError(
            f"Need at least 2 training rows for standardization, got {len(idx)}"
        )
    return idx


def standardize_fit(matrix: np.ndarray, train_indices: Iterable[int]) -> StandardizationStats:
    """
    Compute column means and sample standard deviations from training rows.

    Constant columns (identical values on every training row) get a
    standard deviation of 1 and their exact value as mean, so they
    standardize to 0 instead of NaN or rounding noise.

    Args:
        matrix: Data matrix (all documents)
        train_indices: Positions of the training rows

    Returns:
        StandardizationStats for the columns of matrix
    """
    matrix = np.asarray(matrix, dtype=float)
    train = matrix[_train_positions(matrix, train_indices)]

    mean = train.mean(axis=0)
    std = train.std(axis=0, ddof=1)

    # Exact zeros for columns constant on the training rows
    const = np.ptp(train, axis=0) == 0
    mean[const] = train[0, const]
    std[const] = 1.0

    return StandardizationStats(mean, std)


def standardize_transform(matrix: np.ndarray, stats: StandardizationStats) -> np.ndarray:
    """
    Standardize every row of matrix with previously fitted statistics.
    """
    return (np.asarray(matrix, dtype=float) - stats.mean) / stats.std


def covariance_matrix(standardized: np.ndarray, train_indices: Iterable[int]) -> np.ndarray:
    """
    Sample covariance (divisor n_train - 1) of the standardized training rows.

    Standardized training columns already have zero mean, so the product is
    not re-centered.

    Args:
        standardized: Standardized data matrix (all documents)
        train_indices: Positions of the training rows

    Returns:
        Symmetric matrix of shape (n_features, n_features)
    """
    standardized = np.asarray(standardized, dtype=float)
    train = standardized[_train_positions(standardized, train_indices)]

    cov = train.T @ train / (len(train) - 1)
    # Exact symmetry for the eigensolver
    return (cov + cov.T) / 2


def jacobi_eigen(matrix: np.ndarray,
                 max_iters: int,
                 tolerance: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Eigen-decompose a symmetric matrix with classical Jacobi rotations.

    Each iteration finds the largest off-diagonal entry a_pq and applies the
    plane rotation with angle 0.5 * atan2(2 a_pq, a_qq - a_pp), which zeroes
    it. The loop stops when that entry is below tolerance or after max_iters
    rotations; the result is approximate in the latter case.

    Args:
        matrix: Square symmetric matrix
        max_iters: Maximum number of rotations
        tolerance: Convergence threshold on the largest off-diagonal magnitude

    Returns:
        Tuple of (eigenvalues, eigenvectors) where eigenvector j is column j
        of the returned matrix. Pairs are in no particular order.
    """
    a = np.array(matrix, dtype=float)

    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Eigendecomposition needs a square matrix, got shape {a.shape}")

    scale = max(np.abs(a).max(), 1.0) if a.size else 1.0
    if not np.allclose(a, a.T, rtol=0.0, atol=1e-9 * scale):
        raise ValueError("Eigendecomposition needs a symmetric matrix")

    n = a.shape[0]
    v = np.eye(n)

    if n < 2:
        return np.diag(a).copy(), v

    off_max = 0.0
    rotations = 0
    for _ in range(max_iters):
        off = np.abs(np.triu(a, 1))
        p, q = np.unravel_index(np.argmax(off), off.shape)
        off_max = off[p, q]

        if off_max < tolerance:
            break

        app = a[p, p]
        aqq = a[q, q]
        apq = a[p, q]

        phi = 0.5 * np.arctan2(2 * apq, aqq - app)
        c = np.cos(phi)
        s = np.sin(phi)

        # Cross terms with every other index
        col_p = a[:, p].copy()
        col_q = a[:, q].copy()
        a[:, p] = c * col_p - s * col_q
        a[:, q] = s * col_p + c * col_q
        a[p, :] = a[:, p]
        a[q, :] = a[:, q]

        a[p, p] = c * c * app - 2 * s * c * apq + s * s * aqq
        a[q, q] = s * s * app + 2 * s * c * apq + c * c * aqq
        a[p, q] = 0.0
        a[q, p] = 0.0

        # Accumulate the rotation
        vec_p = v[:, p].copy()
        vec_q = v[:, q].copy()
        v[:, p] = c * vec_p - s * vec_q
        v[:, q] = s * vec_p + c * vec_q
        rotations += 1
    else:
        off_max = np.abs(np.triu(a, 1)).max()
        if off_max >= tolerance:
            logger.warning(
                f"Jacobi stopped at the iteration cap ({max_iters}) with "
                f"off-diagonal magnitude {off_max:.3e}"
            )

    logger.debug(f"Jacobi finished after {rotations} rotations, off-diagonal {off_max:.3e}")

    return np.diag(a).copy(), v


def sort_eigenpairs(eigenvalues: np.ndarray,
                    eigenvectors: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sort eigenpairs by descending eigenvalue, ties kept in original order.

    Args:
        eigenvalues: Eigenvalues
        eigenvectors: Matrix whose column j belongs to eigenvalue j

    Returns:
        Tuple of (sorted eigenvalues, eigenvectors with columns reordered)
    """
    order = np.argsort(-np.asarray(eigenvalues), kind='stable')
    return eigenvalues[order], eigenvectors[:, order]


def explained_variance_ratio(eigenvalues: np.ndarray) -> np.ndarray:
    """
    Share of total variance carried by each eigenvalue.

    Args:
        eigenvalues: Eigenvalues of a covariance matrix

    Returns:
        Ratios in the same order (all zero if the total is zero)
    """
    eigenvalues = np.asarray(eigenvalues, dtype=float)
    total = eigenvalues.sum()
    if total == 0:
        return np.zeros_like(eigenvalues)
    return eigenvalues / total


def project(standardized: np.ndarray,
            eigenvalues: np.ndarray,
            eigenvectors: np.ndarray,
            n_comps: int) -> np.ndarray:
    """
    Project rows onto the n_comps eigenvectors with the largest eigenvalues.

    Args:
        standardized: Standardized data matrix (all documents)
        eigenvalues: Unordered eigenvalues
        eigenvectors: Matching eigenvectors as columns
        n_comps: Number of components to keep

    Returns:
        Projected rows of shape (n_docs, n_comps)
    """
    standardized = np.asarray(standardized, dtype=float)
    n_features = standardized.shape[1]

    if n_comps < 1 or n_comps > n_features:
        raise InvalidComponentCountError(
            f"Requested {n_comps} components but there are {n_features} features"
        )

    _, vectors = sort_eigenpairs(np.asarray(eigenvalues), np.asarray(eigenvectors))
    comps = vectors[:, :n_comps].T

    return standardized @ comps.T


def pca(matrix: np.ndarray,
        n_comps: int,
        train_indices: Sequence[int],
        max_iters: int,
        tolerance: float) -> Dict[str, np.ndarray]:
    """
    Fit PCA on the training rows and project every row.

    Args:
        matrix: Feature matrix (all documents)
        n_comps: Number of components
        train_indices: Positions of the training rows
        max_iters: Jacobi iteration cap
        tolerance: Jacobi convergence threshold

    Returns:
        Dictionary with 'center', 'scale', 'eigenvalues' (descending),
        'comps' (n_comps x n_features), 'explained_variance_ratio' and 'proj'
    """
    matrix = np.asarray(matrix, dtype=float)
    n_features = matrix.shape[1]

    # Fail before the expensive part
    if n_comps < 1 or n_comps > n_features:
        raise InvalidComponentCountError(
            f"Requested {n_comps} components but there are {n_features} features"
        )

    stats = standardize_fit(matrix, train_indices)
    standardized = standardize_transform(matrix, stats)
    cov = covariance_matrix(standardized, train_indices)

    eigenvalues, eigenvectors = jacobi_eigen(cov, max_iters, tolerance)
    eigenvalues, eigenvectors = sort_eigenpairs(eigenvalues, eigenvectors)

    return {
        'center': stats.mean,
        'scale': stats.std,
        'eigenvalues': eigenvalues,
        'comps': eigenvectors[:, :n_comps].T,
        'explained_variance_ratio': explained_variance_ratio(eigenvalues),
        'proj': project(standardized, eigenvalues, eigenvectors, n_comps),
    }


def pca_project_named_matrix(nmat: NamedMatrix,
                             n_comps: int,
                             train_indices: Sequence[int],
                             max_iters: int,
                             tolerance: float) -> Tuple[Dict[str, np.ndarray], NamedMatrix]:
    """
    Perform PCA on a NamedMatrix and project its rows.

    Args:
        nmat: Feature matrix with document rows
        n_comps: Number of components
        train_indices: Row positions of the training documents
        max_iters: Jacobi iteration cap
        tolerance: Jacobi convergence threshold

    Returns:
        Tuple of (pca_results, projections) where projections keeps the row
        names and has columns pc1..pcN
    """
    pca_results = pca(nmat.values, n_comps, train_indices, max_iters, tolerance)

    colnames = [f"pc{i + 1}" for i in range(n_comps)]
    projections = NamedMatrix(pca_results['proj'], nmat.rownames(), colnames)

    return pca_results, projections
