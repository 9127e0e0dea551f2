"""
K-means clustering implementation for textmap.

This module provides a Lloyd-style K-means over projected document vectors
with a train/test discipline: centroids are seeded from and updated with
training points only, while every point (train and test) is assigned to its
nearest centroid on every iteration.
"""

import logging
import warnings
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from textmap.errors import DegenerateClusterWarning, InsufficientTrainDataError
from textmap.math.named_matrix import NamedMatrix
from textmap.utils.general import RandomState, as_index_array, check_random_state

logger = logging.getLogger(__name__)


class Cluster:
    """
    Represents a cluster in K-means clustering.
    """

    def __init__(self,
                 center: np.ndarray,
                 members: Optional[List[int]] = None,
                 id: Optional[int] = None):
        """
        Initialize a cluster with a center and optional members.

        Args:
            center: The center of the cluster
            members: Positions of all points (train and test) assigned to it
            id: Cluster id, its position in the centroid scan order
        """
        self.center = np.array(center, dtype=float)
        self.members = [] if members is None else list(members)
        self.id = id

    def add_member(self, idx: int) -> None:
        self.members.append(idx)

    def clear_members(self) -> None:
        self.members = []

    def update_center(self, data: np.ndarray, train_mask: np.ndarray) -> bool:
        """
        Move the center to the mean of the training members.

        Test members never influence the center. Without training members
        the center stays where it is.

        Args:
            data: Matrix of all points
            train_mask: Boolean mask of training rows

        Returns:
            True if the center was recomputed, False if it was frozen
        """
        train_members = [idx for idx in self.members if train_mask[idx]]

        if not train_members:
            return False

        self.center = np.mean(data[train_members], axis=0)
        return True

    def __repr__(self) -> str:
        return f"Cluster(id={self.id}, members={len(self.members)})"


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    Calculate Euclidean distance between two vectors.
    """
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def init_clusters(data: np.ndarray,
                  k: int,
                  train_indices: Sequence[int],
                  rng: np.random.Generator) -> List[Cluster]:
    """
    Seed k clusters with distinct training points drawn uniformly at random.

    When there are fewer training points than k, the remaining centers
    repeat the first training point, so fewer than k clusters can end up
    populated.

    Args:
        data: Matrix of all points
        k: Number of clusters
        train_indices: Positions of the training points
        rng: Random source

    Returns:
        List of k clusters with ids 0..k-1 and no members
    """
    train_indices = list(train_indices)
    n_train = len(train_indices)

    n_sampled = min(k, n_train)
    picks = rng.choice(n_train, size=n_sampled, replace=False)
    centers = [data[train_indices[i]] for i in picks]

    if n_sampled < k:
        message = (f"Only {n_train} training points for k={k}; "
                   f"padding centroids with the first training point")
        logger.warning(message)
        warnings.warn(message, DegenerateClusterWarning, stacklevel=3)
        centers.extend(data[train_indices[0]] for _ in range(k - n_sampled))

    return [Cluster(center, [], i) for i, center in enumerate(centers)]


def cluster_centers(clusters: List[Cluster]) -> np.ndarray:
    """Stack cluster centers into a (k, d) matrix."""
    return np.vstack([cluster.center for cluster in clusters])


def assign_points_to_clusters(data: np.ndarray, clusters: List[Cluster]) -> np.ndarray:
    """
    Assign each point to the nearest cluster.

    Ties go to the lowest cluster index. Member lists are rebuilt.

    Args:
        data: Matrix of all points
        clusters: List of clusters

    Returns:
        Array of cluster positions, one per point
    """
    centers = cluster_centers(clusters)
    distances = np.linalg.norm(data[:, np.newaxis, :] - centers[np.newaxis, :, :], axis=2)
    assignments = np.argmin(distances, axis=1)

    for cluster in clusters:
        cluster.clear_members()

    for i, c in enumerate(assignments):
        clusters[c].add_member(i)

    return assignments


def update_cluster_centers(data: np.ndarray,
                           clusters: List[Cluster],
                           train_mask: np.ndarray) -> List[int]:
    """
    Update the centers of all clusters from their training members.

    Args:
        data: Matrix of all points
        clusters: List of clusters
        train_mask: Boolean mask of training rows

    Returns:
        Ids of clusters whose center was frozen
    """
    frozen = [cluster.id for cluster in clusters
              if not cluster.update_center(data, train_mask)]

    if frozen:
        message = f"Clusters {frozen} have no training points; centers kept in place"
        logger.debug(message)
        warnings.warn(message, DegenerateClusterWarning, stacklevel=3)

    return frozen


def within_cluster_sse(data: np.ndarray,
                       assignments: np.ndarray,
                       centers: np.ndarray,
                       indices: Optional[Sequence[int]] = None) -> float:
    """
    Total squared distance from points to their assigned centers.

    Args:
        data: Matrix of all points
        assignments: Cluster position per point
        centers: Cluster centers
        indices: Rows to include (defaults to all)

    Returns:
        Sum of squared distances
    """
    data = np.asarray(data, dtype=float)
    assignments = np.asarray(assignments)
    if indices is not None:
        rows = list(indices)
        data = data[rows]
        assignments = assignments[rows]

    return float(np.sum((data - np.asarray(centers)[assignments]) ** 2))


def kmeans(data: np.ndarray,
           k: int,
           train_indices: Sequence[int],
           max_iters: int = 100,
           random_state: RandomState = None) -> Tuple[List[Cluster], np.ndarray, int]:
    """
    Perform K-means clustering on the data.

    Iterates assignment and update steps until an assignment pass changes
    nothing or max_iters passes have run. Hitting the cap is not an error;
    the last assignment is returned.

    Args:
        data: Matrix of all points (train and test)
        k: Number of clusters
        train_indices: Positions of the training points
        max_iters: Maximum number of assignment passes
        random_state: Seed or Generator for centroid initialization

    Returns:
        Tuple of (clusters, assignments, iterations run)
    """
    data = np.asarray(data, dtype=float)
    n_points = data.shape[0]

    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    if max_iters < 1:
        raise ValueError(f"max_iters must be at least 1, got {max_iters}")

    train = as_index_array(train_indices, n_points, 'train_indices')
    if len(train) == 0:
        raise InsufficientTrainDataError("K-means needs at least one training point")

    train_mask = np.zeros(n_points, dtype=bool)
    train_mask[train] = True

    rng = check_random_state(random_state)
    clusters = init_clusters(data, k, train, rng)

    assignments = np.full(n_points, -1)
    iterations = 0
    converged = False

    for iterations in range(1, max_iters + 1):
        new_assignments = assign_points_to_clusters(data, clusters)

        # Check for convergence
        if np.array_equal(new_assignments, assignments):
            converged = True
            break

        assignments = new_assignments
        update_cluster_centers(data, clusters, train_mask)

    if converged:
        logger.debug(f"K-means converged after {iterations} iterations")
    else:
        logger.warning(f"K-means stopped at max_iters={max_iters} without converging")

    return clusters, assignments, iterations


def cluster(points: np.ndarray,
            k: int,
            train_indices: Sequence[int],
            max_iters: int = 100,
            random_state: RandomState = None) -> np.ndarray:
    """
    Cluster points and return the cluster id of every point.

    Args:
        points: Projected vectors for all documents
        k: Number of clusters
        train_indices: Positions of the training documents
        max_iters: Maximum number of iterations
        random_state: Seed or Generator for centroid initialization

    Returns:
        Array of cluster ids in 0..k-1, one per point
    """
    _, assignments, _ = kmeans(points, k, train_indices, max_iters, random_state)
    return assignments


def silhouette(data: np.ndarray,
               assignments: np.ndarray,
               indices: Optional[Sequence[int]] = None) -> float:
    """
    Calculate the mean silhouette coefficient for a clustering.

    Args:
        data: Matrix of points
        assignments: Cluster id per point
        indices: Rows to evaluate (defaults to all)

    Returns:
        Silhouette coefficient (between -1 and 1), 0.0 with fewer than two
        non-empty clusters
    """
    data = np.asarray(data, dtype=float)
    labels = np.asarray(assignments)
    if indices is not None:
        rows = list(indices)
        data = data[rows]
        labels = labels[rows]

    unique_labels = np.unique(labels)
    if len(unique_labels) < 2:
        return 0.0

    dist_matrix = np.linalg.norm(data[:, np.newaxis, :] - data[np.newaxis, :, :], axis=2)

    silhouette_values = []
    for i, label in enumerate(labels):
        same = labels == label
        same[i] = False

        if not same.any():
            # Singleton cluster
            silhouette_values.append(0.0)
            continue

        a = dist_matrix[i, same].mean()
        b = min(dist_matrix[i, labels == other].mean()
                for other in unique_labels if other != label)

        if a == 0 and b == 0:
            silhouette_values.append(0.0)
        else:
            silhouette_values.append((b - a) / max(a, b))

    return float(np.mean(silhouette_values))


def clusters_to_dict(clusters: List[Cluster], data_indices: Optional[List[Any]] = None) -> List[Dict]:
    """
    Convert clusters to a dictionary format for serialization.

    Args:
        clusters: List of clusters
        data_indices: Optional mapping from positions to row names

    Returns:
        List of cluster dictionaries
    """
    result = []

    for c in clusters:
        if data_indices is not None:
            members = [data_indices[idx] for idx in c.members]
        else:
            members = list(c.members)

        result.append({
            'id': c.id,
            'center': c.center.tolist(),
            'members': members
        })

    return result


def cluster_named_matrix(nmat: NamedMatrix,
                         k: int,
                         train_indices: Sequence[int],
                         max_iters: int = 100,
                         random_state: RandomState = None) -> Tuple[Dict[Any, int], List[Dict]]:
    """
    Cluster the rows of a NamedMatrix.

    Args:
        nmat: Projected vectors with document rows
        k: Number of clusters
        train_indices: Row positions of the training documents
        max_iters: Maximum number of iterations
        random_state: Seed or Generator for centroid initialization

    Returns:
        Tuple of ({row name: cluster id}, cluster dictionaries)
    """
    clusters, assignments, _ = kmeans(nmat.values, k, train_indices, max_iters, random_state)

    rownames = nmat.rownames()
    by_name = {name: int(c) for name, c in zip(rownames, assignments)}

    return by_name, clusters_to_dict(clusters, rownames)
