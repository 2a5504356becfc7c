"""
Gini impurity and split scoring for the tree builder.
"""

from typing import Optional, Tuple

import numpy as np

from .encoding import N_CLASSES


def class_counts(labels: np.ndarray, n_classes: int = N_CLASSES) -> np.ndarray:
    """Per-label occurrence counts."""
    return np.bincount(np.asarray(labels, dtype=int), minlength=n_classes)


def gini(counts: np.ndarray) -> float:
    """Gini impurity ``1 - sum(p_c^2)`` of a class-count vector."""
    counts = np.asarray(counts, dtype=float)
    total = counts.sum()
    if total <= 0:
        return 0.0
    p = counts / total
    return float(1.0 - np.sum(p * p))


def candidate_thresholds(values: np.ndarray) -> np.ndarray:
    """Midpoints between consecutive distinct sorted values."""
    distinct = np.unique(values)
    if distinct.size < 2:
        return np.empty(0, dtype=float)
    return (distinct[:-1] + distinct[1:]) / 2.0


def impurity_decrease(
    features: np.ndarray,
    labels: np.ndarray,
    feature_index: int,
    threshold: float,
) -> float:
    """
    Impurity decrease of splitting at ``value <= threshold``.

    Parameters
    ----------
    features : ndarray of shape (n_samples, n_features)
    labels : ndarray of shape (n_samples,)
    feature_index : int
    threshold : float

    Returns
    -------
    decrease : float
        ``gini(parent) - (|L|/|P| gini(L) + |R|/|P| gini(R))``.
    """
    labels = np.asarray(labels, dtype=int)
    n = len(labels)
    if n == 0:
        return 0.0

    left_mask = features[:, feature_index] <= threshold
    n_left = int(left_mask.sum())
    n_right = n - n_left

    parent = gini(class_counts(labels))
    left = gini(class_counts(labels[left_mask]))
    right = gini(class_counts(labels[~left_mask]))
    return parent - (n_left / n * left + n_right / n * right)


def best_split_for_feature(
    features: np.ndarray,
    labels: np.ndarray,
    feature_index: int,
    n_classes: int = N_CLASSES,
) -> Optional[Tuple[float, float]]:
    """
    Best threshold on one feature by impurity decrease.

    Every midpoint between distinct sorted values is scored at once from
    cumulative class counts. Equal scores resolve to the lowest threshold.

    Returns
    -------
    (threshold, decrease) or None
        None when the feature has a single distinct value.
    """
    values = features[:, feature_index]
    order = np.argsort(values, kind="stable")
    sorted_values = values[order]
    sorted_labels = np.asarray(labels, dtype=int)[order]
    n = len(sorted_values)

    # Index i marks a boundary between sorted positions i and i+1
    boundaries = np.nonzero(sorted_values[1:] > sorted_values[:-1])[0]
    if boundaries.size == 0:
        return None

    onehot = np.zeros((n, n_classes), dtype=float)
    onehot[np.arange(n), sorted_labels] = 1.0
    cumulative = np.cumsum(onehot, axis=0)
    total = cumulative[-1]

    left_counts = cumulative[boundaries]
    right_counts = total - left_counts
    n_left = (boundaries + 1).astype(float)
    n_right = n - n_left

    gini_left = 1.0 - np.sum((left_counts / n_left[:, None]) ** 2, axis=1)
    gini_right = 1.0 - np.sum((right_counts / n_right[:, None]) ** 2, axis=1)
    parent = gini(total)

    decrease = parent - (n_left / n * gini_left + n_right / n * gini_right)
    best = int(np.argmax(decrease))
    b = boundaries[best]
    threshold = (sorted_values[b] + sorted_values[b + 1]) / 2.0
    return float(threshold), float(decrease[best])
