"""
Decision tree nodes and the recursive builder used by the forest.

A tree is an owned recursive value: a ``Split`` holds its two children
directly and nothing points back up, so trees are plain immutable data once
built.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .encoding import N_CLASSES
from .impurity import best_split_for_feature, class_counts


@dataclass(frozen=True)
class Leaf:
    """Terminal node carrying the class counts of the examples that reached it."""
    class_counts: Tuple[int, ...]
    majority_label: int


@dataclass(frozen=True)
class Split:
    """Decision node: ``value <= threshold`` goes left, otherwise right."""
    feature_index: int
    threshold: float
    left: "TreeNode"
    right: "TreeNode"


TreeNode = Union[Leaf, Split]


def majority_label(counts) -> int:
    """
    Argmax of a count vector, ties going to the higher risk tier.

    Scanning the reversed vector makes ``np.argmax`` return the last of the
    tied maxima.
    """
    counts = np.asarray(counts)
    return int(len(counts) - 1 - np.argmax(counts[::-1]))


def make_leaf(labels: np.ndarray, n_classes: int = N_CLASSES) -> Leaf:
    counts = class_counts(labels, n_classes)
    return Leaf(
        class_counts=tuple(int(c) for c in counts),
        majority_label=majority_label(counts),
    )


def traverse(root: TreeNode, vector: np.ndarray) -> Leaf:
    """Follow splits from ``root`` until a leaf is reached."""
    node = root
    while isinstance(node, Split):
        if vector[node.feature_index] <= node.threshold:
            node = node.left
        else:
            node = node.right
    return node


def tree_depth(node: TreeNode) -> int:
    """Number of split levels on the longest root-to-leaf path."""
    if isinstance(node, Leaf):
        return 0
    return 1 + max(tree_depth(node.left), tree_depth(node.right))


def count_leaves(node: TreeNode) -> int:
    if isinstance(node, Leaf):
        return 1
    return count_leaves(node.left) + count_leaves(node.right)


class DecisionTreeBuilder:
    """
    Grows one classification tree by recursive Gini partitioning.

    At each node a random subset of features is considered and the single
    (feature, threshold) pair with the largest impurity decrease wins. Ties
    resolve to the lowest feature index, then the lowest threshold.

    Parameters
    ----------
    max_depth : int, default=10
        Nodes at this depth become leaves.

    min_samples_split : int, default=2
        Nodes with fewer examples become leaves.

    max_features : int or None, default=None
        Features sampled per node. If None, ``round(sqrt(n_features))``.

    n_classes : int, default=3
        Number of label classes.

    rng : numpy.random.Generator or None, default=None
        Random source for feature sampling. Each concurrently built tree
        needs its own.
    """

    def __init__(
        self,
        max_depth: int = 10,
        min_samples_split: int = 2,
        max_features: Optional[int] = None,
        n_classes: int = N_CLASSES,
        rng: Optional[np.random.Generator] = None,
    ):
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.max_features = max_features
        self.n_classes = n_classes
        self.rng = rng if rng is not None else np.random.default_rng()

    def _n_candidate_features(self, n_features: int) -> int:
        if self.max_features is None:
            k = int(round(np.sqrt(n_features)))
        else:
            k = int(self.max_features)
        return min(max(1, k), n_features)

    def build(self, features: np.ndarray, labels: np.ndarray) -> Tuple[TreeNode, np.ndarray]:
        """
        Build a tree over ``features``/``labels``.

        Returns
        -------
        root : TreeNode
        importance : ndarray of shape (n_features,)
            Impurity decrease per feature, each split weighted by the share
            of the training set that reached it. Not normalised.
        """
        features = np.asarray(features, dtype=float)
        labels = np.asarray(labels, dtype=int)
        importance = np.zeros(features.shape[1], dtype=float)
        root = self._grow(features, labels, 0, importance, len(labels))
        return root, importance

    def _grow(
        self,
        X: np.ndarray,
        y: np.ndarray,
        depth: int,
        importance: np.ndarray,
        n_root: int,
    ) -> TreeNode:
        n = len(y)
        if (
            n < self.min_samples_split
            or depth >= self.max_depth
            or np.all(y == y[0])
        ):
            return make_leaf(y, self.n_classes)

        n_features = X.shape[1]
        k = self._n_candidate_features(n_features)
        candidates = np.sort(self.rng.choice(n_features, size=k, replace=False))

        best_feature, best_threshold, best_decrease = None, None, -np.inf
        for feature in candidates:
            found = best_split_for_feature(X, y, int(feature), self.n_classes)
            if found is None:
                continue
            threshold, decrease = found
            # Strict comparison keeps the lowest feature index on ties
            if decrease > best_decrease:
                best_feature, best_threshold, best_decrease = int(feature), threshold, decrease

        if best_feature is None:
            return make_leaf(y, self.n_classes)

        left_mask = X[:, best_feature] <= best_threshold
        if not left_mask.any() or left_mask.all():
            return make_leaf(y, self.n_classes)

        importance[best_feature] += best_decrease * n / n_root

        left = self._grow(X[left_mask], y[left_mask], depth + 1, importance, n_root)
        right = self._grow(X[~left_mask], y[~left_mask], depth + 1, importance, n_root)
        return Split(
            feature_index=best_feature,
            threshold=best_threshold,
            left=left,
            right=right,
        )
