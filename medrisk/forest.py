"""
Random forest ensemble over the 8-slot risk feature vector.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator

from .encoding import FEATURE_NAMES, N_CLASSES, N_FEATURES
from .errors import (
    InvalidArgumentError,
    InvalidFeatureVectorError,
    InvalidTrainingDataError,
    ModelNotTrainedError,
)
from .tree import DecisionTreeBuilder, TreeNode, count_leaves, majority_label, traverse, tree_depth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ForestState:
    """Everything a trained forest reads at inference time."""
    trees: Tuple[TreeNode, ...]
    feature_importance: np.ndarray


def _as_vector(vector) -> np.ndarray:
    try:
        v = np.asarray(vector, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidFeatureVectorError(f"Feature vector is not numeric: {e}") from e
    if v.ndim != 1 or v.shape[0] != N_FEATURES:
        raise InvalidFeatureVectorError(
            f"Expected a feature vector of length {N_FEATURES}, got shape {v.shape}"
        )
    if not np.all(np.isfinite(v)):
        raise InvalidFeatureVectorError("Feature vector contains non-finite values")
    return v


def _validate_training_data(features, labels) -> Tuple[np.ndarray, np.ndarray]:
    if len(features) == 0 or len(labels) == 0:
        raise InvalidTrainingDataError("Training data is empty")
    if len(features) != len(labels):
        raise InvalidTrainingDataError(
            f"Got {len(features)} feature vectors but {len(labels)} labels"
        )

    try:
        X = np.asarray(features, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidTrainingDataError(f"Feature vectors are ragged or non-numeric: {e}") from e
    if X.ndim != 2 or X.shape[1] != N_FEATURES:
        raise InvalidTrainingDataError(
            f"Every feature vector must have length {N_FEATURES}, got shape {X.shape}"
        )
    if not np.all(np.isfinite(X)):
        raise InvalidTrainingDataError("Feature vectors contain non-finite values")

    try:
        y = np.asarray(labels, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidTrainingDataError(f"Labels are not numeric: {e}") from e
    if y.ndim != 1 or not np.isin(y, np.arange(N_CLASSES)).all():
        raise InvalidTrainingDataError(f"Labels must be integers in 0..{N_CLASSES - 1}")

    return X, y.astype(int)


class RandomForest(BaseEstimator):
    """
    Bagged ensemble of Gini decision trees for the three risk tiers.

    Each tree is grown on its own bootstrap sample with its own random
    sub-stream, so trees can be built in any order (or concurrently) and a
    seeded forest is reproducible. ``train`` builds a fresh state object and
    swaps it in with a single assignment; readers never see a partial forest.

    Parameters
    ----------
    n_trees : int, default=40
        Number of trees in the ensemble.

    max_depth : int, default=10
        Maximum depth of each tree.

    min_samples_split : int, default=2
        Minimum examples a node needs to be split.

    max_features : int or None, default=None
        Features sampled per split. If None, ``round(sqrt(8)) = 3``.

    n_jobs : int, default=1
        Worker threads used to build trees. -1 uses all CPUs.

    random_state : int, numpy Generator or None, default=None
        Seed for bootstrap sampling and feature sampling. With an int, every
        ``train`` call on the same data gives the same forest.

    verbose : bool, default=False
        Whether to log progress at INFO level.

    Attributes
    ----------
    trees_ : tuple of TreeNode
        Trained tree roots.

    feature_importance_ : ndarray of shape (8,)
        Normalised impurity-based importance; zeros before training.

    Examples
    --------
    >>> from medrisk import RandomForest, generate
    >>> X, y = generate(1200, random_state=7)
    >>> forest = RandomForest(n_trees=40, random_state=7).train(X, y)
    >>> forest.predict(X[0]), forest.predict_probability(X[0])
    """

    def __init__(
        self,
        n_trees: int = 40,
        max_depth: int = 10,
        min_samples_split: int = 2,
        max_features: Optional[int] = None,
        n_jobs: int = 1,
        random_state: Union[int, np.random.Generator, None] = None,
        verbose: bool = False,
    ):
        self.n_trees = n_trees
        self.max_depth = max_depth
        self.min_samples_split = min_samples_split
        self.max_features = max_features
        self.n_jobs = n_jobs
        self.random_state = random_state
        self.verbose = verbose
        self._state: Optional[_ForestState] = None
        self._validate_params()

    def _validate_params(self):
        n_trees = self.n_trees
        if isinstance(n_trees, bool) or not isinstance(n_trees, (int, np.integer)) or n_trees <= 0:
            raise InvalidArgumentError(f"n_trees must be a positive integer, got {n_trees!r}")

    def _log(self, msg: str):
        if self.verbose:
            logger.info("[RandomForest] %s", msg)
        else:
            logger.debug("[RandomForest] %s", msg)

    def _n_workers(self) -> int:
        if self.n_jobs is None:
            return 1
        if self.n_jobs < 0:
            return os.cpu_count() or 1
        return max(1, int(self.n_jobs))

    def _build_one(self, X: np.ndarray, y: np.ndarray, seed: int) -> Tuple[TreeNode, np.ndarray]:
        rng = np.random.default_rng(seed)
        n = len(y)
        sample = rng.integers(0, n, size=n)
        builder = DecisionTreeBuilder(
            max_depth=self.max_depth,
            min_samples_split=self.min_samples_split,
            max_features=self.max_features,
            n_classes=N_CLASSES,
            rng=rng,
        )
        return builder.build(X[sample], y[sample])

    def train(self, features, labels) -> "RandomForest":
        """
        Fit the forest, replacing any previous one.

        Parameters
        ----------
        features : array-like of shape (n_samples, 8)
        labels : array-like of shape (n_samples,)
            Values in {0, 1, 2}.

        Returns
        -------
        self : RandomForest

        Raises
        ------
        InvalidTrainingDataError
            Empty or mismatched inputs, wrong vector length, non-finite
            values or labels outside {0, 1, 2}. The previous forest is kept.
        InvalidArgumentError
            If ``n_trees`` was set to a non-positive value via ``set_params``.
        """
        self._validate_params()
        X, y = _validate_training_data(features, labels)
        self._log(f"Training {self.n_trees} trees on {len(y)} examples")

        # One seed per tree, drawn up front so scheduling cannot change the result
        rng = np.random.default_rng(self.random_state)
        seeds = rng.integers(0, np.iinfo(np.int64).max, size=self.n_trees)

        workers = self._n_workers()
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(self._build_one, X, y, int(s)) for s in seeds]
                results = [f.result() for f in futures]
        else:
            results = [self._build_one(X, y, int(s)) for s in seeds]

        trees = tuple(root for root, _ in results)
        total = np.clip(np.sum([imp for _, imp in results], axis=0), 0.0, None)
        norm = total.sum()
        importance = total / norm if norm > 0 else np.zeros(N_FEATURES, dtype=float)
        importance.setflags(write=False)

        self._state = _ForestState(trees=trees, feature_importance=importance)
        self._log("Training complete.")
        return self

    def _require_state(self) -> _ForestState:
        state = self._state
        if state is None:
            raise ModelNotTrainedError("Forest not trained. Call train() first.")
        return state

    def _votes(self, vector) -> Tuple[np.ndarray, int]:
        v = _as_vector(vector)
        state = self._require_state()
        votes = np.zeros(N_CLASSES, dtype=int)
        for root in state.trees:
            votes[traverse(root, v).majority_label] += 1
        return votes, len(state.trees)

    def vote_counts(self, vector) -> np.ndarray:
        """Number of trees voting for each label."""
        votes, _ = self._votes(vector)
        return votes

    def predict(self, vector) -> int:
        """
        Majority-vote risk label for one feature vector.

        Ties between labels go to the higher risk tier.

        Raises
        ------
        InvalidFeatureVectorError
            If ``vector`` is not 8 finite numbers.
        ModelNotTrainedError
            If ``train`` has not succeeded yet.
        """
        votes, _ = self._votes(vector)
        return majority_label(votes)

    def predict_probability(self, vector) -> float:
        """
        Fraction of trees that voted for the predicted label.

        This is an empirical vote share, not a calibrated posterior.
        """
        votes, n_trees = self._votes(vector)
        return float(votes[majority_label(votes)] / n_trees)

    def predict_batch(self, features: Sequence) -> np.ndarray:
        """Predicted labels for each row of ``features``."""
        return np.array([self.predict(row) for row in features], dtype=int)

    @property
    def is_trained(self) -> bool:
        return self._state is not None

    @property
    def trees_(self) -> Tuple[TreeNode, ...]:
        return self._require_state().trees

    @property
    def feature_importance_(self) -> np.ndarray:
        state = self._state
        if state is None:
            return np.zeros(N_FEATURES, dtype=float)
        return state.feature_importance.copy()

    def importance_frame(self) -> pd.Series:
        """Feature importance indexed by feature name, largest first."""
        series = pd.Series(self.feature_importance_, index=FEATURE_NAMES, name="importance")
        return series.sort_values(ascending=False)

    def summary(self) -> str:
        """Return human-readable summary of the trained forest."""
        state = self._state
        if state is None:
            return "Forest not trained yet. Call train() first."

        depths = [tree_depth(t) for t in state.trees]
        leaves = [count_leaves(t) for t in state.trees]
        lines = [
            "RandomForest Summary",
            "=" * 40,
            "",
            f"Trees: {len(state.trees)}",
            f"Depth: mean {np.mean(depths):.1f}, max {max(depths)}",
            f"Leaves: mean {np.mean(leaves):.1f}",
            "",
            "Feature importance:",
        ]
        for name, value in self.importance_frame().items():
            lines.append(f"  {name}: {value:.3f}")
        return "\n".join(lines)
