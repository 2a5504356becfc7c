"""
Synthetic training corpus for the risk forest.

No real clinical dataset backs the dashboard, so labels come from a fixed
rule-based risk score plus Gaussian noise. The noise keeps the classes
overlapping, which leaves the forest something to generalise over.
"""

import logging
from typing import NamedTuple, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .encoding import AGE_SCALE, FEATURE_NAMES, N_FEATURES, WEIGHT_SCALE, DrugCategory
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)

# Inclusive sampling ranges: (low, high)
FEATURE_RANGES = {
    "drug_category": (0, 5),
    "dosage_level": (0, 2),
    "age": (5, 100),
    "weight": (30, 150),
    "sex": (0, 2),
    "bp_status": (0, 2),
    "frequency_per_day": (1, 10),
    "lifestyle_factor_count": (0, 5),
}

# Baseline contribution per drug category
CATEGORY_BASELINE = {
    DrugCategory.ANTIBIOTIC: 1.0,
    DrugCategory.PAINKILLER: 0.0,
    DrugCategory.STATIN: 0.5,
    DrugCategory.ANTIHISTAMINE: 0.0,
    DrugCategory.ANTIDEPRESSANT: 1.0,
    DrugCategory.BETA_BLOCKER: 0.5,
}

ELDERLY_AGE = 65
LOW_WEIGHT = 55
BETA_BLOCKER_BP_FACTOR = 1.75

DEFAULT_NOISE_SCALE = 0.75
DEFAULT_CUTPOINTS = (5.0, 7.0)


class SyntheticCorpus(NamedTuple):
    """Index-aligned features and labels; unpacks as ``features, labels``."""
    features: np.ndarray
    labels: np.ndarray

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame(self.features, columns=FEATURE_NAMES)
        frame["label"] = self.labels
        return frame


def risk_score(category, dosage, age, weight, bp, frequency, lifestyle) -> np.ndarray:
    """
    Deterministic rule-based risk score (vectorised).

    Ages and weights are in years and kilograms, the rest are encoded
    indices/counts.
    """
    category = np.asarray(category, dtype=int)
    age = np.asarray(age, dtype=float)
    weight = np.asarray(weight, dtype=float)
    bp = np.asarray(bp, dtype=float)

    score = np.zeros(np.broadcast(category, age).shape, dtype=float)
    score += np.where(age > ELDERLY_AGE, 3.0 * (age - ELDERLY_AGE) / 35.0, 0.0)
    score += np.where(weight < LOW_WEIGHT, 1.5 * (LOW_WEIGHT - weight) / 25.0, 0.0)
    score += 1.5 * np.asarray(dosage, dtype=float)

    beta_blocker = category == DrugCategory.BETA_BLOCKER.index
    score += bp * np.where(beta_blocker, BETA_BLOCKER_BP_FACTOR, 1.0)

    baselines = np.array([CATEGORY_BASELINE[c] for c in DrugCategory])
    score += baselines[category]

    score += 0.25 * (np.asarray(frequency, dtype=float) - 1)
    score += 0.4 * np.asarray(lifestyle, dtype=float)
    return score


class SyntheticCorpusGenerator:
    """
    Generates labelled feature vectors from the rule-based risk score.

    Parameters
    ----------
    noise_scale : float, default=0.75
        Standard deviation of the zero-mean Gaussian noise added to the score.

    cutpoints : tuple of float, default=(5.0, 7.0)
        Scores below the first are Low, below the second Medium, else High.
        The defaults split a large sample into roughly equal thirds.

    random_state : int, numpy Generator or None, default=None
        Random source. An int gives a reproducible corpus per ``generate``
        call on a fresh generator.
    """

    def __init__(
        self,
        noise_scale: float = DEFAULT_NOISE_SCALE,
        cutpoints: Tuple[float, float] = DEFAULT_CUTPOINTS,
        random_state: Union[int, np.random.Generator, None] = None,
    ):
        if noise_scale < 0:
            raise InvalidArgumentError(f"noise_scale must be >= 0, got {noise_scale}")
        low, high = cutpoints
        if low > high:
            raise InvalidArgumentError(f"cutpoints must be ascending, got {cutpoints}")
        self.noise_scale = noise_scale
        self.cutpoints = (float(low), float(high))
        self.rng = np.random.default_rng(random_state)

    def _draw(self, name: str, count: int) -> np.ndarray:
        low, high = FEATURE_RANGES[name]
        return self.rng.integers(low, high, size=count, endpoint=True)

    def generate(self, count: int) -> SyntheticCorpus:
        """
        Draw ``count`` labelled examples.

        Raises
        ------
        InvalidArgumentError
            If ``count`` is negative or not an integer.
        """
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)):
            raise InvalidArgumentError(f"count must be an integer, got {count!r}")
        if count < 0:
            raise InvalidArgumentError(f"count must be >= 0, got {count}")
        if count == 0:
            return SyntheticCorpus(
                features=np.empty((0, N_FEATURES), dtype=float),
                labels=np.empty(0, dtype=int),
            )

        category = self._draw("drug_category", count)
        dosage = self._draw("dosage_level", count)
        age = self._draw("age", count)
        weight = self._draw("weight", count)
        sex = self._draw("sex", count)
        bp = self._draw("bp_status", count)
        frequency = self._draw("frequency_per_day", count)
        lifestyle = self._draw("lifestyle_factor_count", count)

        score = risk_score(category, dosage, age, weight, bp, frequency, lifestyle)
        score = score + self.rng.normal(0.0, self.noise_scale, size=count)
        labels = np.digitize(score, self.cutpoints).astype(int)

        features = np.column_stack([
            category,
            dosage,
            age / AGE_SCALE,
            weight / WEIGHT_SCALE,
            sex,
            bp,
            frequency,
            lifestyle,
        ]).astype(float)

        logger.debug("Generated %d examples, label counts %s", count, np.bincount(labels, minlength=3))
        return SyntheticCorpus(features=features, labels=labels)


def generate(count: int, random_state: Union[int, np.random.Generator, None] = None,
             noise_scale: float = DEFAULT_NOISE_SCALE,
             cutpoints: Optional[Tuple[float, float]] = None) -> SyntheticCorpus:
    """Generate a corpus with a one-off ``SyntheticCorpusGenerator``."""
    generator = SyntheticCorpusGenerator(
        noise_scale=noise_scale,
        cutpoints=cutpoints or DEFAULT_CUTPOINTS,
        random_state=random_state,
    )
    return generator.generate(count)
