"""Configuration for training and evaluation runs."""

import json
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Tuple

from .errors import InvalidArgumentError


@dataclass
class EngineConfig:
    """Configuration for a train-and-evaluate run."""

    # Forest
    n_trees: int = 40
    max_depth: int = 10
    min_samples_split: int = 2
    max_features: Optional[int] = None  # None -> round(sqrt(8))
    n_jobs: int = 1

    # Synthetic corpus
    n_samples: int = 1200
    test_fraction: float = 0.2
    noise_scale: float = 0.75
    cutpoints: Tuple[float, float] = (5.0, 7.0)

    # Shared seed for corpus and forest; None means unseeded
    random_state: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.cutpoints, list):
            self.cutpoints = tuple(self.cutpoints)
        if self.n_trees <= 0:
            raise InvalidArgumentError(f"n_trees must be > 0, got {self.n_trees}")
        if not 0.0 < self.test_fraction < 1.0:
            raise InvalidArgumentError(f"test_fraction must be in (0, 1), got {self.test_fraction}")
        # Same rounding as train_test_split: the test side is rounded up
        n_test = math.ceil(self.test_fraction * self.n_samples)
        if n_test < 1 or self.n_samples - n_test < 1:
            raise InvalidArgumentError(
                f"n_samples={self.n_samples} with test_fraction={self.test_fraction} "
                "leaves an empty train or test split"
            )
        if len(self.cutpoints) != 2:
            raise InvalidArgumentError(f"cutpoints must have two values, got {self.cutpoints}")

    def forest_params(self) -> dict:
        """Keyword arguments for ``RandomForest``."""
        return {
            "n_trees": self.n_trees,
            "max_depth": self.max_depth,
            "min_samples_split": self.min_samples_split,
            "max_features": self.max_features,
            "n_jobs": self.n_jobs,
            "random_state": self.random_state,
        }

    def generator_params(self) -> dict:
        """Keyword arguments for ``SyntheticCorpusGenerator``."""
        return {
            "noise_scale": self.noise_scale,
            "cutpoints": self.cutpoints,
            "random_state": self.random_state,
        }

    @classmethod
    def from_config_file(cls, config_path: Path | str, **overrides) -> "EngineConfig":
        """Load config from a JSON file. Overrides that are not None take precedence."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = json.load(f)

        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        values.update({k: v for k, v in overrides.items() if k in known and v is not None})
        return cls(**values)
