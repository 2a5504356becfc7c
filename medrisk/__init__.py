"""
MedRisk Core

Statistical engine behind the medication risk dashboard:
- Random forest of Gini decision trees over an 8-slot feature vector
- Synthetic labelled corpus from a rule-based risk score plus noise
- Profile encoding, holdout evaluation and dosage sensitivity sweeps

Usage:
    from medrisk import RandomForest, generate

    X, y = generate(1200, random_state=7)
    forest = RandomForest(n_trees=40, random_state=7).train(X[:960], y[:960])
    label = forest.predict(X[1000])
    confidence = forest.predict_probability(X[1000])
"""

from .assessment import PredictionResult, SensitivityPoint, assess_profile, sensitivity_curve
from .config import EngineConfig
from .encoding import (
    FEATURE_NAMES,
    N_FEATURES,
    BiologicalSex,
    BPStatus,
    DosageLevel,
    DrugCategory,
    PatientProfile,
    RiskLevel,
    encode_profile,
)
from .errors import (
    InvalidArgumentError,
    InvalidFeatureVectorError,
    InvalidTrainingDataError,
    MedRiskError,
    ModelNotTrainedError,
)
from .evaluation import ModelMetrics, train_and_evaluate
from .forest import RandomForest
from .synthetic import SyntheticCorpus, SyntheticCorpusGenerator, generate

__version__ = "0.1.0"
__all__ = [
    "RandomForest",
    "SyntheticCorpus",
    "SyntheticCorpusGenerator",
    "generate",
    "EngineConfig",
    "ModelMetrics",
    "train_and_evaluate",
    "PredictionResult",
    "SensitivityPoint",
    "assess_profile",
    "sensitivity_curve",
    "PatientProfile",
    "DrugCategory",
    "DosageLevel",
    "BiologicalSex",
    "BPStatus",
    "RiskLevel",
    "encode_profile",
    "FEATURE_NAMES",
    "N_FEATURES",
    "MedRiskError",
    "InvalidTrainingDataError",
    "InvalidFeatureVectorError",
    "ModelNotTrainedError",
    "InvalidArgumentError",
]
