"""
Prediction records handed to the dashboard's history, export and
explanation collaborators.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from .encoding import DosageLevel, PatientProfile, RiskLevel, encode_profile
from .forest import RandomForest


@dataclass
class SensitivityPoint:
    """Forest output for the profile at one swept dosage level."""
    label: str
    probability: float
    risk_level: RiskLevel


@dataclass
class PredictionResult:
    """
    One risk assessment.

    ``timestamp`` is Unix time in seconds. ``explanation``, ``mitigations``
    and ``map_links`` are filled in later by the remote explanation service;
    the engine leaves them empty.
    """
    risk_level: RiskLevel
    probability: float
    timestamp: float
    sensitivity: List[SensitivityPoint] = field(default_factory=list)
    explanation: Optional[str] = None
    mitigations: List[str] = field(default_factory=list)
    map_links: List[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "risk_level": self.risk_level.value,
            "probability": self.probability,
            "timestamp": self.timestamp,
            "sensitivity": [
                {"label": p.label, "probability": p.probability, "risk_level": p.risk_level.value}
                for p in self.sensitivity
            ],
            "explanation": self.explanation,
            "mitigations": list(self.mitigations),
            "map_links": list(self.map_links),
        }


def sensitivity_curve(forest: RandomForest, profile: PatientProfile) -> List[SensitivityPoint]:
    """Re-query the forest with every dosage level, keeping the rest of the profile."""
    points = []
    for dose in DosageLevel:
        vector = encode_profile(profile, dosage_level=dose)
        points.append(SensitivityPoint(
            label=f"{dose.value} Dose",
            probability=forest.predict_probability(vector),
            risk_level=RiskLevel.from_label(forest.predict(vector)),
        ))
    return points


def assess_profile(forest: RandomForest, profile: PatientProfile) -> PredictionResult:
    """Predict the risk tier of ``profile`` and attach its dosage sensitivity curve."""
    vector = encode_profile(profile)
    return PredictionResult(
        risk_level=RiskLevel.from_label(forest.predict(vector)),
        probability=forest.predict_probability(vector),
        timestamp=time.time(),
        sensitivity=sensitivity_curve(forest, profile),
    )
