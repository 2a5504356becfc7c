"""
Feature encoding for patient/medication profiles.

The forest consumes fixed 8-slot vectors. Categorical fields are encoded by
their position in the enum declarations below, age and weight are scaled to
roughly [0, 1].
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

import numpy as np


N_FEATURES = 8
N_CLASSES = 3

FEATURE_NAMES = [
    "drug_category",
    "dosage_level",
    "age_norm",
    "weight_norm",
    "sex",
    "bp_status",
    "frequency_per_day",
    "lifestyle_factor_count",
]

AGE_SCALE = 100.0
WEIGHT_SCALE = 150.0


class _IndexedEnum(Enum):
    """Enum whose declaration order is its encoded index."""

    @property
    def index(self) -> int:
        return list(type(self)).index(self)

    @classmethod
    def from_index(cls, index: int):
        return list(cls)[int(index)]

    @classmethod
    def coerce(cls, value):
        """Accept a member or its string value."""
        if isinstance(value, cls):
            return value
        return cls(value)


class DrugCategory(_IndexedEnum):
    ANTIBIOTIC = "Antibiotic"
    PAINKILLER = "Painkiller"
    STATIN = "Statin"
    ANTIHISTAMINE = "Antihistamine"
    ANTIDEPRESSANT = "Antidepressant"
    BETA_BLOCKER = "Beta-Blocker"


class DosageLevel(_IndexedEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class BiologicalSex(_IndexedEnum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class BPStatus(_IndexedEnum):
    NORMAL = "Normal"
    ELEVATED = "Elevated"
    HIGH = "High"


class RiskLevel(_IndexedEnum):
    LOW = "Low Risk"
    MEDIUM = "Moderate Risk"
    HIGH = "High Risk"

    @classmethod
    def from_label(cls, label: int) -> "RiskLevel":
        return cls.from_index(label)


@dataclass
class PatientProfile:
    """Patient and medication details collected by the dashboard form."""
    drug_category: DrugCategory = DrugCategory.PAINKILLER
    dosage_level: DosageLevel = DosageLevel.MEDIUM
    age: float = 35
    weight: float = 70
    sex: BiologicalSex = BiologicalSex.MALE
    bp_status: BPStatus = BPStatus.NORMAL
    frequency_per_day: int = 1
    lifestyle_factors: List[str] = field(default_factory=list)
    allergies: str = ""
    specific_conditions: str = ""

    def __post_init__(self):
        self.drug_category = DrugCategory.coerce(self.drug_category)
        self.dosage_level = DosageLevel.coerce(self.dosage_level)
        self.sex = BiologicalSex.coerce(self.sex)
        self.bp_status = BPStatus.coerce(self.bp_status)


def encode_profile(
    profile: PatientProfile,
    dosage_level: Optional[Union[DosageLevel, str]] = None,
    frequency_per_day: Optional[int] = None,
) -> np.ndarray:
    """
    Encode a profile into the forest's feature vector.

    Parameters
    ----------
    profile : PatientProfile
        Profile to encode.
    dosage_level : DosageLevel or str, optional
        Replaces the profile's dosage (used by the sensitivity sweep).
    frequency_per_day : int, optional
        Replaces the profile's dosing frequency.

    Returns
    -------
    vector : ndarray of shape (8,)
    """
    dose = DosageLevel.coerce(dosage_level) if dosage_level is not None else profile.dosage_level
    freq = frequency_per_day if frequency_per_day is not None else profile.frequency_per_day

    return np.array([
        profile.drug_category.index,
        dose.index,
        profile.age / AGE_SCALE,
        profile.weight / WEIGHT_SCALE,
        profile.sex.index,
        profile.bp_status.index,
        freq,
        len(profile.lifestyle_factors),
    ], dtype=float)
