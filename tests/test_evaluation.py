"""
Tests for configuration, the evaluation pipeline and assessment records.
"""

import json
import time

import numpy as np
import pytest

from medrisk import (
    DosageLevel,
    DrugCategory,
    EngineConfig,
    InvalidArgumentError,
    PatientProfile,
    RiskLevel,
    assess_profile,
    sensitivity_curve,
    train_and_evaluate,
)


@pytest.fixture(scope="module")
def small_run():
    config = EngineConfig(n_trees=10, n_samples=300, random_state=1)
    return train_and_evaluate(config)


class TestEngineConfig:
    """Tests for EngineConfig."""

    def test_defaults(self):
        config = EngineConfig()
        assert config.n_trees == 40
        assert config.n_samples == 1200
        assert config.test_fraction == 0.2
        assert config.random_state is None

    def test_invalid_values(self):
        with pytest.raises(InvalidArgumentError):
            EngineConfig(n_trees=0)
        with pytest.raises(InvalidArgumentError):
            EngineConfig(test_fraction=1.0)
        with pytest.raises(InvalidArgumentError):
            EngineConfig(n_samples=-5)

    @pytest.mark.parametrize("n_samples", [0, 1])
    def test_sample_count_must_fill_both_splits(self, n_samples):
        with pytest.raises(InvalidArgumentError, match="empty train or test split"):
            EngineConfig(n_samples=n_samples)

    def test_smallest_usable_sample_count(self):
        config = EngineConfig(n_samples=2)
        assert config.n_samples == 2

    def test_from_config_file(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({
            "n_trees": 12,
            "n_samples": 500,
            "cutpoints": [4.5, 7.5],
            "unrelated": "ignored",
        }))

        config = EngineConfig.from_config_file(path, n_trees=20, random_state=None)
        assert config.n_trees == 20
        assert config.n_samples == 500
        assert config.cutpoints == (4.5, 7.5)
        assert config.random_state is None

    def test_missing_config_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_config_file(tmp_path / "missing.json")

    def test_param_dicts(self):
        config = EngineConfig(n_trees=5, random_state=3, noise_scale=0.5)
        assert config.forest_params()["n_trees"] == 5
        assert config.forest_params()["random_state"] == 3
        assert config.generator_params() == {
            "noise_scale": 0.5,
            "cutpoints": (5.0, 7.0),
            "random_state": 3,
        }


class TestTrainAndEvaluate:
    """Tests for train_and_evaluate()."""

    def test_split_sizes(self, small_run):
        _, metrics = small_run
        assert metrics.training_size == 240
        assert metrics.test_size == 60

    def test_metric_ranges(self, small_run):
        forest, metrics = small_run
        assert 0.0 <= metrics.accuracy <= 1.0
        assert 0.0 <= metrics.f1_score <= 1.0
        assert len(metrics.feature_importance) == 8
        assert sum(metrics.feature_importance) == pytest.approx(1.0, abs=1e-6)
        assert forest.is_trained

    def test_metrics_to_dict(self, small_run):
        _, metrics = small_run
        data = metrics.to_dict()
        assert set(data) == {"accuracy", "f1_score", "training_size", "test_size", "feature_importance"}
        json.dumps(data)

    def test_seeded_runs_match(self):
        config = EngineConfig(n_trees=5, n_samples=200, random_state=8)
        _, a = train_and_evaluate(config)
        _, b = train_and_evaluate(config)
        assert a == b


class TestAssessment:
    """Tests for assess_profile() and sensitivity_curve()."""

    def test_sensitivity_has_one_point_per_dose(self, small_run):
        forest, _ = small_run
        points = sensitivity_curve(forest, PatientProfile())

        assert [p.label for p in points] == ["Low Dose", "Medium Dose", "High Dose"]
        for p in points:
            assert 0.0 <= p.probability <= 1.0
            assert isinstance(p.risk_level, RiskLevel)

    def test_assess_profile(self, small_run):
        forest, _ = small_run
        profile = PatientProfile(drug_category=DrugCategory.STATIN, dosage_level=DosageLevel.LOW)
        result = assess_profile(forest, profile)

        assert isinstance(result.risk_level, RiskLevel)
        assert 0.0 <= result.probability <= 1.0
        # Unix seconds
        assert abs(result.timestamp - time.time()) < 60
        assert len(result.sensitivity) == 3
        assert result.explanation is None
        assert result.mitigations == []
        assert result.map_links == []

        # Low-dose point of the sweep is the profile itself
        assert result.sensitivity[0].probability == result.probability
        assert result.sensitivity[0].risk_level is result.risk_level

    def test_result_to_dict_is_json_ready(self, small_run):
        forest, _ = small_run
        data = assess_profile(forest, PatientProfile()).to_dict()
        assert data["risk_level"] in {"Low Risk", "Moderate Risk", "High Risk"}
        assert len(data["sensitivity"]) == 3
        assert data["map_links"] == []
        json.dumps(data)

    def test_profile_not_mutated_by_sweep(self, small_run):
        forest, _ = small_run
        profile = PatientProfile(dosage_level=DosageLevel.MEDIUM)
        sensitivity_curve(forest, profile)
        assert profile.dosage_level is DosageLevel.MEDIUM
        assert np.isfinite(forest.predict_probability([1, 1, 0.35, 0.47, 0, 0, 1, 0]))
