"""
Tests for the synthetic corpus generator.
"""

import numpy as np
import pytest

from medrisk import InvalidArgumentError, SyntheticCorpusGenerator, generate
from medrisk.encoding import FEATURE_NAMES
from medrisk.synthetic import risk_score


class TestGenerate:
    """Tests for generate() and SyntheticCorpusGenerator.generate()."""

    def test_zero_count_is_empty(self):
        features, labels = generate(0)
        assert len(features) == 0
        assert len(labels) == 0
        assert features.shape == (0, 8)

    @pytest.mark.parametrize("count", [-1, -100])
    def test_negative_count(self, count):
        with pytest.raises(InvalidArgumentError):
            generate(count)

    def test_non_integer_count(self):
        with pytest.raises(InvalidArgumentError):
            generate(12.5)

    def test_shapes_are_aligned(self):
        features, labels = generate(300, random_state=1)
        assert features.shape == (300, 8)
        assert labels.shape == (300,)

    def test_every_class_present(self):
        _, labels = generate(1200, random_state=0)
        counts = np.bincount(labels, minlength=3)
        assert (counts > 0).all()
        # Roughly comparable shares, no class collapse
        assert (counts / counts.sum() > 0.15).all()

    def test_feature_domains(self):
        features, labels = generate(2000, random_state=2)
        category, dosage, age, weight, sex, bp, freq, lifestyle = features.T

        assert set(np.unique(category)) <= set(range(6))
        assert set(np.unique(dosage)) <= {0, 1, 2}
        assert set(np.unique(sex)) <= {0, 1, 2}
        assert set(np.unique(bp)) <= {0, 1, 2}
        assert age.min() >= 0.05 and age.max() <= 1.0
        assert weight.min() >= 0.2 and weight.max() <= 1.0
        assert freq.min() >= 1 and freq.max() <= 10
        assert lifestyle.min() >= 0 and lifestyle.max() <= 5
        assert set(np.unique(labels)) <= {0, 1, 2}

    def test_seeded_generation_is_reproducible(self):
        a = generate(100, random_state=9)
        b = generate(100, random_state=9)
        assert np.array_equal(a.features, b.features)
        assert np.array_equal(a.labels, b.labels)

    def test_different_seeds_differ(self):
        a = generate(100, random_state=1)
        b = generate(100, random_state=2)
        assert not np.array_equal(a.features, b.features)

    def test_noise_free_labels_follow_score(self):
        generator = SyntheticCorpusGenerator(noise_scale=0.0, random_state=3)
        features, labels = generator.generate(500)

        score = risk_score(
            features[:, 0],
            features[:, 1],
            np.round(features[:, 2] * 100),
            np.round(features[:, 3] * 150),
            features[:, 5],
            features[:, 6],
            features[:, 7],
        )
        assert np.array_equal(labels, np.digitize(score, (5.0, 7.0)))

    def test_to_frame(self):
        corpus = generate(20, random_state=4)
        frame = corpus.to_frame()
        assert list(frame.columns) == FEATURE_NAMES + ["label"]
        assert len(frame) == 20
        assert frame["label"].tolist() == corpus.labels.tolist()

    def test_invalid_generator_settings(self):
        with pytest.raises(InvalidArgumentError):
            SyntheticCorpusGenerator(noise_scale=-1.0)
        with pytest.raises(InvalidArgumentError):
            SyntheticCorpusGenerator(cutpoints=(7.0, 5.0))


class TestRiskScore:
    """Tests for the deterministic risk rule."""

    def test_high_risk_profile_above_upper_cutpoint(self):
        # Beta-Blocker, High dose, age 90, 70 kg, High BP, 3/day, no lifestyle factors
        assert risk_score(5, 2, 90, 70, 2, 3, 0) > 7.0

    def test_low_risk_profile_below_lower_cutpoint(self):
        # Painkiller, Low dose, age 20, 70 kg, Normal BP, 1/day
        assert risk_score(1, 0, 20, 70, 0, 1, 0) < 5.0

    def test_beta_blocker_amplifies_blood_pressure(self):
        statin_bp = float(risk_score(2, 0, 40, 70, 2, 1, 0) - risk_score(2, 0, 40, 70, 0, 1, 0))
        beta_bp = float(risk_score(5, 0, 40, 70, 2, 1, 0) - risk_score(5, 0, 40, 70, 0, 1, 0))
        assert statin_bp == pytest.approx(2.0)
        assert beta_bp == pytest.approx(3.5)

    def test_category_baselines(self):
        antibiotic = risk_score(0, 0, 40, 70, 0, 1, 0)
        painkiller = risk_score(1, 0, 40, 70, 0, 1, 0)
        antihistamine = risk_score(3, 0, 40, 70, 0, 1, 0)
        antidepressant = risk_score(4, 0, 40, 70, 0, 1, 0)
        assert antibiotic > painkiller
        assert antidepressant > antihistamine

    def test_age_and_weight_terms(self):
        assert risk_score(1, 0, 80, 70, 0, 1, 0) > risk_score(1, 0, 60, 70, 0, 1, 0)
        assert risk_score(1, 0, 40, 40, 0, 1, 0) > risk_score(1, 0, 40, 70, 0, 1, 0)
        assert risk_score(1, 0, 60, 70, 0, 1, 0) == risk_score(1, 0, 30, 70, 0, 1, 0)
