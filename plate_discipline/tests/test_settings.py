"""
Tests for the engine tuning settings.

Run with: python -m pytest plate_discipline/tests/test_settings.py -v
"""

import dataclasses

import pytest

from plate_discipline.projections.settings import DEFAULT_SETTINGS, BlendWeights, EngineSettings


class TestEngineSettings:
    """Test that settings are immutable values."""

    def test_hashable(self):
        assert hash(EngineSettings()) == hash(DEFAULT_SETTINGS)
        assert EngineSettings() == DEFAULT_SETTINGS

    def test_matchup_weights_cannot_be_mutated(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SETTINGS.weights.matchup_large = 0.9

    @pytest.mark.parametrize('sample_size,expected', [
        ('large', 0.3),
        ('medium', 0.2),
        ('small', 0.1),
        ('none', 0.0),
    ])
    def test_matchup_weight_by_sample(self, sample_size, expected):
        assert DEFAULT_SETTINGS.weights.matchup_weight(sample_size) == expected

    def test_replace_builds_independent_copy(self):
        weights = dataclasses.replace(DEFAULT_SETTINGS.weights, matchup_large=0.5)

        assert weights.matchup_weight('large') == 0.5
        assert DEFAULT_SETTINGS.weights.matchup_weight('large') == 0.3
        assert isinstance(weights, BlendWeights)
