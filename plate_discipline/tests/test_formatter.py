"""
Tests for projection formatting and the DFS projection entry points.

Run with: python -m pytest plate_discipline/tests/test_formatter.py -v
"""

import pytest

from conftest import BATTER_ID, ENHANCED_PITCHER, PITCHER_ID, FakeProvider
from plate_discipline.projections.advanced_metrics import MissingStatsError, compute_advanced_metrics
from plate_discipline.projections.formatter import (
    ControlProjection,
    format_advanced_projection,
    format_control_projection,
    hbp_confidence,
    matchup_insights,
)
from plate_discipline.projections.results import ProjectionSource, WalksProjection
from plate_discipline.services.stats_provider import PlayerNotFoundError


def walks_projection(**overrides):
    values = {
        'expected_walks': 0.5,
        'expected_hbp': 0.1,
        'confidence_score': 80.0,
        'source': ProjectionSource.TRADITIONAL,
    }
    values.update(overrides)
    return WalksProjection(**values)


class TestControlProjection:
    """Test range and points formatting."""

    def test_ranges(self):
        projection = format_control_projection(walks_projection())

        assert projection.walks.expected == 0.5
        assert projection.walks.high == pytest.approx(0.5 * 1.3)
        assert projection.walks.low == pytest.approx(0.5 * 0.7)
        assert projection.walks.range == pytest.approx(projection.walks.high - projection.walks.low)
        assert projection.hbp.high == pytest.approx(0.1 * 1.5)
        assert projection.hbp.low == pytest.approx(0.1 * 0.5)
        assert projection.hbp.range == pytest.approx(0.1)

    def test_points(self):
        projection = format_control_projection(walks_projection())

        assert projection.walks.points == pytest.approx(1.0)
        assert projection.hbp.points == pytest.approx(0.2)
        assert projection.overall.total_points == pytest.approx(1.2)

    def test_overall(self):
        projection = format_control_projection(walks_projection())

        assert projection.overall.control_rating == 5.0
        assert projection.overall.confidence_score == 80.0
        assert projection.walks.confidence == 80.0

    @pytest.mark.parametrize('source,confidence,expected', [
        (ProjectionSource.TRADITIONAL, 80.0, 60.0),
        (ProjectionSource.TRADITIONAL, 50.0, 40.0),
        (ProjectionSource.ADVANCED, 80.0, 60.0),
        (ProjectionSource.ADVANCED, 100.0, 80.0),
    ])
    def test_hbp_confidence(self, source, confidence, expected):
        projection = walks_projection(source=source, confidence_score=confidence)

        assert hbp_confidence(confidence) == pytest.approx(expected)
        assert format_control_projection(projection).hbp.confidence == pytest.approx(expected)

    def test_default_projection_is_literal(self):
        projection = format_control_projection(WalksProjection.default())

        assert projection == ControlProjection.default()

    def test_literal_default_values(self):
        projection = ControlProjection.default()

        assert (projection.walks.expected, projection.walks.high,
                projection.walks.low, projection.walks.range) == (0.4, 0.6, 0.2, 0.4)
        assert (projection.hbp.expected, projection.hbp.high,
                projection.hbp.low, projection.hbp.range) == (0.04, 0.06, 0.02, 0.04)
        assert projection.overall.control_rating == 5.0
        assert projection.overall.confidence_score == 50


class TestPlateDisciplineProjection:
    """Test the never-failing projection entry point."""

    def test_all_failing_returns_literal_default(self, failing_provider, make_engine):
        projection = make_engine(failing_provider).calculate_plate_discipline_projection(BATTER_ID, PITCHER_ID)

        assert projection.walks.expected == 0.4
        assert projection.hbp.expected == 0.04
        assert projection.overall.confidence_score == 50
        assert projection == ControlProjection.default()

    def test_formatting_error_returns_default(self, traditional_provider, make_engine, monkeypatch):
        engine = make_engine(traditional_provider)

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(engine, 'calculate_expected_walks', explode)

        assert engine.calculate_plate_discipline_projection(BATTER_ID, PITCHER_ID) == ControlProjection.default()

    def test_traditional(self, traditional_provider, make_engine):
        engine = make_engine(traditional_provider)
        walks = engine.calculate_expected_walks(BATTER_ID, PITCHER_ID)
        projection = engine.calculate_plate_discipline_projection(BATTER_ID, PITCHER_ID)

        assert projection.walks.expected == pytest.approx(walks.expected_walks)
        assert projection.walks.high == pytest.approx(walks.expected_walks * 1.3)
        assert projection.hbp.confidence == pytest.approx(75)
        # Overall rating is the league-average constant, not the pitcher's rating
        assert projection.overall.control_rating == 5.0

    def test_advanced(self, advanced_provider, make_engine):
        projection = make_engine(advanced_provider).calculate_plate_discipline_projection(BATTER_ID, PITCHER_ID)

        assert projection.overall.confidence_score == pytest.approx(100)
        # Advanced-sourced walks still use the floor/penalty rule here
        assert projection.hbp.confidence == pytest.approx(80)
        assert projection.overall.control_rating == 5.0

    def test_to_dict(self, failing_provider, make_engine):
        data = make_engine(failing_provider).calculate_plate_discipline_projection(BATTER_ID, PITCHER_ID).to_dict()

        assert data['walks']['expected'] == 0.4
        assert data['overall']['confidence_score'] == 50


class TestAdvancedProjection:
    """Test the advanced DFS projection and insights."""

    def test_points_and_confidence(self, advanced_provider, make_engine):
        projection = make_engine(advanced_provider).calculate_advanced_plate_discipline_projection(
            BATTER_ID, PITCHER_ID
        )

        walks = (80 / 580 + 40 / 720) / 2 * 4.2
        hbp = 6 / 720 * 4.2
        assert projection.walks.expected == pytest.approx(walks)
        assert projection.walks.points == pytest.approx(walks * 2)
        assert projection.hbp.points == pytest.approx(hbp * 2)
        assert projection.hbp.confidence == pytest.approx(70)
        assert projection.total.expected == pytest.approx(walks + hbp)
        assert projection.total.points == pytest.approx((walks + hbp) * 2)
        assert projection.total.confidence == pytest.approx(100)

    def test_neutral_insights(self, advanced_provider, make_engine):
        projection = make_engine(advanced_provider).calculate_advanced_plate_discipline_projection(
            BATTER_ID, PITCHER_ID
        )

        assert projection.insights == ["Strong sample size with quality plate discipline metrics"]

    def test_batter_advantage_insights(self):
        batter = {
            'currentSeason': {'atBats': 100, 'walks': 15, 'strikeouts': 20},
            'disciplineMetrics': {'chaseRate': 0.24},
        }
        pitcher = {
            'currentSeason': {'inningsPitched': 30, 'walks': 15, 'strikeouts': 25},
            'controlMetrics': {'zoneRate': 0.44},
        }
        metrics = compute_advanced_metrics(batter, pitcher)

        assert matchup_insights(metrics) == [
            "Batter has plate discipline advantage in this matchup",
            "Patient batter vs. wild pitcher creates walk potential",
            "Limited sample size - prediction has higher variance",
        ]

    def test_pitcher_advantage_insights(self):
        batter = {
            'currentSeason': {'atBats': 400, 'walks': 20, 'strikeouts': 120},
            'disciplineMetrics': {'chaseRate': 0.36},
        }
        pitcher = dict(ENHANCED_PITCHER, controlMetrics={'zoneRate': 0.53})
        metrics = compute_advanced_metrics(batter, pitcher)
        projection = format_advanced_projection(metrics)

        assert projection.insights[:2] == [
            "Pitcher has control advantage in this matchup",
            "Free-swinging batter vs. control pitcher reduces walk potential",
        ]

    def test_propagates_missing_stats(self, make_engine):
        provider = FakeProvider(
            enhanced_batters={BATTER_ID: {'currentSeason': None}},
            enhanced_pitchers={PITCHER_ID: ENHANCED_PITCHER},
        )

        with pytest.raises(MissingStatsError):
            make_engine(provider).calculate_advanced_plate_discipline_projection(BATTER_ID, PITCHER_ID)

    def test_propagates_fetch_failure(self, traditional_provider, make_engine):
        with pytest.raises(PlayerNotFoundError):
            make_engine(traditional_provider).calculate_advanced_plate_discipline_projection(BATTER_ID, PITCHER_ID)
