"""Tests for scoring module."""
import logging
from dataclasses import replace

import pytest

from run_contracts import EdgeDistanceConstraints
from run_segmentation import create_segmentation
from scoring import ScoringConfig, score_breakdown, score_segmentation


@pytest.fixture
def seg_2321(constraints_500, catalog_500):
    return create_segmentation([1490, 821], 500, constraints_500, catalog_500)


class TestScoreSegmentation:
    """Bracket-dominated ranking."""

    def test_formula(self, seg_2321):
        assert score_segmentation(seg_2321) == pytest.approx(5000 + 1000 + 2)

    def test_breakdown_terms(self, seg_2321):
        score = score_breakdown(seg_2321)
        assert score.bracket_term == pytest.approx(5000)
        assert score.spacing_term == pytest.approx(1000)
        assert score.variety_term == pytest.approx(2)
        assert score.total == pytest.approx(6002)

    def test_more_brackets_scores_worse(self, seg_2321):
        heavier = replace(seg_2321, total_brackets=seg_2321.total_brackets + 1)
        assert score_segmentation(heavier) > score_segmentation(seg_2321)

    def test_fewer_brackets_beat_narrower_spacing(self, seg_2321):
        fewer = replace(seg_2321, total_brackets=4, average_spacing=450, unique_piece_lengths=9)
        assert score_segmentation(fewer) < score_segmentation(seg_2321)

    def test_custom_weights(self, seg_2321):
        config = ScoringConfig(bracket_weight=1.0, spacing_weight=0.0, variety_weight=0.0)
        assert score_segmentation(seg_2321, config) == pytest.approx(5)

    def test_spacing_above_reference_scores_without_logging(self, caplog):
        """Wide spacing only makes the spacing term negative; the per-run
        warning belongs to the optimizer, not to each scored candidate."""
        window = EdgeDistanceConstraints(e_min=35.0, e_max=350.0)
        with caplog.at_level(logging.WARNING, logger="scoring"):
            seg = create_segmentation([1390], 700, window, [1390])
        assert seg.average_spacing == pytest.approx(700)
        assert seg.score == pytest.approx(2000 - 1000 + 1)
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
