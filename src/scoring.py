"""
Run segmentation scoring.

Ranks cutting plans by hardware cost: bracket count dominates, then how
close the average spacing sits to the reference spacing, then how many
distinct lengths have to be cut. Lower is better.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from run_contracts import RunSegmentation

logger = logging.getLogger(__name__)


@dataclass
class ScoringConfig:
    """Weights for segmentation scoring."""
    bracket_weight: float = 1000.0
    spacing_weight: float = 10.0
    variety_weight: float = 1.0
    # Reference spacing the spacing term is measured against (mm)
    spacing_reference_mm: float = 600.0


@dataclass
class SegmentationScore:
    """Score terms for a segmentation."""
    bracket_term: float
    spacing_term: float     # negative when average spacing exceeds the reference
    variety_term: float
    total: float            # lower is better


def score_breakdown(
    segmentation: RunSegmentation,
    config: Optional[ScoringConfig] = None,
) -> SegmentationScore:
    """Score a segmentation and keep the individual terms.

    Args:
        segmentation: The cutting plan.
        config: Score weights.

    Returns:
        SegmentationScore with per-term values and their sum.
    """
    if config is None:
        config = ScoringConfig()

    bracket_term = segmentation.total_brackets * config.bracket_weight
    spacing_term = (
        (config.spacing_reference_mm - segmentation.average_spacing)
        * config.spacing_weight
    )
    variety_term = segmentation.unique_piece_lengths * config.variety_weight

    return SegmentationScore(
        bracket_term=bracket_term,
        spacing_term=spacing_term,
        variety_term=variety_term,
        total=bracket_term + spacing_term + variety_term,
    )


def score_segmentation(
    segmentation: RunSegmentation,
    config: Optional[ScoringConfig] = None,
) -> float:
    """Total score of a segmentation (lower is better)."""
    score = score_breakdown(segmentation, config)
    logger.debug(
        "Score %.1f: brackets=%d avg_spacing=%.1fmm unique=%d",
        score.total, segmentation.total_brackets,
        segmentation.average_spacing, segmentation.unique_piece_lengths,
    )
    return score.total
