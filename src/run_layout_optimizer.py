"""
Multi-piece angle run layout optimizer.

Splits a straight run into angle pieces no longer than the stock limit,
places brackets on each, and returns every exact-length cutting plan
ranked by score (fewest brackets first).
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from angle_hardware import RunLayoutConfig, get_standard_lengths
from piece_geometry import check_piece_edges
from run_contracts import (
    InvalidGeometryError,
    LayoutDiagnostic,
    MaterialSummary,
    NoValidSegmentationError,
    PieceLengthBreakdown,
    RunLayoutError,
    RunOptimizationRequest,
    RunOptimizationResult,
    RunSegmentation,
)
from run_segmentation import create_segmentation
from scoring import ScoringConfig
from segment_candidates import generate_candidates

logger = logging.getLogger(__name__)


def optimize_run_layout(
    request: RunOptimizationRequest,
    config: Optional[RunLayoutConfig] = None,
    scoring_config: Optional[ScoringConfig] = None,
) -> RunOptimizationResult:
    """Find the best cutting plan for a run.

    Args:
        request: Run length, bracket spacing and hardware overrides.
        config: Search bounds; hardware fields are overridden by the request.
        scoring_config: Score weights.

    Returns:
        RunOptimizationResult with the optimal plan, all plans in ascending
        score order, and the material summary of the optimal plan.

    Raises:
        ValueError: Non-positive run length or bracket spacing.
        NoValidSegmentationError: No candidate plan was generated.
        InvalidGeometryError: Every candidate had a piece with no valid
            bracket layout (the last such error is raised).
    """
    _validate_request(request)

    if config is None:
        config = RunLayoutConfig()
    if scoring_config is None:
        scoring_config = ScoringConfig()
    config = replace(
        config,
        gap_mm=request.gap_between_pieces_mm,
        max_angle_length_mm=request.max_angle_length_mm,
        length_increment_mm=request.length_increment_mm,
        min_edge_distance_mm=request.min_edge_distance_mm,
    )

    total_length = request.total_run_length_mm
    spacing = request.bracket_centres_mm
    constraints = request.edge_constraints()
    standard_lengths = get_standard_lengths(spacing, config.max_angle_length_mm, config)

    logger.info(
        "Optimizing %.1fmm run at %.1fmm centres (edges %.1f-%.1fmm, catalog %s)",
        total_length, spacing, constraints.e_min, constraints.e_max, standard_lengths,
    )
    if spacing > scoring_config.spacing_reference_mm:
        logger.warning(
            "Bracket centres %.1fmm exceed scoring reference %.1fmm; spacing term is negative",
            spacing, scoring_config.spacing_reference_mm,
        )

    candidates = generate_candidates(total_length, spacing, standard_lengths, config)
    if not candidates:
        raise NoValidSegmentationError(
            f"No valid segmentation found for {total_length}mm run "
            f"at {spacing}mm bracket centres",
            total_run_length=total_length,
        )

    options: List[RunSegmentation] = []
    last_error: Optional[InvalidGeometryError] = None
    for cand in candidates:
        try:
            seg = create_segmentation(
                cand.piece_lengths, spacing, constraints, standard_lengths,
                config, source=cand.source, scoring_config=scoring_config,
            )
        except InvalidGeometryError as exc:
            logger.debug("Skipping %s candidate %s: %s", cand.source, cand.piece_lengths, exc)
            last_error = exc
            continue
        options.append(seg)

    if not options:
        raise last_error

    # Stable: generation order breaks ties
    options.sort(key=lambda s: s.score)
    optimal = options[0]

    diagnostics: List[LayoutDiagnostic] = []
    for index, piece in enumerate(optimal.pieces):
        diagnostics.extend(check_piece_edges(piece, constraints, index))

    logger.info(
        "Selected %s plan %s: %d brackets, score %.1f (%d of %d candidates assembled)",
        optimal.source, optimal.piece_lengths, optimal.total_brackets,
        optimal.score, len(options), len(candidates),
    )

    return RunOptimizationResult(
        optimal=optimal,
        all_options=options,
        material_summary=build_material_summary(optimal),
        constraints=constraints,
        standard_lengths=standard_lengths,
        diagnostics=diagnostics,
    )


def build_material_summary(segmentation: RunSegmentation) -> MaterialSummary:
    """Group pieces by length in order of first appearance.

    The angle total counts cut pieces only, never the gaps between them.
    """
    counts = {}
    standard = {}
    for piece in segmentation.pieces:
        counts[piece.length] = counts.get(piece.length, 0) + 1
        standard.setdefault(piece.length, piece.is_standard)

    breakdown = [
        PieceLengthBreakdown(length=length, count=count, is_standard=standard[length])
        for length, count in counts.items()
    ]
    return MaterialSummary(
        total_angle_length=math.fsum(p.length for p in segmentation.pieces),
        total_pieces=segmentation.piece_count,
        total_brackets=segmentation.total_brackets,
        piece_length_breakdown=breakdown,
    )


def _validate_request(request: RunOptimizationRequest) -> None:
    if request.total_run_length_mm <= 0:
        raise ValueError(f"Run length must be positive, got {request.total_run_length_mm}")
    if request.bracket_centres_mm <= 0:
        raise ValueError(f"Bracket centres must be positive, got {request.bracket_centres_mm}")


@dataclass
class SpacingComparison:
    """Optimizer outcome for one candidate bracket spacing."""
    spacing: float
    result: Optional[RunOptimizationResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def compare_bracket_spacings(
    total_run_length: float,
    spacings: Sequence[float],
    config: Optional[RunLayoutConfig] = None,
    **request_kwargs,
) -> List[SpacingComparison]:
    """Optimize the same run at several bracket spacings.

    Extra keyword arguments are passed to RunOptimizationRequest. A spacing
    that cannot be laid out is reported with its error instead of aborting
    the comparison.
    """
    rows: List[SpacingComparison] = []
    for spacing in spacings:
        request = RunOptimizationRequest(
            total_run_length_mm=total_run_length,
            bracket_centres_mm=spacing,
            **request_kwargs,
        )
        try:
            result = optimize_run_layout(request, config)
        except RunLayoutError as exc:
            logger.info("Spacing %.1fmm: %s", spacing, exc)
            rows.append(SpacingComparison(spacing=spacing, error=str(exc)))
            continue
        rows.append(SpacingComparison(spacing=spacing, result=result))
    return rows
