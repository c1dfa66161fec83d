"""
Assemble a list of piece lengths into a scored RunSegmentation.

Catalog lengths get standard bracket layouts; every other length gets a
symmetric non-standard layout. In a multi-piece run, non-standard pieces
then have their gap-side edges pulled to the inner edge so the bracket
rhythm carries across each gap.
"""

import logging
import math
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

import numpy as np

from angle_hardware import RunLayoutConfig, round_half_up
from piece_geometry import (
    bracket_positions,
    calculate_non_standard_piece,
    calculate_standard_piece,
    validate_edge_distances,
)
from run_contracts import (
    AnglePiece,
    EdgeDistanceConstraints,
    LayoutDiagnostic,
    RunSegmentation,
)
from scoring import ScoringConfig, score_segmentation

logger = logging.getLogger(__name__)


def create_segmentation(
    piece_lengths: Sequence[float],
    bracket_centres: float,
    constraints: EdgeDistanceConstraints,
    standard_lengths: Sequence[float],
    config: Optional[RunLayoutConfig] = None,
    source: str = "manual",
    scoring_config: Optional[ScoringConfig] = None,
) -> RunSegmentation:
    """Lay out brackets on every piece and compute run aggregates.

    Args:
        piece_lengths: Ordered angle lengths along the run (mm).
        bracket_centres: Bracket spacing (mm).
        constraints: Edge distance window.
        standard_lengths: Catalog lengths for this spacing.
        config: Hardware constants.
        source: Tag recorded on the result.
        scoring_config: Score weights.

    Returns:
        Scored RunSegmentation.

    Raises:
        InvalidGeometryError: A non-standard piece has no valid layout.
    """
    if config is None:
        config = RunLayoutConfig()

    catalog = set(standard_lengths)
    piece_count = len(piece_lengths)
    pieces: List[AnglePiece] = []
    diagnostics: List[LayoutDiagnostic] = []

    for index, length in enumerate(piece_lengths):
        if _is_standard_length(length, bracket_centres, catalog, config):
            pieces.append(calculate_standard_piece(length, bracket_centres, config))
            continue

        piece = calculate_non_standard_piece(length, bracket_centres, constraints, config)
        if piece_count > 1:
            piece, note = _rebalance_piece(
                piece, index, piece_count, bracket_centres, constraints, config,
            )
            if note is not None:
                diagnostics.append(note)
        pieces.append(piece)

    gap_count = config.gap_count(piece_count)
    total_gap = gap_count * config.gap_mm
    total_brackets = sum(p.bracket_count for p in pieces)

    segmentation = RunSegmentation(
        pieces=pieces,
        total_length=math.fsum(piece_lengths) + total_gap,
        total_brackets=total_brackets,
        piece_count=piece_count,
        gap_count=gap_count,
        total_gap_distance=total_gap,
        average_spacing=_average_spacing(pieces),
        unique_piece_lengths=len(set(piece_lengths)),
        source=source,
        diagnostics=diagnostics,
    )
    return replace(segmentation, score=score_segmentation(segmentation, scoring_config))


def _is_standard_length(
    length: float,
    bracket_centres: float,
    catalog: set,
    config: RunLayoutConfig,
) -> bool:
    # Catalog entries too short for two brackets at this spacing are laid out ad hoc
    if length not in catalog:
        return False
    return round_half_up((length + config.gap_mm) / bracket_centres) >= config.min_brackets_per_piece


def _average_spacing(pieces: Sequence[AnglePiece]) -> float:
    """Spacing averaged over bracket intervals (single-bracket pieces count zero)."""
    weights = [p.bracket_count - 1 for p in pieces]
    if sum(weights) <= 0:
        return 0.0
    return float(np.average([p.spacing for p in pieces], weights=weights))


def _rebalance_piece(
    piece: AnglePiece,
    index: int,
    piece_count: int,
    bracket_centres: float,
    constraints: EdgeDistanceConstraints,
    config: RunLayoutConfig,
) -> Tuple[AnglePiece, Optional[LayoutDiagnostic]]:
    """Align gap-side edges of a non-standard piece to the inner edge.

    The first piece keeps its run-end edge free and puts the inner edge at
    its right end; the last piece mirrors that; middle pieces use the inner
    edge on both sides. The run-end edge is clamped to the window, and the
    symmetric layout is kept when the clamped layout no longer
    matches the piece length within tolerance.
    """
    inner = config.inner_edge(bracket_centres)
    span = (piece.bracket_count - 1) * bracket_centres
    is_first = index == 0
    is_last = index == piece_count - 1

    if is_first:
        start = _clamp(piece.length - span - inner, constraints)
        end = inner
    elif is_last:
        start = inner
        end = _clamp(piece.length - span - inner, constraints)
    else:
        start = inner
        end = inner

    realized = start + span + end
    if abs(realized - piece.length) > config.rebalance_tolerance_mm:
        return piece, _rebalance_failed(piece, index, realized)

    candidate = replace(
        piece,
        spacing=bracket_centres,
        start_offset=start,
        positions=bracket_positions(start, bracket_centres, piece.bracket_count),
        rebalanced=True,
    )
    if not validate_edge_distances(candidate, constraints):
        return piece, _rebalance_failed(piece, index, realized)
    return candidate, None


def _clamp(value: float, constraints: EdgeDistanceConstraints) -> float:
    return min(max(value, constraints.e_min), constraints.e_max)


def _rebalance_failed(piece: AnglePiece, index: int, realized: float) -> LayoutDiagnostic:
    logger.debug(
        "Piece %d (%.1fmm): inner-edge layout spans %.1fmm, keeping symmetric layout",
        index + 1, piece.length, realized,
    )
    return LayoutDiagnostic(
        code="edge_rebalance_failed",
        severity="warning",
        message=(
            f"Piece {index + 1} ({piece.length}mm) kept symmetric edges; "
            f"inner-edge layout would span {realized:.1f}mm"
        ),
        piece_index=index,
        value=realized,
        limit=piece.length,
    )
