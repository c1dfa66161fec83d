"""
Bracket geometry for individual angle pieces.

Standard pieces (catalog lengths) carry brackets at the run's bracket spacing
with the first bracket half a spacing (less half a gap) from the end, so that
adjacent standard pieces keep a continuous bracket rhythm across the gap.
Non-standard pieces are laid out symmetrically, searching bracket counts
until both edge distances fall inside the allowed window.
"""

import math
from typing import List, Optional, Tuple

import numpy as np

from angle_hardware import RunLayoutConfig, round_half_up
from run_contracts import (
    AnglePiece,
    EdgeDistanceConstraints,
    InvalidGeometryError,
    LayoutDiagnostic,
)

# Float slack for edge window comparisons (mm)
EDGE_TOLERANCE_MM = 1e-9


def bracket_positions(start_offset: float, spacing: float, count: int) -> List[float]:
    """Bracket offsets from the left end of a piece."""
    return (start_offset + spacing * np.arange(count)).tolist()


def calculate_standard_piece(
    length: float,
    bracket_centres: float,
    config: Optional[RunLayoutConfig] = None,
) -> AnglePiece:
    """Lay out brackets on a catalog-length piece.

    Args:
        length: Angle length (mm), expected to satisfy L = k * C - gap.
        bracket_centres: Bracket spacing (mm).
        config: Hardware constants (gap).

    Returns:
        AnglePiece with k = (L + gap) / C brackets.
    """
    if config is None:
        config = RunLayoutConfig()

    gap = config.gap_mm
    bracket_count = int(round_half_up((length + gap) / bracket_centres))
    start_offset = bracket_centres / 2 - gap / 2

    return AnglePiece(
        length=length,
        bracket_count=bracket_count,
        spacing=bracket_centres,
        start_offset=start_offset,
        positions=bracket_positions(start_offset, bracket_centres, bracket_count),
        is_standard=True,
    )


def calculate_non_standard_piece(
    length: float,
    bracket_centres: float,
    constraints: EdgeDistanceConstraints,
    config: Optional[RunLayoutConfig] = None,
) -> AnglePiece:
    """Lay out brackets symmetrically on an ad hoc length.

    For each bracket count, starting from the fewest that could span the
    piece, two spacings are tried: the full bracket spacing (keeps the run's
    rhythm) and the spacing rounded up to the slot pitch. The first whose
    symmetric overhang lies in [e_min, e_max] wins.

    Args:
        length: Angle length (mm).
        bracket_centres: Maximum bracket spacing (mm).
        constraints: Edge distance window.
        config: Hardware constants (slot pitch, bracket ceiling).

    Returns:
        AnglePiece with symmetric edges.

    Raises:
        InvalidGeometryError: No bracket count up to the ceiling fits.
    """
    if config is None:
        config = RunLayoutConfig()

    e_min, e_max = constraints.e_min, constraints.e_max
    slot_pitch = config.slot_pitch_mm

    bracket_count = max(
        config.min_brackets_per_piece,
        math.ceil(length / bracket_centres),
    )

    while bracket_count <= config.max_brackets_per_piece:
        for spacing in _spacing_ladder(length, bracket_count, bracket_centres, slot_pitch):
            overhang = (length - (bracket_count - 1) * spacing) / 2
            if _in_window(overhang, e_min, e_max):
                return AnglePiece(
                    length=length,
                    bracket_count=bracket_count,
                    spacing=spacing,
                    start_offset=overhang,
                    positions=bracket_positions(overhang, spacing, bracket_count),
                    is_standard=False,
                )
        bracket_count += 1

    raise InvalidGeometryError(
        f"Could not find valid bracket configuration for {length}mm piece "
        f"(spacing <= {bracket_centres}mm, edges {e_min}-{e_max}mm)",
        length=length,
        max_spacing=bracket_centres,
    )


def _spacing_ladder(
    length: float,
    bracket_count: int,
    bracket_centres: float,
    slot_pitch: float,
) -> List[float]:
    """Spacings to try for a bracket count, preferred first."""
    ladder = [bracket_centres]
    slotted = math.ceil(length / bracket_count / slot_pitch) * slot_pitch
    if slotted <= bracket_centres:
        ladder.append(slotted)
    return ladder


def _in_window(value: float, low: float, high: float) -> bool:
    return low - EDGE_TOLERANCE_MM <= value <= high + EDGE_TOLERANCE_MM


def edge_distances(piece: AnglePiece) -> Tuple[float, float]:
    """(start edge, end edge) of a piece in mm."""
    return piece.positions[0], piece.length - piece.positions[-1]


def validate_edge_distances(
    piece: AnglePiece,
    constraints: EdgeDistanceConstraints,
) -> bool:
    """True when both end brackets sit inside the edge distance window."""
    start, end = edge_distances(piece)
    return (
        _in_window(start, constraints.e_min, constraints.e_max)
        and _in_window(end, constraints.e_min, constraints.e_max)
    )


def check_piece_edges(
    piece: AnglePiece,
    constraints: EdgeDistanceConstraints,
    piece_index: Optional[int] = None,
) -> List[LayoutDiagnostic]:
    """Report each edge of a piece that falls outside the window.

    Returns:
        List of diagnostics (empty = both edges pass).
    """
    diagnostics: List[LayoutDiagnostic] = []
    label = f"Piece {piece_index + 1}" if piece_index is not None else "Piece"
    start, end = edge_distances(piece)

    for side, value in (("start", start), ("end", end)):
        if value < constraints.e_min - EDGE_TOLERANCE_MM:
            diagnostics.append(LayoutDiagnostic(
                code=f"edge_distance_{side}",
                severity="error",
                message=(
                    f"{label} ({piece.length}mm) {side} edge {value:.1f}mm "
                    f"< minimum {constraints.e_min:.1f}mm"
                ),
                piece_index=piece_index,
                value=value,
                limit=constraints.e_min,
            ))
        elif value > constraints.e_max + EDGE_TOLERANCE_MM:
            diagnostics.append(LayoutDiagnostic(
                code=f"edge_distance_{side}",
                severity="error",
                message=(
                    f"{label} ({piece.length}mm) {side} edge {value:.1f}mm "
                    f"> maximum {constraints.e_max:.1f}mm"
                ),
                piece_index=piece_index,
                value=value,
                limit=constraints.e_max,
            ))

    return diagnostics
