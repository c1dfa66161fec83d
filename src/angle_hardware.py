"""
Angle hardware catalog for bracket-supported runs.

Holds the manufacturing constants of the angle/bracket family (inter-piece
gap, bracket slot pitch, cut increment, maximum stock length) together with
the search bounds used by the run layout optimizer, and the table of
pre-approved "standard" angle lengths per bracket spacing.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

# Maximum manufacturable angle length (sheet manufacturing limit, mm)
MAX_ANGLE_LENGTH_MM = 1490.0
# Clearance between adjacent angle pieces (mm)
GAP_BETWEEN_PIECES_MM = 10.0
# Angle lengths are cut on this grid (mm)
LENGTH_INCREMENT_MM = 5.0
# Minimum distance from an angle end to its nearest bracket (mm)
MIN_EDGE_DISTANCE_MM = 35.0
# Bracket holes can only be moved in steps of this size (mm)
SLOT_PITCH_MM = 50.0
# Pieces at or below this length are not produced (mm)
MIN_PIECE_LENGTH_MM = 150.0
# Every piece carries at least this many brackets
MIN_BRACKETS_PER_PIECE = 2

# Standard angle lengths per bracket spacing, longest first.
# Follows L = k * C - gap (k brackets at spacing C) but curated by hand.
STANDARD_LENGTH_TABLE: Dict[int, Tuple[int, ...]] = {
    500: (1490, 990),
    450: (1340, 890),
    400: (1190, 790),
    350: (1390, 1040, 690),
    300: (1490, 1190, 890, 590),
    250: (1490, 1240, 990, 740, 490),
    200: (1390, 1190, 990, 790, 590, 390),
}


def round_half_up(value: float, increment: float = 1.0) -> float:
    """Round to the nearest multiple of ``increment``, halves rounding up."""
    return math.floor(value / increment + 0.5) * increment


@dataclass(frozen=True)
class RunLayoutConfig:
    """Hardware dimensions and search bounds for run layout optimization."""

    gap_mm: float = GAP_BETWEEN_PIECES_MM
    slot_pitch_mm: float = SLOT_PITCH_MM
    length_increment_mm: float = LENGTH_INCREMENT_MM
    max_angle_length_mm: float = MAX_ANGLE_LENGTH_MM
    min_edge_distance_mm: float = MIN_EDGE_DISTANCE_MM
    min_piece_length_mm: float = MIN_PIECE_LENGTH_MM
    min_brackets_per_piece: int = MIN_BRACKETS_PER_PIECE
    # False: gaps only between pieces. True: also a gap at each run end.
    end_gaps: bool = False

    # Combination search
    max_pieces: int = 50
    max_combination_candidates: int = 5000

    # Non-standard piece bracket search
    max_brackets_per_piece: int = 100

    # Custom split search
    custom_extra_piece_counts: int = 3
    custom_max_piece_count: int = 10
    custom_bracket_window: int = 5
    custom_min_spacing_ratio: float = 0.4  # densest spacing tried, as fraction of Bcc
    outer_edge_max_ratio: float = 0.6
    custom_max_residue_mm: float = 100.0
    even_split_tolerance_mm: float = 5.0

    # Interior edge alignment
    rebalance_tolerance_mm: float = 5.0

    # Long-run fill
    max_fill_pieces: int = 500

    def gap_count(self, piece_count: int) -> int:
        """Number of gaps in a run of ``piece_count`` pieces."""
        if piece_count <= 0:
            return 0
        return piece_count + 1 if self.end_gaps else piece_count - 1

    @property
    def end_clearance_mm(self) -> float:
        """Length taken by the run-end gaps (zero unless ``end_gaps``)."""
        return 2 * self.gap_mm if self.end_gaps else 0.0

    def inner_edge(self, spacing: float) -> float:
        """Edge distance that keeps bracket rhythm continuous across a gap."""
        return (spacing - self.gap_mm) / 2

    def round_to_increment(self, value: float) -> float:
        return round_half_up(value, self.length_increment_mm)


def get_standard_lengths(
    bracket_centres: float,
    max_length: float = MAX_ANGLE_LENGTH_MM,
    config: Optional[RunLayoutConfig] = None,
) -> List[float]:
    """Standard angle lengths for a bracket spacing, longest first.

    Known spacings come from STANDARD_LENGTH_TABLE. Any other spacing is
    derived from L = k * C - gap for every bracket count k that fits,
    snapped to the cut increment.

    Args:
        bracket_centres: Bracket centre-to-centre spacing (mm).
        max_length: Longest manufacturable angle (mm).
        config: Hardware constants (gap, increment).

    Returns:
        Descending list of lengths in mm (may be empty for very wide spacing).
    """
    if config is None:
        config = RunLayoutConfig()

    if bracket_centres in STANDARD_LENGTH_TABLE:
        return [
            length for length in STANDARD_LENGTH_TABLE[int(bracket_centres)]
            if length <= max_length
        ]

    gap = config.gap_mm
    lengths: List[float] = []
    max_brackets = math.floor((max_length + gap) / bracket_centres)

    for k in range(max_brackets, 0, -1):
        length = k * bracket_centres - gap
        if length <= 0 or length > max_length:
            continue
        rounded = config.round_to_increment(length)
        if 0 < rounded <= max_length and rounded not in lengths:
            lengths.append(rounded)

    return lengths
