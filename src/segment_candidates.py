"""
Candidate piece-length lists for a run.

Generates ordered lists of angle lengths whose pieces plus gaps add up
exactly to the run length, from three sources:
  A. Combinations of standard lengths closed by one makeup piece
  B. Custom splits that keep the bracket rhythm across every gap
     (plus an even-split fallback)
  C. Long-run fill: one standard length repeated, then a makeup piece

Every source is bounded by RunLayoutConfig so the search stays tractable
for runs of hundreds of metres.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from angle_hardware import (
    GAP_BETWEEN_PIECES_MM,
    MAX_ANGLE_LENGTH_MM,
    RunLayoutConfig,
    round_half_up,
)

logger = logging.getLogger(__name__)

# Slack when checking that pieces plus gaps hit the run length (mm)
LENGTH_TOLERANCE_MM = 1e-6


@dataclass(frozen=True)
class SegmentationCandidate:
    """A piece-length list and the source that produced it."""
    piece_lengths: List[float]
    source: str  # "combination" | "custom" | "even_split" | "fill"


def generate_candidates(
    total_length: float,
    bracket_centres: float,
    standard_lengths: Sequence[float],
    config: Optional[RunLayoutConfig] = None,
) -> List[SegmentationCandidate]:
    """Run every source and merge the results.

    Args:
        total_length: Run length (mm).
        bracket_centres: Bracket spacing (mm).
        standard_lengths: Catalog lengths for this spacing, longest first.
        config: Hardware constants and search bounds.

    Returns:
        Candidates in source order (combination, custom, fill) with exact
        duplicates removed; the first occurrence is kept.
    """
    if config is None:
        config = RunLayoutConfig()

    gap = config.gap_mm
    max_length = config.max_angle_length_mm
    candidates: List[SegmentationCandidate] = []

    combination = generate_combination_segmentations(
        total_length, standard_lengths, gap, config,
    )
    candidates.extend(SegmentationCandidate(c, "combination") for c in combination)
    logger.info("Combination source: %d candidates", len(combination))

    custom = _custom_splits(total_length, bracket_centres, max_length, gap, config)
    candidates.extend(SegmentationCandidate(c, source) for c, source in custom)
    logger.info("Custom source: %d candidates", len(custom))

    fill = generate_fill_segmentations(total_length, standard_lengths, gap, config)
    candidates.extend(SegmentationCandidate(c, "fill") for c in fill)
    logger.info("Fill source: %d candidates", len(fill))

    unique: List[SegmentationCandidate] = []
    seen = set()
    for cand in candidates:
        key = tuple(cand.piece_lengths)
        if key in seen:
            continue
        seen.add(key)
        unique.append(cand)

    logger.info("Total candidates: %d (%d after dedupe)", len(candidates), len(unique))
    return unique


# ─── Source A: standard-length combinations ──────────────────────────────────


def generate_combination_segmentations(
    total_length: float,
    standard_lengths: Sequence[float],
    gap: float = GAP_BETWEEN_PIECES_MM,
    config: Optional[RunLayoutConfig] = None,
) -> List[List[float]]:
    """Combinations of standard lengths closed by a makeup piece.

    Depth-first search over (remaining length, pieces so far, catalog index).
    Lengths are only taken at or after the current index, so every list is
    non-increasing up to its makeup piece and permutations never repeat.
    A branch closes once the remainder fits in one piece plus a gap; it
    keeps extending only while the remainder is still too long to cut.

    Args:
        total_length: Run length (mm).
        standard_lengths: Catalog lengths (any order).
        gap: Clearance between pieces (mm).
        config: Search bounds (piece count, candidate cap, piece range).

    Returns:
        Piece-length lists that hit total_length exactly.
    """
    if config is None:
        config = RunLayoutConfig()

    lengths = sorted(set(standard_lengths), reverse=True)
    if not lengths:
        return []

    step = lengths[0] + gap  # most any single piece and its gap can consume
    max_length = config.max_angle_length_mm
    limit = config.max_combination_candidates
    segmentations: List[List[float]] = []
    truncated = False

    def build(remaining: float, current: List[float], start_index: int) -> None:
        nonlocal truncated
        if len(segmentations) >= limit:
            truncated = True
            return
        # Remaining depth cannot cover what is left
        if remaining > (config.max_pieces - len(current)) * step:
            return

        if 0 <= remaining <= step:
            closed = current + [remaining] if remaining > 0 else list(current)
            if _is_valid_split(closed, total_length, gap, config):
                segmentations.append(closed)
            if remaining <= max_length:
                return

        for i in range(start_index, len(lengths)):
            length = lengths[i]
            if length + gap <= remaining:
                build(remaining - length - gap, current + [length], i)

    build(total_length - config.end_clearance_mm, [], 0)

    if truncated:
        logger.warning(
            "Combination search stopped at %d candidates for %.1fmm run",
            limit, total_length,
        )
    return segmentations


# ─── Source B: custom rhythm-preserving splits ───────────────────────────────


def generate_custom_segmentations(
    total_length: float,
    bracket_centres: float,
    max_angle_length: float = MAX_ANGLE_LENGTH_MM,
    gap: float = GAP_BETWEEN_PIECES_MM,
    config: Optional[RunLayoutConfig] = None,
) -> List[List[float]]:
    """Custom splits for lengths the catalog cannot cover well.

    For a handful of piece counts, brackets are spread evenly over the
    pieces and each piece length is derived from its bracket count: edges
    next to a gap use the inner edge (bracket rhythm stays exact across the
    gap) and the two run ends share whatever is left. An even split is tried
    for each piece count as a fallback.

    Returns:
        Unique piece-length lists that hit total_length exactly.
    """
    if config is None:
        config = RunLayoutConfig()
    return [
        lengths for lengths, _ in
        _custom_splits(total_length, bracket_centres, max_angle_length, gap, config)
    ]


def _custom_splits(
    total_length: float,
    bracket_centres: float,
    max_angle_length: float,
    gap: float,
    config: RunLayoutConfig,
) -> List[Tuple[List[float], str]]:
    options: List[Tuple[List[float], str]] = []

    min_pieces = max(1, math.ceil(total_length / (max_angle_length + gap)))
    max_pieces = min(
        min_pieces + config.custom_extra_piece_counts,
        config.custom_max_piece_count,
    )

    for num_pieces in range(min_pieces, max_pieces + 1):
        total_gap = config.gap_count(num_pieces) * gap
        available = total_length - total_gap
        if available <= 0:
            continue

        for lengths in _bracket_distribution_splits(
            num_pieces, available, total_length, total_gap,
            bracket_centres, max_angle_length, gap, config,
        ):
            options.append((lengths, "custom"))

        even = _even_split(
            num_pieces, available, total_length, total_gap, max_angle_length, gap, config,
        )
        if even is not None:
            options.append((even, "even_split"))

    unique: List[Tuple[List[float], str]] = []
    seen = set()
    for lengths, source in options:
        key = tuple(lengths)
        if key not in seen:
            seen.add(key)
            unique.append((lengths, source))
    return unique


def _bracket_distribution_splits(
    num_pieces: int,
    available: float,
    total_length: float,
    total_gap: float,
    bracket_centres: float,
    max_angle_length: float,
    gap: float,
    config: RunLayoutConfig,
) -> List[List[float]]:
    """Piece lengths derived from even bracket distributions."""
    splits: List[List[float]] = []
    inner_edge = config.inner_edge(bracket_centres)

    min_total = math.ceil(available / bracket_centres)
    max_total = min(
        math.floor(available / (bracket_centres * config.custom_min_spacing_ratio)),
        min_total + config.custom_bracket_window,
    )

    for total_brackets in range(min_total, max_total + 1):
        per_piece = total_brackets // num_pieces
        if per_piece < config.min_brackets_per_piece:
            continue

        distribution = np.full(num_pieces, per_piece, dtype=int)
        distribution[: total_brackets % num_pieces] += 1

        spacing_within = (total_brackets - num_pieces) * bracket_centres
        inner_edges = 2 * (num_pieces - 1) * inner_edge
        outer_edge = (available - spacing_within - inner_edges) / 2

        if not (
            config.min_edge_distance_mm
            <= outer_edge
            <= bracket_centres * config.outer_edge_max_ratio
        ):
            continue

        lengths: List[float] = []
        for i, brackets in enumerate(distribution):
            start_edge = outer_edge if i == 0 else inner_edge
            end_edge = outer_edge if i == num_pieces - 1 else inner_edge
            length = round_half_up(start_edge + (int(brackets) - 1) * bracket_centres + end_edge)
            if not _length_in_range(length, max_angle_length, config):
                break
            lengths.append(length)

        if len(lengths) != num_pieces:
            continue

        snapped = _absorb_residue_and_snap(
            lengths, total_length, total_gap, max_angle_length, gap, config,
        )
        if snapped is not None:
            splits.append(snapped)

    return splits


def _absorb_residue_and_snap(
    lengths: List[float],
    total_length: float,
    total_gap: float,
    max_angle_length: float,
    gap: float,
    config: RunLayoutConfig,
) -> Optional[List[float]]:
    """Put the rounding residue in the longest piece, then snap to the grid."""
    residue = total_length - (math.fsum(lengths) + total_gap)
    if abs(residue) > config.custom_max_residue_mm:
        return None

    adjusted = list(lengths)
    longest = int(np.argmax(adjusted))
    adjusted[longest] += residue

    snapped = [config.round_to_increment(length) for length in adjusted]
    if not all(_length_in_range(length, max_angle_length, config) for length in snapped):
        return None
    if not _hits_total(snapped, total_length, gap, config):
        return None
    return snapped


def _even_split(
    num_pieces: int,
    available: float,
    total_length: float,
    total_gap: float,
    max_angle_length: float,
    gap: float,
    config: RunLayoutConfig,
) -> Optional[List[float]]:
    """Equal pieces on the cut grid; the last piece absorbs the residue."""
    even_length = available / num_pieces
    if not _length_in_range(even_length, max_angle_length, config):
        return None

    rounded = config.round_to_increment(even_length)
    pieces = [rounded] * num_pieces
    residue = total_length - (rounded * num_pieces + total_gap)
    if abs(residue) > config.even_split_tolerance_mm:
        return None

    pieces[-1] += residue
    if not all(_length_in_range(length, max_angle_length, config) for length in pieces):
        return None
    if not _hits_total(pieces, total_length, gap, config):
        return None
    return pieces


# ─── Source C: long-run fill ─────────────────────────────────────────────────


def generate_fill_segmentations(
    total_length: float,
    standard_lengths: Sequence[float],
    gap: float = GAP_BETWEEN_PIECES_MM,
    config: Optional[RunLayoutConfig] = None,
) -> List[List[float]]:
    """Repeat one standard length as often as it fits, then close the run.

    Covers runs far longer than the combination and custom searches reach.
    For each catalog length L, the largest repeat count k and k - 1 are
    tried. The remainder becomes a makeup piece; a remainder too short to
    cut is merged with the last L and re-split into two pieces.

    Returns:
        Piece-length lists that hit total_length exactly.
    """
    if config is None:
        config = RunLayoutConfig()

    max_length = config.max_angle_length_mm
    inner_total = total_length - config.end_clearance_mm
    fills: List[List[float]] = []

    for length in sorted(set(standard_lengths), reverse=True):
        if not _length_in_range(length, max_length, config):
            continue

        k_max = math.floor((inner_total + gap) / (length + gap))
        for k in (k_max, k_max - 1):
            if k < 1 or k > config.max_fill_pieces:
                continue
            pieces = _close_fill(length, k, inner_total, gap, config)
            if pieces is None or pieces in fills:
                continue
            if _is_valid_split(pieces, total_length, gap, config, config.max_fill_pieces):
                fills.append(pieces)

    return fills


def _close_fill(
    length: float,
    repeats: int,
    inner_total: float,
    gap: float,
    config: RunLayoutConfig,
) -> Optional[List[float]]:
    max_length = config.max_angle_length_mm
    remainder = inner_total - repeats * (length + gap)

    if abs(remainder + gap) <= LENGTH_TOLERANCE_MM:
        return [length] * repeats
    if _length_in_range(remainder, max_length, config):
        return [length] * repeats + [remainder]
    if remainder > max_length:
        return None

    # Too short to cut: merge with one repeat and split in two
    merged = length + remainder
    first = config.round_to_increment(merged / 2)
    second = merged - first
    if not (
        _length_in_range(first, max_length, config)
        and _length_in_range(second, max_length, config)
    ):
        return None
    return [length] * (repeats - 1) + [first, second]


# ─── Shared checks ───────────────────────────────────────────────────────────


def _length_in_range(length: float, max_length: float, config: RunLayoutConfig) -> bool:
    return config.min_piece_length_mm < length <= max_length


def _hits_total(
    lengths: Sequence[float],
    total_length: float,
    gap: float,
    config: RunLayoutConfig,
) -> bool:
    total = math.fsum(lengths) + config.gap_count(len(lengths)) * gap
    return abs(total - total_length) <= LENGTH_TOLERANCE_MM


def _is_valid_split(
    lengths: Sequence[float],
    total_length: float,
    gap: float,
    config: RunLayoutConfig,
    max_pieces: Optional[int] = None,
) -> bool:
    """Exact total, bounded piece count, every piece cuttable."""
    if max_pieces is None:
        max_pieces = config.max_pieces
    if not lengths or len(lengths) > max_pieces:
        return False
    if not all(
        _length_in_range(length, config.max_angle_length_mm, config) for length in lengths
    ):
        return False
    return _hits_total(lengths, total_length, gap, config)
