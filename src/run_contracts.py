"""Contracts for multi-piece angle run layout optimization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from angle_hardware import (
    GAP_BETWEEN_PIECES_MM,
    LENGTH_INCREMENT_MM,
    MAX_ANGLE_LENGTH_MM,
    MIN_EDGE_DISTANCE_MM,
)


class RunLayoutError(Exception):
    """Base exception for run layout errors."""
    pass


class InvalidGeometryError(RunLayoutError):
    """No bracket arrangement satisfies the edge window for a piece."""

    def __init__(self, message: str, length: float = 0.0, max_spacing: float = 0.0):
        super().__init__(message)
        self.length = length
        self.max_spacing = max_spacing


class NoValidSegmentationError(RunLayoutError):
    """No candidate layout sums exactly to the requested run length."""

    def __init__(self, message: str, total_run_length: float = 0.0):
        super().__init__(message)
        self.total_run_length = total_run_length


@dataclass(frozen=True)
class EdgeDistanceConstraints:
    """Allowed range for the distance from an angle end to its nearest bracket."""

    e_min: float  # mm, typically 35
    e_max: float  # mm, typically 0.5 x bracket centres


@dataclass(frozen=True)
class LayoutDiagnostic:
    """A non-fatal finding recorded while laying out a run."""

    code: str
    severity: str  # "error" or "warning"
    message: str
    piece_index: Optional[int] = None
    value: float = 0.0
    limit: float = 0.0


@dataclass(frozen=True)
class AnglePiece:
    """A single piece of angle with its brackets.

    Positions are offsets from the left end of this piece, never absolute
    run coordinates.
    """

    length: float
    bracket_count: int
    spacing: float          # realised centre-to-centre distance on this piece
    start_offset: float     # left end to first bracket
    positions: List[float]
    is_standard: bool
    rebalanced: bool = False  # gap-side edges aligned to the inner edge

    @property
    def end_offset(self) -> float:
        """Last bracket to right end."""
        return self.length - self.positions[-1]


@dataclass(frozen=True)
class RunSegmentation:
    """A complete cutting plan for one run."""

    pieces: List[AnglePiece]
    total_length: float         # pieces + gaps
    total_brackets: int
    piece_count: int
    gap_count: int
    total_gap_distance: float
    average_spacing: float      # weighted by bracket intervals
    unique_piece_lengths: int
    score: float = 0.0          # lower is better
    source: str = "manual"      # "combination" | "custom" | "even_split" | "fill" | "manual"
    diagnostics: List[LayoutDiagnostic] = field(default_factory=list)

    @property
    def piece_lengths(self) -> List[float]:
        return [p.length for p in self.pieces]


@dataclass(frozen=True)
class PieceLengthBreakdown:
    length: float
    count: int
    is_standard: bool


@dataclass(frozen=True)
class MaterialSummary:
    total_angle_length: float
    total_pieces: int
    total_brackets: int
    piece_length_breakdown: List[PieceLengthBreakdown]


@dataclass(frozen=True)
class RunOptimizationRequest:
    """Input for optimizing a multi-piece run (all lengths in mm)."""

    total_run_length_mm: float
    bracket_centres_mm: float
    max_angle_length_mm: float = MAX_ANGLE_LENGTH_MM
    gap_between_pieces_mm: float = GAP_BETWEEN_PIECES_MM
    length_increment_mm: float = LENGTH_INCREMENT_MM
    min_edge_distance_mm: float = MIN_EDGE_DISTANCE_MM
    max_edge_distance_mm: Optional[float] = None  # defaults to 0.5 x bracket centres

    def edge_constraints(self) -> EdgeDistanceConstraints:
        e_max = self.max_edge_distance_mm
        if e_max is None:
            e_max = 0.5 * self.bracket_centres_mm
        return EdgeDistanceConstraints(e_min=self.min_edge_distance_mm, e_max=e_max)


@dataclass(frozen=True)
class RunOptimizationResult:
    optimal: RunSegmentation
    all_options: List[RunSegmentation]  # ascending score
    material_summary: MaterialSummary
    constraints: Optional[EdgeDistanceConstraints] = None
    standard_lengths: List[float] = field(default_factory=list)
    diagnostics: List[LayoutDiagnostic] = field(default_factory=list)
