"""Tests for piece_geometry module."""
import pytest

from piece_geometry import (
    calculate_non_standard_piece,
    calculate_standard_piece,
    check_piece_edges,
    edge_distances,
    validate_edge_distances,
)
from run_contracts import AnglePiece, EdgeDistanceConstraints, InvalidGeometryError


class TestStandardPiece:
    """Catalog-length bracket layouts."""

    def test_1490_at_500(self):
        piece = calculate_standard_piece(1490, 500)
        assert piece.bracket_count == 3
        assert piece.start_offset == 245.0
        assert piece.positions == [245.0, 745.0, 1245.0]
        assert piece.is_standard

    def test_990_at_500(self):
        piece = calculate_standard_piece(990, 500)
        assert piece.bracket_count == 2
        assert piece.positions == [245.0, 745.0]

    def test_1390_at_350(self):
        piece = calculate_standard_piece(1390, 350)
        assert piece.bracket_count == 4
        assert piece.start_offset == 170.0
        assert piece.positions == [170.0, 520.0, 870.0, 1220.0]

    def test_edges_are_symmetric(self):
        piece = calculate_standard_piece(1490, 300)
        start, end = edge_distances(piece)
        assert start == pytest.approx(145.0)
        assert end == pytest.approx(145.0)

    def test_positions_increase_by_spacing(self):
        piece = calculate_standard_piece(1390, 200)
        diffs = [b - a for a, b in zip(piece.positions, piece.positions[1:])]
        assert diffs == [pytest.approx(200.0)] * (piece.bracket_count - 1)
        assert len(piece.positions) == piece.bracket_count


class TestNonStandardPiece:
    """Ad hoc lengths laid out symmetrically."""

    def test_821_at_500(self, constraints_500):
        piece = calculate_non_standard_piece(821, 500, constraints_500)
        assert piece.bracket_count == 2
        assert piece.spacing <= 500
        assert 35 <= piece.start_offset <= 250
        assert not piece.is_standard

    def test_full_spacing_preferred(self, constraints_500):
        piece = calculate_non_standard_piece(821, 500, constraints_500)
        assert piece.spacing == 500
        assert piece.start_offset == pytest.approx(160.5)
        assert piece.end_offset == pytest.approx(160.5)

    def test_slot_pitch_spacing_when_full_spacing_fails(self):
        """1300mm at 500: 3 brackets overhang 150 > 140, 3 @ 450 gives 200 > 140,
        so 4 brackets at 350 (overhang 125) wins."""
        window = EdgeDistanceConstraints(e_min=35.0, e_max=140.0)
        piece = calculate_non_standard_piece(1300, 500, window)
        assert piece.bracket_count == 4
        assert piece.spacing == 350
        assert piece.start_offset == pytest.approx(125.0)

    def test_short_piece_gets_two_brackets(self, constraints_500):
        piece = calculate_non_standard_piece(300, 500, constraints_500)
        assert piece.bracket_count == 2
        assert validate_edge_distances(piece, constraints_500)

    def test_fractional_length(self, constraints_300):
        piece = calculate_non_standard_piece(572.5, 300, constraints_300)
        assert piece.bracket_count == 2
        assert piece.start_offset == pytest.approx(136.25)
        assert validate_edge_distances(piece, constraints_300)

    def test_impossible_window_raises(self):
        window = EdgeDistanceConstraints(e_min=200.0, e_max=210.0)
        with pytest.raises(InvalidGeometryError) as exc_info:
            calculate_non_standard_piece(1000, 100, window)
        assert exc_info.value.length == 1000
        assert exc_info.value.max_spacing == 100


class TestEdgeChecks:
    """Edge validation and diagnostics."""

    def _piece(self, start, end, length=1000.0):
        return AnglePiece(
            length=length,
            bracket_count=2,
            spacing=length - start - end,
            start_offset=start,
            positions=[start, length - end],
            is_standard=False,
        )

    def test_valid_piece_passes(self, constraints_500):
        piece = self._piece(100.0, 100.0)
        assert validate_edge_distances(piece, constraints_500)
        assert check_piece_edges(piece, constraints_500) == []

    def test_start_too_close(self, constraints_500):
        piece = self._piece(20.0, 100.0)
        assert not validate_edge_distances(piece, constraints_500)
        diags = check_piece_edges(piece, constraints_500, piece_index=0)
        assert [d.code for d in diags] == ["edge_distance_start"]
        assert diags[0].severity == "error"
        assert diags[0].limit == 35.0
        assert "Piece 1" in diags[0].message

    def test_end_too_far(self, constraints_500):
        piece = self._piece(100.0, 300.0)
        diags = check_piece_edges(piece, constraints_500, piece_index=2)
        assert [d.code for d in diags] == ["edge_distance_end"]
        assert diags[0].value == pytest.approx(300.0)
        assert diags[0].piece_index == 2

    def test_window_bounds_inclusive(self, constraints_500):
        piece = self._piece(35.0, 250.0)
        assert validate_edge_distances(piece, constraints_500)
