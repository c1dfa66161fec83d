"""Tests for layout_report module."""
import json
from dataclasses import replace

import pytest

from layout_report import comparison_to_markdown, result_to_json, result_to_markdown
from run_contracts import LayoutDiagnostic, RunOptimizationRequest
from run_layout_optimizer import compare_bracket_spacings, optimize_run_layout


@pytest.fixture(scope="module")
def result_2321():
    return optimize_run_layout(RunOptimizationRequest(2321, 500))


class TestResultToJson:

    def test_serializable(self, result_2321):
        d = result_to_json(result_2321)
        text = json.dumps(d)
        assert json.loads(text)["version"] == 1

    def test_optimal_fields(self, result_2321):
        d = result_to_json(result_2321)
        assert d["optimal"]["piece_lengths"] == [1490, 821]
        assert d["optimal"]["total_brackets"] == 5
        assert d["optimal"]["pieces"][0]["positions"] == [245.0, 745.0, 1245.0]
        assert d["constraints"] == {"e_min": 35.0, "e_max": 250.0}
        assert d["standard_lengths"] == [1490, 990]

    def test_all_options_included(self, result_2321):
        d = result_to_json(result_2321)
        assert len(d["all_options"]) == len(result_2321.all_options)

    def test_material_summary(self, result_2321):
        breakdown = result_to_json(result_2321)["material_summary"]["piece_length_breakdown"]
        assert breakdown[0] == {"length": 1490, "count": 1, "is_standard": True}


class TestResultToMarkdown:

    def test_headline(self, result_2321):
        md = result_to_markdown(result_2321)
        assert md.startswith("# Run Layout: 2321 mm")
        assert "2 piece(s), 5 brackets, 1 gap(s) totalling 10 mm." in md

    def test_sections(self, result_2321):
        md = result_to_markdown(result_2321)
        assert "## Pieces" in md
        assert "## Cut List" in md
        assert "- 1 x 1490 mm (standard)" in md
        assert "- 1 x 821 mm (non-standard)" in md
        assert "rebalanced" in md

    def test_top_n_limits_options(self, result_2321):
        md = result_to_markdown(result_2321, top_n=1)
        assert f"## Top Options (1 of {len(result_2321.all_options)})" in md
        assert "1. [combination] 1490 + 821 mm" in md
        assert "\n2. [" not in md

    def test_no_diagnostics_section_when_clean(self, result_2321):
        assert "## Diagnostics" not in result_to_markdown(result_2321)

    def test_diagnostics_listed(self, result_2321):
        note = LayoutDiagnostic(
            code="edge_distance_end",
            severity="error",
            message="Piece 2 (821mm) end edge 20.0mm < minimum 35.0mm",
            piece_index=1,
        )
        md = result_to_markdown(replace(result_2321, diagnostics=[note]))
        assert "## Diagnostics" in md
        assert "- [ERROR] edge_distance_end: Piece 2" in md


class TestComparisonToMarkdown:

    def test_table_rows(self):
        rows = compare_bracket_spacings(2321, [500, 300])
        md = comparison_to_markdown(rows)
        assert "| Spacing (mm) | Pieces | Brackets | Score | Plan |" in md
        assert "| 500 | 2 | 5 |" in md

    def test_error_row(self):
        rows = compare_bracket_spacings(
            1000, [100], min_edge_distance_mm=200, max_edge_distance_mm=210,
        )
        md = comparison_to_markdown(rows)
        assert "| 100 | - | - | - |" in md
