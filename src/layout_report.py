"""JSON and markdown writers for run layout results."""

from dataclasses import asdict
from typing import Any, List, Sequence

import numpy as np

from run_contracts import RunOptimizationResult, RunSegmentation
from run_layout_optimizer import SpacingComparison

REPORT_VERSION = 1


def _make_serializable(obj: Any) -> Any:
    """Recursively convert numpy types and tuples to Python native types."""
    if isinstance(obj, (np.bool_,)):
        return bool(obj)
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {k: _make_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_make_serializable(v) for v in obj]
    if isinstance(obj, float) and (obj == float("inf") or obj == float("-inf")):
        return str(obj)
    return obj


def result_to_json(result: RunOptimizationResult) -> dict:
    """Convert a RunOptimizationResult to a JSON-serializable dict."""
    d = asdict(result)
    d["version"] = REPORT_VERSION
    d["optimal"]["piece_lengths"] = result.optimal.piece_lengths
    return _make_serializable(d)


def _plan_line(rank: int, seg: RunSegmentation) -> str:
    lengths = " + ".join(_fmt_mm(length) for length in seg.piece_lengths)
    return (
        f"{rank}. [{seg.source}] {lengths} mm: "
        f"{seg.total_brackets} brackets, avg spacing {seg.average_spacing:.1f} mm, "
        f"score {seg.score:.1f}"
    )


def _fmt_mm(value: float) -> str:
    return f"{value:g}"


def result_to_markdown(result: RunOptimizationResult, top_n: int = 5) -> str:
    """Render a RunOptimizationResult as a markdown string for stdout."""
    optimal = result.optimal
    lines: List[str] = []
    lines.append(f"# Run Layout: {_fmt_mm(optimal.total_length)} mm")
    lines.append("")
    lines.append(
        f"{optimal.piece_count} piece(s), {optimal.total_brackets} brackets, "
        f"{optimal.gap_count} gap(s) totalling {_fmt_mm(optimal.total_gap_distance)} mm."
    )
    lines.append("")

    if result.constraints is not None:
        lines.append(
            f"**Edge window:** {result.constraints.e_min:.1f}-{result.constraints.e_max:.1f} mm"
        )
    if result.standard_lengths:
        catalog = ", ".join(_fmt_mm(length) for length in result.standard_lengths)
        lines.append(f"**Standard lengths:** {catalog} mm")
    lines.append("")

    # Pieces
    lines.append("## Pieces")
    for i, piece in enumerate(optimal.pieces, 1):
        kind = "standard" if piece.is_standard else "non-standard"
        tag = ", rebalanced" if piece.rebalanced else ""
        positions = ", ".join(f"{p:.1f}" for p in piece.positions)
        lines.append(
            f"- Piece {i}: {_fmt_mm(piece.length)} mm ({kind}{tag}), "
            f"{piece.bracket_count} brackets @ {piece.spacing:.1f} mm, "
            f"edges {piece.start_offset:.1f}/{piece.end_offset:.1f} mm, "
            f"positions [{positions}]"
        )
    lines.append("")

    # Cut list
    summary = result.material_summary
    lines.append("## Cut List")
    for row in summary.piece_length_breakdown:
        kind = "standard" if row.is_standard else "non-standard"
        lines.append(f"- {row.count} x {_fmt_mm(row.length)} mm ({kind})")
    lines.append(
        f"- Total: {summary.total_pieces} pieces, {summary.total_brackets} brackets"
    )
    lines.append("")

    # Diagnostics
    findings = list(result.diagnostics) + list(optimal.diagnostics)
    if findings:
        lines.append("## Diagnostics")
        for diag in findings:
            lines.append(f"- [{diag.severity.upper()}] {diag.code}: {diag.message}")
        lines.append("")

    # Ranked alternatives
    lines.append(f"## Top Options ({min(top_n, len(result.all_options))} of {len(result.all_options)})")
    for rank, seg in enumerate(result.all_options[:top_n], 1):
        lines.append(_plan_line(rank, seg))
    lines.append("")

    return "\n".join(lines)


def comparison_to_markdown(rows: Sequence[SpacingComparison]) -> str:
    """Render a bracket spacing comparison as a markdown table."""
    lines: List[str] = []
    lines.append("# Bracket Spacing Comparison")
    lines.append("")
    lines.append("| Spacing (mm) | Pieces | Brackets | Score | Plan |")
    lines.append("|---|---|---|---|---|")
    for row in rows:
        if row.result is None:
            lines.append(f"| {_fmt_mm(row.spacing)} | - | - | - | {row.error} |")
            continue
        seg = row.result.optimal
        plan = " + ".join(_fmt_mm(length) for length in seg.piece_lengths)
        lines.append(
            f"| {_fmt_mm(row.spacing)} | {seg.piece_count} | {seg.total_brackets} "
            f"| {seg.score:.1f} | {plan} |"
        )
    lines.append("")
    return "\n".join(lines)
