#!/usr/bin/env python3
"""
Optimize the angle/bracket layout of a straight run.

Splits the run into angle pieces no longer than the stock limit, places
brackets on each piece, and prints the best cutting plan with the ranked
alternatives.

Usage:
    python scripts/optimize_run.py --length 2321 --centres 500
    python scripts/optimize_run.py --length 5072.5 --centres 300 --max-edge 150 --json
    python scripts/optimize_run.py --length 12000 --centres 500 --plot run.png
    python scripts/optimize_run.py --length 8000 --compare 200,250,300,400,500
"""
import sys
import json
import argparse
import logging
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from angle_hardware import (
    GAP_BETWEEN_PIECES_MM,
    LENGTH_INCREMENT_MM,
    MAX_ANGLE_LENGTH_MM,
    MIN_EDGE_DISTANCE_MM,
    RunLayoutConfig,
)
from layout_report import comparison_to_markdown, result_to_json, result_to_markdown
from run_contracts import RunLayoutError, RunOptimizationRequest
from run_layout_optimizer import compare_bracket_spacings, optimize_run_layout


def _parse_spacings(text: str):
    try:
        return [float(s) for s in text.split(",") if s.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid spacing list: {text}")


def main():
    parser = argparse.ArgumentParser(
        description="Optimize the angle/bracket layout of a straight run.",
    )
    parser.add_argument(
        "--length", type=float, required=True,
        help="Total run length in mm",
    )
    parser.add_argument(
        "--centres", type=float, default=None,
        help="Bracket centre-to-centre spacing in mm (required unless --compare)",
    )
    parser.add_argument(
        "--max-angle-length", type=float, default=MAX_ANGLE_LENGTH_MM,
        help=f"Longest angle piece in mm (default: {MAX_ANGLE_LENGTH_MM:g})",
    )
    parser.add_argument(
        "--gap", type=float, default=GAP_BETWEEN_PIECES_MM,
        help=f"Gap between pieces in mm (default: {GAP_BETWEEN_PIECES_MM:g})",
    )
    parser.add_argument(
        "--increment", type=float, default=LENGTH_INCREMENT_MM,
        help=f"Cut length increment in mm (default: {LENGTH_INCREMENT_MM:g})",
    )
    parser.add_argument(
        "--min-edge", type=float, default=MIN_EDGE_DISTANCE_MM,
        help=f"Minimum end-to-bracket distance in mm (default: {MIN_EDGE_DISTANCE_MM:g})",
    )
    parser.add_argument(
        "--max-edge", type=float, default=None,
        help="Maximum end-to-bracket distance in mm (default: half the bracket spacing)",
    )
    parser.add_argument(
        "--end-gaps", action="store_true",
        help="Also leave a gap at each end of the run",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the full result as JSON instead of markdown",
    )
    parser.add_argument(
        "--top", type=int, default=5,
        help="Number of ranked options in the markdown report (default: 5)",
    )
    parser.add_argument(
        "--plot", default=None,
        help="Write a PNG diagram of the optimal layout to this path",
    )
    parser.add_argument(
        "--compare", type=_parse_spacings, default=None,
        help="Comma-separated bracket spacings to compare, e.g. 200,250,300",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    # Logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.centres is None and not args.compare:
        parser.error("--centres is required unless --compare is given")

    config = RunLayoutConfig(end_gaps=args.end_gaps)
    request_kwargs = dict(
        max_angle_length_mm=args.max_angle_length,
        gap_between_pieces_mm=args.gap,
        length_increment_mm=args.increment,
        min_edge_distance_mm=args.min_edge,
        max_edge_distance_mm=args.max_edge,
    )

    if args.compare:
        try:
            rows = compare_bracket_spacings(args.length, args.compare, config, **request_kwargs)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        if args.json:
            print(json.dumps([
                {
                    "spacing": row.spacing,
                    "error": row.error,
                    "result": result_to_json(row.result) if row.result else None,
                }
                for row in rows
            ], indent=2))
        else:
            print(comparison_to_markdown(rows))
        sys.exit(0 if any(row.ok for row in rows) else 1)

    request = RunOptimizationRequest(
        total_run_length_mm=args.length,
        bracket_centres_mm=args.centres,
        **request_kwargs,
    )
    try:
        result = optimize_run_layout(request, config)
    except (RunLayoutError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result_to_json(result), indent=2))
    else:
        print(result_to_markdown(result, top_n=args.top))

    if args.plot:
        from layout_plot import render_layout
        path = render_layout(result.optimal, args.plot, gap=args.gap, end_gaps=args.end_gaps)
        print(f"Layout diagram saved to {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
