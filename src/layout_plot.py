"""Side-view diagram of a run segmentation (pieces, gaps, brackets)."""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from angle_hardware import GAP_BETWEEN_PIECES_MM
from run_contracts import RunSegmentation

logger = logging.getLogger(__name__)


def piece_extents(
    segmentation: RunSegmentation,
    gap: float = GAP_BETWEEN_PIECES_MM,
    end_gaps: bool = False,
) -> List[Tuple[float, float]]:
    """(start, end) of each piece along the run, for drawing only.

    With ``end_gaps`` the first piece starts one gap in from the run start.
    """
    extents: List[Tuple[float, float]] = []
    x = gap if end_gaps else 0.0
    for piece in segmentation.pieces:
        extents.append((x, x + piece.length))
        x += piece.length + gap
    return extents


def render_layout(
    segmentation: RunSegmentation,
    output_path: str,
    gap: float = GAP_BETWEEN_PIECES_MM,
    title: Optional[str] = None,
    *,
    end_gaps: bool = False,
    dpi: int = 150,
) -> str:
    """Render the run as a PNG with one bar per piece and a tick per bracket.

    Uses matplotlib with the Agg backend so it works headless.
    Returns the absolute path of the written file.
    """
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    extents = piece_extents(segmentation, gap, end_gaps)
    run_end = extents[-1][1] if extents else 0.0
    if end_gaps and extents:
        run_end += gap

    fig, ax = plt.subplots(figsize=(max(6.0, min(24.0, run_end / 400.0)), 2.4))

    for piece, (start, end) in zip(segmentation.pieces, extents):
        color = "#4c78a8" if piece.is_standard else "#f58518"
        ax.broken_barh([(start, end - start)], (0.0, 1.0), facecolors=color, edgecolors="black")
        xs = [start + p for p in piece.positions]
        ax.plot(xs, [0.5] * len(xs), marker="v", linestyle="none", color="black", markersize=6)
        ax.text((start + end) / 2, 1.15, f"{piece.length:g}", ha="center", fontsize=8)

    ax.set_xlim(-0.02 * run_end, run_end * 1.02 if run_end > 0 else 1.0)
    ax.set_ylim(-0.3, 1.6)
    ax.set_yticks([])
    ax.set_xlabel("mm")
    if title is None:
        title = (
            f"{segmentation.total_length:g} mm run: {segmentation.piece_count} pieces, "
            f"{segmentation.total_brackets} brackets"
        )
    ax.set_title(title)
    fig.tight_layout()

    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(str(out), dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info("Layout diagram saved: %s", out)
    return str(out.resolve())
