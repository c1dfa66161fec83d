from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "optimize_run.py"


def _run(*args: str) -> subprocess.CompletedProcess:
    cmd = [sys.executable, str(SCRIPT), *args]
    return subprocess.run(cmd, capture_output=True, text=True)


def test_cli_prints_markdown_report():
    proc = _run("--length", "2321", "--centres", "500")
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.startswith("# Run Layout: 2321 mm")
    assert "1 x 1490 mm (standard)" in proc.stdout


def test_cli_json_output():
    proc = _run("--length", "5072.5", "--centres", "300", "--max-edge", "150", "--json")
    assert proc.returncode == 0, proc.stderr
    data = json.loads(proc.stdout)
    assert abs(data["optimal"]["total_length"] - 5072.5) < 1e-6
    assert max(data["optimal"]["piece_lengths"]) <= 1490
    assert data["constraints"]["e_max"] == 150


def test_cli_end_gaps():
    proc = _run("--length", "2341", "--centres", "500", "--end-gaps", "--json")
    assert proc.returncode == 0, proc.stderr
    data = json.loads(proc.stdout)
    assert data["optimal"]["gap_count"] == data["optimal"]["piece_count"] + 1


def test_cli_writes_plot(tmp_path: Path):
    plot = tmp_path / "run.png"
    proc = _run("--length", "2321", "--centres", "500", "--plot", str(plot))
    assert proc.returncode == 0, proc.stderr
    assert plot.is_file()


def test_cli_compare_spacings():
    proc = _run("--length", "2321", "--compare", "300,500")
    assert proc.returncode == 0, proc.stderr
    assert "# Bracket Spacing Comparison" in proc.stdout
    assert "| 500 | 2 | 5 |" in proc.stdout


def test_cli_reports_layout_error():
    proc = _run("--length", "100", "--centres", "500")
    assert proc.returncode == 1
    assert "Error: No valid segmentation" in proc.stderr


def test_cli_requires_centres():
    proc = _run("--length", "2321")
    assert proc.returncode != 0
    assert "--centres is required" in proc.stderr
