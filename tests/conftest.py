"""
Shared test fixtures for run layout optimizer tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from angle_hardware import RunLayoutConfig, get_standard_lengths
from run_contracts import EdgeDistanceConstraints


@pytest.fixture
def layout_config():
    """Default hardware constants (gaps between pieces only)."""
    return RunLayoutConfig()


@pytest.fixture
def end_gap_config():
    """Hardware constants with a gap at each run end as well."""
    return RunLayoutConfig(end_gaps=True)


@pytest.fixture
def constraints_500():
    """Edge window for 500mm centres: 35 to 250mm."""
    return EdgeDistanceConstraints(e_min=35.0, e_max=250.0)


@pytest.fixture
def constraints_300():
    """Edge window for 300mm centres: 35 to 150mm."""
    return EdgeDistanceConstraints(e_min=35.0, e_max=150.0)


@pytest.fixture
def catalog_500():
    return get_standard_lengths(500)


@pytest.fixture
def catalog_300():
    return get_standard_lengths(300)
