"""Shared fixtures for pocket extraction and centroid tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from dockscreen.interfaces import ScoreRecord

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def mock_receptor_pdb(fixtures_dir: Path) -> Path:
    return fixtures_dir / "mock_receptor.pdb"


@pytest.fixture
def mock_scores(fixtures_dir: Path) -> Path:
    return fixtures_dir / "mock_scores.txt.scores"


@pytest.fixture
def example_stream():
    """(10,.5),(11,.6),(12,.55),(13,.05),(20,.2) -> pockets [10,11,12], [20]."""
    return [
        ScoreRecord(10, 0.5),
        ScoreRecord(11, 0.6),
        ScoreRecord(12, 0.55),
        ScoreRecord(13, 0.05),
        ScoreRecord(20, 0.2),
    ]
