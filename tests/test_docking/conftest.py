"""Shared fixtures for job matrix, Vina driver and log parser tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from dockscreen.interfaces import Centroid, DockingConfig, Pocket

VINA_LOG_TEMPLATE = """\
AutoDock Vina v1.2.5
Output will be docked_{name}.pdbqt
Detected 8 CPUs
Performing search ... done.

mode |   affinity | dist from best mode
     | (kcal/mol) | rmsd l.b.| rmsd u.b.
-----+------------+----------+----------
{rows}
Writing output ... done.
"""


def vina_log(name: str, affinities) -> str:
    """Render a Vina-style log with one row per pose."""
    rows = "\n".join(
        f"   {i:<3d}{aff:>11.1f}{0.0 if i == 1 else 1.5:>11.3f}{0.0 if i == 1 else 2.7:>11.3f}"
        for i, aff in enumerate(affinities, start=1)
    )
    return VINA_LOG_TEMPLATE.format(name=name, rows=rows)


@pytest.fixture
def make_vina_log():
    return vina_log


@pytest.fixture
def pockets():
    return [
        Pocket(0, (10, 11, 12), centroid=Centroid(3.0, 4.0, 5.0, n_atoms=3)),
        Pocket(1, (20,), centroid=Centroid(-2.5, 0.0, 4.0, n_atoms=1)),
    ]


@pytest.fixture
def protein_dir(tmp_path) -> Path:
    d = tmp_path / "receptors" / "WNV_E"
    (d / "ligands").mkdir(parents=True)
    (d / "receptor.pdbqt").write_text("REMARK receptor\n")
    return d


@pytest.fixture
def ligand_paths(protein_dir):
    paths = []
    for name in ("DrugB", "DrugA"):
        p = protein_dir / "ligands" / f"{name}.pdbqt"
        p.write_text(f"REMARK {name}\n")
        paths.append(p)
    return paths


@pytest.fixture
def docking_config() -> DockingConfig:
    return DockingConfig(vina_executable="vina", timeout_seconds=30.0)
