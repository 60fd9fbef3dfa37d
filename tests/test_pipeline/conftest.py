"""Synthetic workspace and fake Vina engine for campaign tests."""
from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from dockscreen.docking.job_matrix import parse_config
from dockscreen.interfaces import PipelineConfig, WorkspaceConfig

RECEPTOR_PDB = """\
HEADER    SYNTHETIC RECEPTOR
ATOM      1  N   ALA A  10       9.000   9.000   9.000  1.00  0.00           N
ATOM      2  CA  ALA A  10       1.000   2.000   3.000  1.00  0.00           C
ATOM      3  CA  GLY A  11       3.000   4.000   5.000  1.00  0.00           C
ATOM      4  CA  SER A  12       5.000   6.000   7.000  1.00  0.00           C
ATOM      5  CA  LEU A  13     100.000 100.000 100.000  1.00  0.00           C
ATOM      6  CA  TYR A  20      -2.500   0.000   4.000  1.00  0.00           C
END
"""

# Pockets: [10, 11, 12] -> (3,4,5); [20] -> (-2.5,0,4); [50] -> degraded (0,0,0).
SCORES = """\
10 A 0.500
11 A 0.600
12 A 0.550
13 A 0.050
20 A 0.200
21 A 0.000
50 A 0.900
"""

SCORES_NO_POCKETS = """\
10 A 0.010
11 A 0.020
"""

DESCRIPTORS_CSV = """\
Drug,Consensus Log P,WLOGP,TPSA,#Heavy atoms,Formula
Drug-A,3.0,2.5,80.0,20,C20H20N2O
drug a,3.0,2.5,80.0,20,C20H20N2O
DrugB,1.0,1.0,150.0,25,C25H30
"""

# Rank-1 affinity per (ligand, center_x) written by the fake engine.
AFFINITIES = {
    ("DrugA", "3.000"): -6.1,
    ("DrugA", "-2.500"): -8.3,
    ("DrugA", "0.000"): -2.0,
    ("DrugB", "3.000"): -7.5,
    ("DrugB", "-2.500"): -25.0,
    ("DrugB", "0.000"): -3.0,
    ("DrugC", "3.000"): -5.0,
    ("DrugC", "0.000"): -3.0,
}
FAILING = {("DrugC", "-2.500")}


def _vina_text(affinity: float) -> str:
    return (
        "AutoDock Vina v1.2.5\n\n"
        "mode |   affinity | dist from best mode\n"
        "     | (kcal/mol) | rmsd l.b.| rmsd u.b.\n"
        "-----+------------+----------+----------\n"
        f"   1   {affinity:>10.1f}      0.000      0.000\n"
        f"   2   {affinity + 0.7:>10.1f}      1.912      2.455\n"
        "Writing output ... done.\n"
    )


def fake_vina(cmd, stdout=None, cwd=None, **kwargs):
    """Stand-in for ``subprocess.run`` that behaves like Vina on a config."""
    cfg = parse_config((Path(cwd) / cmd[2]).read_text())
    key = (Path(cfg["ligand"]).stem, cfg["center_x"])
    if key in FAILING:
        stdout.write("ERROR: could not parse ligand\n")
        return subprocess.CompletedProcess(args=cmd, returncode=1)
    stdout.write(_vina_text(AFFINITIES[key]))
    (Path(cwd) / cfg["out"]).write_text("MODEL 1\nENDMDL\n")
    return subprocess.CompletedProcess(args=cmd, returncode=0)


@pytest.fixture
def vina_engine():
    return fake_vina


@pytest.fixture
def workspace(tmp_path) -> Path:
    """Two proteins (WNV_E docks, ZIKV_NS5 has no pockets), three ligands."""
    root = tmp_path / "Vina_Workspace"
    compounds = root / "compounds"
    compounds.mkdir(parents=True)
    for name in ("DrugA", "DrugB", "DrugC"):
        (compounds / f"{name}.pdbqt").write_text(f"REMARK  Name = {name}\n")
    (compounds / "adme_features_for_efficiency.csv").write_text(DESCRIPTORS_CSV)

    for protein, scores in (("WNV_E", SCORES), ("ZIKV_NS5", SCORES_NO_POCKETS)):
        pdir = root / "receptors" / protein
        pdir.mkdir(parents=True)
        (pdir / f"receptor_{protein}.pdb").write_text(RECEPTOR_PDB)
        (pdir / "receptor.pdbqt").write_text("REMARK prepared\n")
        (pdir / "concavity_output.txt.scores").write_text(scores)
    return root


@pytest.fixture
def config(workspace) -> PipelineConfig:
    return PipelineConfig(workspace=WorkspaceConfig(root=str(workspace)))
