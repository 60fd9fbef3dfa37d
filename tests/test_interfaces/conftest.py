"""Shared mock data fixtures for interface tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from dockscreen.interfaces import (
    Centroid,
    DockingConfig,
    DockingJob,
    PipelineConfig,
    Pocket,
    ResultRecord,
    WorkspaceConfig,
)


# ── Pocket fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def sample_centroid() -> Centroid:
    return Centroid(x=12.5, y=-3.25, z=8.0, n_atoms=3)


@pytest.fixture
def sample_pocket(sample_centroid) -> Pocket:
    return Pocket(pocket_id=2, residue_ids=(141, 142, 143), centroid=sample_centroid)


# ── Job fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def sample_job(sample_pocket) -> DockingJob:
    workdir = Path("/ws/receptors/WNV_E")
    return DockingJob(
        protein="WNV_E",
        ligand_id="DrugA",
        pocket=sample_pocket,
        workdir=workdir,
        receptor_path=workdir / "receptor.pdbqt",
        ligand_path=workdir / "ligands" / "DrugA.pdbqt",
        config_path=workdir / "configs" / "config_DrugA_pocket_2.txt",
        output_path=workdir / "dockings" / "docked_WNV_E_DrugA_pocket_2.pdbqt",
        log_path=workdir / "dockings" / "WNV_E_DrugA_pocket2.log",
    )


@pytest.fixture
def sample_record() -> ResultRecord:
    return ResultRecord(
        protein="WNV_E",
        ligand="DrugA",
        pocket="pocket3",
        affinity=-8.3,
        source_file="WNV_E_DrugA_pocket3.log",
    )


# ── Config fixtures ──────────────────────────────────────────────────────

@pytest.fixture
def sample_config() -> PipelineConfig:
    return PipelineConfig(
        workspace=WorkspaceConfig(root="/data/campaign"),
        docking=DockingConfig(exhaustiveness=16, max_workers=4, naming="positional"),
    )
