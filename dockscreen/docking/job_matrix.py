"""Docking job matrix: one job per (ligand, pocket) pair of one protein.

Artifact names encode protein, ligand and pocket index so the log parser
can invert them.  Two log naming schemes are supported:

    pocket_suffix   <protein>_<ligand>_pocket<idx>.log
    positional      <protein>_<ligand>_<idx>.log
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from dockscreen.interfaces import DockingConfig, DockingJob, Pocket

logger = logging.getLogger(__name__)

CONFIG_DIR = "configs"
DOCKING_DIR = "dockings"


def log_name(protein: str, ligand_id: str, pocket_index: int, naming: str = "pocket_suffix") -> str:
    """Log file name for one job under the given naming scheme."""
    if naming == "pocket_suffix":
        return f"{protein}_{ligand_id}_pocket{pocket_index}.log"
    if naming == "positional":
        return f"{protein}_{ligand_id}_{pocket_index}.log"
    raise ValueError(f"Unknown naming scheme: {naming!r}")


def build_job_matrix(
    protein: str,
    pockets: Iterable[Pocket],
    ligand_paths: Iterable[Path],
    workdir: Path,
    receptor_path: Path,
    config: Optional[DockingConfig] = None,
) -> List[DockingJob]:
    """Enumerate the full ligand x pocket cross product.

    Args:
        protein: Protein identifier.
        pockets: Pockets with centroids assigned.
        ligand_paths: Ligand PDBQT files; the stem is the ligand id.
        workdir: Protein working directory.
        receptor_path: Prepared receptor shared by all jobs.
        config: Docking settings (naming scheme); defaults if None.

    Returns:
        Jobs ordered ligand-major (sorted by file name), then pocket id.
    """
    if config is None:
        config = DockingConfig()
    workdir = Path(workdir)
    pockets = list(pockets)
    ligands = sorted(Path(p) for p in ligand_paths)

    for pocket in pockets:
        if pocket.centroid is None:
            raise ValueError(f"Pocket {pocket.pocket_id} has no centroid assigned")

    jobs: List[DockingJob] = []
    for ligand_path in ligands:
        ligand_id = ligand_path.stem
        for pocket in pockets:
            idx = pocket.pocket_id
            jobs.append(DockingJob(
                protein=protein,
                ligand_id=ligand_id,
                pocket=pocket,
                workdir=workdir,
                receptor_path=Path(receptor_path),
                ligand_path=ligand_path,
                config_path=workdir / CONFIG_DIR / f"config_{ligand_id}_pocket_{idx}.txt",
                output_path=workdir / DOCKING_DIR / f"docked_{protein}_{ligand_id}_pocket_{idx}.pdbqt",
                log_path=workdir / DOCKING_DIR / log_name(protein, ligand_id, idx, config.naming),
            ))

    logger.info(
        "%s: %d ligand(s) x %d pocket(s) = %d job(s)",
        protein, len(ligands), len(pockets), len(jobs),
    )
    return jobs


def render_config(job: DockingJob, config: DockingConfig) -> str:
    """Vina configuration text for *job* (one ``key = value`` per line)."""
    cx, cy, cz = job.pocket.centroid.xyz
    sx, sy, sz = config.box_size
    lines = [
        f"receptor = {job.relative(job.receptor_path)}",
        f"ligand = {job.relative(job.ligand_path)}",
        f"center_x = {cx:.3f}",
        f"center_y = {cy:.3f}",
        f"center_z = {cz:.3f}",
        f"size_x = {sx:g}",
        f"size_y = {sy:g}",
        f"size_z = {sz:g}",
        f"num_modes = {config.num_modes}",
        f"exhaustiveness = {config.exhaustiveness}",
        f"energy_range = {config.energy_range:g}",
        f"out = {job.relative(job.output_path)}",
    ]
    return "\n".join(lines) + "\n"


def write_config(job: DockingJob, config: DockingConfig) -> Path:
    """Materialize the job's configuration file and its output folders."""
    job.config_path.parent.mkdir(parents=True, exist_ok=True)
    job.log_path.parent.mkdir(parents=True, exist_ok=True)
    job.output_path.parent.mkdir(parents=True, exist_ok=True)
    job.config_path.write_text(render_config(job, config))
    return job.config_path


def parse_config(text: str) -> dict:
    """Parse a ``key = value`` Vina configuration back into a dict."""
    values = {}
    for line in text.splitlines():
        if "=" not in line or line.lstrip().startswith("#"):
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip()
    return values
