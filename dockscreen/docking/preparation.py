"""Wrappers around the external preparation tools.

The tools themselves (MGLTools ``prepare_receptor4.py`` /
``prepare_ligand4.py``, the Concavity pocket scorer) are black boxes; this
module only builds their command lines, bounds them with a timeout, and
checks that the expected artifact appeared.  An empty command list in
``ToolsConfig`` disables a step, and the artifact must then already exist.
"""
from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Tuple

from dockscreen.interfaces import ToolsConfig

logger = logging.getLogger(__name__)

MOL2_SUFFIX = "_antechamber.mol2"
LIGAND_DIR = "ligands"


def _run_tool(cmd: List[str], log_path: Path, timeout: float, cwd: Path) -> Tuple[bool, str]:
    """Run one tool with output captured to *log_path*; return (ok, reason)."""
    logger.debug("Running tool: %s", " ".join(cmd))
    try:
        with open(log_path, "w") as log:
            result = subprocess.run(
                cmd, stdout=log, stderr=subprocess.STDOUT,
                cwd=str(cwd), timeout=timeout,
            )
    except subprocess.TimeoutExpired:
        return False, f"timeout after {timeout:g}s"
    except OSError as exc:
        return False, str(exc)
    if result.returncode != 0:
        return False, f"exit status {result.returncode}"
    return True, ""


def convert_ligands(compounds_dir: Path, tools: ToolsConfig) -> Tuple[int, List[Tuple[str, str]]]:
    """Convert ``*_antechamber.mol2`` ligands to PDBQT inside *compounds_dir*.

    A ligand is skipped when its PDBQT exists and is newer than the MOL2.

    Returns:
        (n_converted, failures) where failures is a list of
        (ligand_name, reason).
    """
    compounds_dir = Path(compounds_dir)
    if not tools.ligand_prep:
        logger.info("Ligand preparation disabled; using existing PDBQT files")
        return 0, []

    converted = 0
    failures: List[Tuple[str, str]] = []
    for mol2 in sorted(compounds_dir.glob(f"*{MOL2_SUFFIX}")):
        name = mol2.name[: -len(MOL2_SUFFIX)]
        pdbqt = compounds_dir / f"{name}.pdbqt"
        if pdbqt.exists() and pdbqt.stat().st_mtime > mol2.stat().st_mtime:
            logger.debug("Skipping %s (PDBQT up to date)", name)
            continue
        cmd = list(tools.ligand_prep) + [
            "-l", mol2.name, "-o", pdbqt.name, "-A", "bonds_hydrogens",
        ]
        ok, reason = _run_tool(
            cmd, compounds_dir / f"Prepare_ligand_{name}_OUT.out",
            tools.timeout_seconds, compounds_dir,
        )
        if ok:
            converted += 1
        else:
            failures.append((name, reason))
            logger.warning("Failed to convert ligand %s: %s", name, reason)

    logger.info("Converted %d ligand(s) to PDBQT (%d failed)", converted, len(failures))
    return converted, failures


def stage_ligands(compounds_dir: Path, protein_dir: Path) -> List[Path]:
    """Copy the ligand PDBQT library into the protein's own ``ligands/`` dir."""
    sources = sorted(Path(compounds_dir).glob("*.pdbqt"))
    target = Path(protein_dir) / LIGAND_DIR
    target.mkdir(parents=True, exist_ok=True)
    staged = []
    for src in sources:
        dst = target / src.name
        shutil.copy2(src, dst)
        staged.append(dst)
    logger.info("Staged %d ligand(s) into %s", len(staged), target)
    return staged


def prepare_receptor(receptor_pdb: Path, output_pdbqt: Path, tools: ToolsConfig) -> bool:
    """Convert the receptor PDB to PDBQT; True when the PDBQT is available."""
    output_pdbqt = Path(output_pdbqt)
    if not tools.receptor_prep:
        return output_pdbqt.exists()
    cmd = list(tools.receptor_prep) + [
        "-r", Path(receptor_pdb).name, "-o", output_pdbqt.name, "-A", "bonds_hydrogens",
    ]
    ok, reason = _run_tool(
        cmd, output_pdbqt.parent / "Prepare_receptor_OUT.out",
        tools.timeout_seconds, output_pdbqt.parent,
    )
    if not ok:
        logger.error("Receptor preparation failed for %s: %s", receptor_pdb, reason)
    return output_pdbqt.exists() and output_pdbqt.stat().st_size > 0


def score_pockets(receptor_pdb: Path, scores_path: Path, tools: ToolsConfig) -> bool:
    """Run the pocket scorer; True when a non-empty score stream exists."""
    scores_path = Path(scores_path)
    if tools.pocket_scorer:
        cmd = list(tools.pocket_scorer) + [Path(receptor_pdb).name, scores_path.name]
        ok, reason = _run_tool(
            cmd, scores_path.parent / "Pocket_scorer_OUT.out",
            tools.timeout_seconds, scores_path.parent,
        )
        if not ok:
            logger.error("Pocket scorer failed for %s: %s", receptor_pdb, reason)
    return scores_path.exists() and scores_path.stat().st_size > 0
