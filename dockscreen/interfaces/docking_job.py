"""DockingJob interface: one (ligand, pocket) docking unit for one protein.

Created by the job-matrix builder, consumed exactly once by the Vina driver,
which turns it into a JobOutcome.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .pocket import Pocket


@dataclass(frozen=True)
class DockingJob:
    """A single docking invocation.

    Attributes:
        protein:        Protein (target) identifier.
        ligand_id:      Ligand identifier (PDBQT file stem).
        pocket:         Pocket whose centroid anchors the search box.
        workdir:        Protein working directory; relative paths below are
                        resolved against it.
        receptor_path:  Prepared receptor (PDBQT), shared read-only.
        ligand_path:    Ligand PDBQT.
        config_path:    Vina configuration file written for this job.
        output_path:    Docked-pose output file.
        log_path:       Engine log (stdout + stderr).
    """
    protein: str
    ligand_id: str
    pocket: Pocket
    workdir: Path
    receptor_path: Path
    ligand_path: Path
    config_path: Path
    output_path: Path
    log_path: Path

    @property
    def pocket_index(self) -> int:
        return self.pocket.pocket_id

    @property
    def identity(self) -> str:
        """Human-readable identity used in reports."""
        return (
            f"Protein: {self.protein} | Ligand: {self.ligand_id} | "
            f"Pocket #{self.pocket_index}"
        )

    def relative(self, path: Path) -> str:
        """Path as written into the Vina config (relative to workdir)."""
        try:
            return str(Path(path).relative_to(self.workdir))
        except ValueError:
            return str(path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protein": self.protein,
            "ligand_id": self.ligand_id,
            "pocket": self.pocket.to_dict(),
            "workdir": str(self.workdir),
            "receptor_path": str(self.receptor_path),
            "ligand_path": str(self.ligand_path),
            "config_path": str(self.config_path),
            "output_path": str(self.output_path),
            "log_path": str(self.log_path),
        }


@dataclass
class JobOutcome:
    """Result of running one DockingJob.

    Attributes:
        job:               The job that was run.
        success:           True when the engine exited with status 0.
        returncode:        Engine exit status, or None if it never ran.
        reason:            Failure reason (empty on success).
        duration_seconds:  Wall time of the invocation.
    """
    job: DockingJob
    success: bool
    returncode: Optional[int] = None
    reason: str = ""
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "protein": self.job.protein,
            "ligand": self.job.ligand_id,
            "pocket": self.job.pocket_index,
            "log_path": str(self.job.log_path),
            "success": self.success,
            "returncode": self.returncode,
            "reason": self.reason,
            "duration_seconds": self.duration_seconds,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
