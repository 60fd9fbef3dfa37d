"""PipelineConfig interface: workspace paths, thresholds and engine settings.

Passed explicitly to every pipeline component so tests can point the whole
campaign at a synthetic temporary workspace.
"""
from __future__ import annotations

import copy
import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


@dataclass
class WorkspaceConfig:
    """Workspace layout.

    Attributes:
        root:                   Workspace root (``~`` is expanded).
        receptors_dir:          Per-protein subdirectories, relative to root.
        compounds_dir:          Ligand library, relative to root.
        report_name:            Run-level report file name (in root).
        descriptor_table:       Descriptor CSV relative to compounds_dir, or
                                None to skip descriptor integration.
        scores_filename:        Pocket-scorer output inside a protein dir.
        receptor_template:      Receptor PDB name; ``{protein}`` is replaced.
        prepared_receptor_name: Prepared receptor PDBQT name.
    """
    root: str = "~/Vina_Workspace"
    receptors_dir: str = "receptors"
    compounds_dir: str = "compounds"
    report_name: str = "Final_report.txt"
    descriptor_table: Optional[str] = "adme_features_for_efficiency.csv"
    scores_filename: str = "concavity_output.txt.scores"
    receptor_template: str = "receptor_{protein}.pdb"
    prepared_receptor_name: str = "receptor.pdbqt"

    @property
    def root_path(self) -> Path:
        return Path(os.path.expanduser(self.root))

    @property
    def receptors_path(self) -> Path:
        return self.root_path / self.receptors_dir

    @property
    def compounds_path(self) -> Path:
        return self.root_path / self.compounds_dir

    @property
    def report_path(self) -> Path:
        return self.root_path / self.report_name

    @property
    def descriptor_path(self) -> Optional[Path]:
        if not self.descriptor_table:
            return None
        return self.compounds_path / self.descriptor_table

    def protein_dir(self, protein: str) -> Path:
        return self.receptors_path / protein

    def receptor_pdb(self, protein: str) -> Path:
        return self.protein_dir(protein) / self.receptor_template.format(protein=protein)


@dataclass
class PocketConfig:
    """Pocket extraction settings.

    Attributes:
        threshold:       Residues scoring strictly above this join a pocket.
        reference_atom:  Atom name averaged for the centroid (PDB cols 13-16).
    """
    threshold: float = 0.1
    reference_atom: str = "CA"


@dataclass
class DockingConfig:
    """Docking-stage configuration.

    Attributes:
        vina_executable:  Engine binary (name on PATH or absolute path).
        box_size:         (sx, sy, sz) search-box dimensions in Angstrom.
        num_modes:        Max poses per job.
        exhaustiveness:   Search exhaustiveness.
        energy_range:     Energy window (kcal/mol) for reported poses.
        naming:           Log naming scheme, "pocket_suffix" or "positional".
        timeout_seconds:  Per-job wall-clock bound; a timeout is a failure.
        max_workers:      Concurrent engine invocations per protein.
        dry_run:          Write configs but do not invoke the engine.
    """
    vina_executable: str = "vina"
    box_size: Tuple[float, float, float] = (20.0, 20.0, 20.0)
    num_modes: int = 9
    exhaustiveness: int = 8
    energy_range: float = 4
    naming: str = "pocket_suffix"
    timeout_seconds: float = 3600.0
    max_workers: int = 1
    dry_run: bool = False

    def __post_init__(self) -> None:
        self.box_size = tuple(float(v) for v in self.box_size)  # type: ignore[assignment]
        if len(self.box_size) != 3:
            raise ValueError(f"box_size needs 3 values, got {self.box_size}")
        if self.naming not in ("pocket_suffix", "positional"):
            raise ValueError(f"Unknown naming scheme: {self.naming!r}")
        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")


@dataclass
class ToolsConfig:
    """External preparation tools.

    Each command is a list prefix; arguments are appended by the caller.
    An empty list disables the step, in which case its output artifact must
    already exist in the workspace.

    Attributes:
        receptor_prep:    e.g. ["pythonsh", ".../prepare_receptor4.py"].
        ligand_prep:      e.g. ["pythonsh", ".../prepare_ligand4.py"].
        pocket_scorer:    e.g. ["concavity"].
        timeout_seconds:  Bound for each tool invocation.
    """
    receptor_prep: List[str] = field(default_factory=list)
    ligand_prep: List[str] = field(default_factory=list)
    pocket_scorer: List[str] = field(default_factory=list)
    timeout_seconds: float = 1800.0


@dataclass
class AnalysisConfig:
    """Post-docking analysis settings.

    Attributes:
        affinity_min:        Lower (exclusive) bound of the plausible band.
        affinity_max:        Upper (exclusive) bound of the plausible band.
        gas_constant:        R in kcal/(mol K).
        temperature:         T in K.
        logp_chain:          Lipophilicity columns, in preference order.
        heavy_atom_columns:  Heavy-atom-count columns, in preference order.
        egg_logp_column:     Estimator preferred by the BOILED-Egg model.
        ligand_column:       Ligand-name column of the descriptor table
                             (after header cleaning).
        top_n:               Rows kept in the top-N table.
    """
    affinity_min: float = -20.0
    affinity_max: float = 0.0
    gas_constant: float = 1.9872036e-3
    temperature: float = 310.15
    logp_chain: List[str] = field(
        default_factory=lambda: [
            "consensus_log_p", "xlogp3", "wlogp", "mlogp", "i_logp",
        ]
    )
    heavy_atom_columns: List[str] = field(
        default_factory=lambda: ["hac", "number_heavy_atoms"]
    )
    egg_logp_column: str = "wlogp"
    ligand_column: str = "drug"
    top_n: int = 20

    @property
    def affinity_band(self) -> Tuple[float, float]:
        return (self.affinity_min, self.affinity_max)


@dataclass
class CampaignConfig:
    """Which proteins to run and how many at once.

    Attributes:
        proteins:               Explicit protein list; empty means every
                                subdirectory of the receptors dir.
        max_parallel_proteins:  Proteins processed concurrently.
    """
    proteins: List[str] = field(default_factory=list)
    max_parallel_proteins: int = 1


@dataclass
class PipelineConfig:
    """Top-level configuration tying all stages together."""
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    pockets: PocketConfig = field(default_factory=PocketConfig)
    docking: DockingConfig = field(default_factory=DockingConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    campaign: CampaignConfig = field(default_factory=CampaignConfig)

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["docking"]["box_size"] = list(d["docking"]["box_size"])
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> PipelineConfig:
        data = copy.deepcopy(d or {})
        return cls(
            workspace=WorkspaceConfig(**(data.get("workspace") or {})),
            pockets=PocketConfig(**(data.get("pockets") or {})),
            docking=DockingConfig(**(data.get("docking") or {})),
            tools=ToolsConfig(**(data.get("tools") or {})),
            analysis=AnalysisConfig(**(data.get("analysis") or {})),
            campaign=CampaignConfig(**(data.get("campaign") or {})),
        )

    @classmethod
    def from_json(cls, s: str) -> PipelineConfig:
        return cls.from_dict(json.loads(s))

    @classmethod
    def from_json_file(cls, path: str) -> PipelineConfig:
        with open(path) as f:
            return cls.from_dict(json.load(f))

    @classmethod
    def from_yaml_file(cls, path: str) -> PipelineConfig:
        with open(path) as f:
            return cls.from_dict(yaml.safe_load(f))

    def save_yaml(self, path: str) -> None:
        """Write configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
