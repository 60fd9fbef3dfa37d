#!/usr/bin/env python3
"""dockscreen campaign orchestrator: multi-protein, multi-pocket docking.

Per protein (one subdirectory of ``<workspace>/receptors``):

    stage ligands -> prepare receptor -> score pockets -> extract pockets
    -> centroids -> job matrix -> Vina -> parse logs -> best affinity
    -> efficiency -> descriptor join -> permeability -> result tables

A failing job never stops its protein, and a failing protein never stops
the campaign: the former is a ``FAILED`` line, the latter an ``ABORTED``
line in the run report.  Only workspace-level problems (missing receptors
or compounds folder, missing descriptor table) stop the whole run.

Usage::

    dockscreen --workspace ~/Vina_Workspace --max-workers 4
    dockscreen --config my_campaign.yaml --mode analyze --protein WNV_E
    python -m dockscreen.pipeline.campaign --dry-run -v
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from dockscreen.analysis.aggregation import aggregate_best_affinity
from dockscreen.analysis.descriptors import (
    collapse_duplicates,
    join_descriptors,
    load_descriptor_table,
)
from dockscreen.analysis.efficiency import compute_efficiency, rank_by_lle
from dockscreen.analysis.permeability import classify_permeability
from dockscreen.docking.job_matrix import DOCKING_DIR, build_job_matrix
from dockscreen.docking.log_parser import parse_log_dir
from dockscreen.docking.preparation import (
    convert_ligands,
    prepare_receptor,
    score_pockets,
    stage_ligands,
)
from dockscreen.docking.vina_driver import VinaDriver
from dockscreen.interfaces import PipelineConfig
from dockscreen.pipeline import run_report as rr
from dockscreen.pipeline.result_tables import write_result_tables
from dockscreen.pockets.centroid import assign_centroids, read_reference_atoms
from dockscreen.pockets.pocket_extractor import pockets_from_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).with_name("pipeline_config.yaml")
MODES = ("full", "dock", "analyze")
CAMPAIGN = "campaign"


class WorkspaceError(RuntimeError):
    """The workspace cannot support a run at all."""


class ProteinAbort(RuntimeError):
    """Processing of one protein cannot continue."""


# ---------------------------------------------------------------------------
# Per-protein outcome
# ---------------------------------------------------------------------------

@dataclass
class ProteinOutcome:
    """What happened to one protein during the campaign."""

    protein: str
    status: str = "completed"          # "completed" | "aborted"
    reason: str = ""
    n_pockets: int = 0
    n_jobs: int = 0
    n_failed_jobs: int = 0
    n_logs: int = 0
    n_ranked: int = 0
    n_excluded: int = 0
    tables: Dict[str, str] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == "completed"

    def summary_line(self) -> str:
        if not self.ok:
            return f"{self.protein}: ABORTED ({self.reason})"
        return (
            f"{self.protein}: {self.n_pockets} pocket(s), "
            f"{self.n_jobs - self.n_failed_jobs}/{self.n_jobs} job(s) ok, "
            f"{self.n_logs} log(s), {self.n_ranked} ranked, {self.n_excluded} excluded"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class CampaignPipeline:
    """Run the docking campaign over every protein of a workspace."""

    def __init__(self, config: PipelineConfig, report: Optional[rr.RunReport] = None) -> None:
        self.config = config
        self.report = report or rr.RunReport(path=str(config.workspace.report_path))
        self._descriptors: Optional[pd.DataFrame] = None
        self._descriptors_loaded = False

    # ── Workspace ─────────────────────────────────────────────────────

    def validate_workspace(self, mode: str = "full") -> None:
        """Raise WorkspaceError when the run cannot start."""
        ws = self.config.workspace
        if not ws.receptors_path.is_dir():
            raise WorkspaceError(f"Receptors folder not found: {ws.receptors_path}")
        if mode != "analyze" and not ws.compounds_path.is_dir():
            raise WorkspaceError(f"Compounds folder not found: {ws.compounds_path}")
        descriptor_path = ws.descriptor_path
        if mode != "dock" and descriptor_path is not None and not descriptor_path.is_file():
            raise WorkspaceError(f"Descriptor table not found: {descriptor_path}")

    def discover_proteins(self, mode: str = "full") -> List[str]:
        """Explicit protein list, or every receptors subfolder (sorted).

        In analysis-only mode, folders without docking logs are skipped.
        """
        ws = self.config.workspace
        if self.config.campaign.proteins:
            return list(self.config.campaign.proteins)
        proteins = sorted(p.name for p in ws.receptors_path.iterdir() if p.is_dir())
        if mode == "analyze":
            proteins = [
                p for p in proteins
                if any((ws.protein_dir(p) / DOCKING_DIR).glob("*.log"))
            ]
        logger.info("Discovered %d protein(s): %s", len(proteins), ", ".join(proteins))
        return proteins

    def load_descriptors(self) -> Optional[pd.DataFrame]:
        """Load and collapse the descriptor table once per campaign."""
        if self._descriptors_loaded:
            return self._descriptors
        path = self.config.workspace.descriptor_path
        if path is not None:
            column = self.config.analysis.ligand_column
            try:
                self._descriptors = collapse_duplicates(
                    load_descriptor_table(path, column), column,
                )
            except ValueError as exc:
                raise WorkspaceError(str(exc)) from exc
        self._descriptors_loaded = True
        return self._descriptors

    # ── Per protein ───────────────────────────────────────────────────

    def run_protein(self, protein: str, analyze: bool = True) -> ProteinOutcome:
        """Prepare, dock and (optionally) analyze one protein.

        Raises:
            ProteinAbort: When a prerequisite of this protein is missing.
        """
        ws = self.config.workspace
        tools = self.config.tools
        pdir = ws.protein_dir(protein)
        receptor_pdb = ws.receptor_pdb(protein)
        if not receptor_pdb.is_file():
            raise ProteinAbort(f"receptor structure not found: {receptor_pdb}")

        outcome = ProteinOutcome(protein=protein)
        ligands = stage_ligands(ws.compounds_path, pdir)
        if not ligands:
            raise ProteinAbort(f"no ligand PDBQT files in {ws.compounds_path}")

        receptor_pdbqt = pdir / ws.prepared_receptor_name
        if not prepare_receptor(receptor_pdb, receptor_pdbqt, tools):
            raise ProteinAbort(f"prepared receptor not available: {receptor_pdbqt}")

        scores_path = pdir / ws.scores_filename
        if not score_pockets(receptor_pdb, scores_path, tools):
            raise ProteinAbort(f"pocket score stream missing or empty: {scores_path}")

        pockets = pockets_from_file(scores_path, self.config.pockets.threshold)
        if not pockets:
            raise ProteinAbort(
                f"no pocket above threshold {self.config.pockets.threshold:g}"
            )

        atom_name = self.config.pockets.reference_atom
        pockets = assign_centroids(pockets, read_reference_atoms(receptor_pdb, atom_name))
        for pocket in pockets:
            if pocket.centroid.degraded:
                self.report.warn(
                    protein, rr.DEGRADED_CENTROID,
                    f"no {atom_name} atom for residues {list(pocket.residue_ids)}; "
                    f"box centred at (0,0,0)",
                    pocket=pocket.label,
                )
        outcome.n_pockets = len(pockets)

        jobs = build_job_matrix(
            protein, pockets, ligands, pdir, receptor_pdbqt, self.config.docking,
        )
        job_outcomes = VinaDriver(self.config.docking, self.report).run_jobs(jobs)
        outcome.n_jobs = len(job_outcomes)
        outcome.n_failed_jobs = sum(1 for o in job_outcomes if not o.success)

        if analyze:
            if self.config.docking.dry_run:
                logger.info("%s: dry run, skipping analysis", protein)
            else:
                self.analyze_protein(protein, outcome)
        return outcome

    def analyze_protein(
        self, protein: str, outcome: Optional[ProteinOutcome] = None,
    ) -> ProteinOutcome:
        """Turn the protein's docking logs into result tables.

        Raises:
            ProteinAbort: When no log holds a usable affinity.
        """
        if outcome is None:
            outcome = ProteinOutcome(protein=protein)
        analysis = self.config.analysis
        pdir = self.config.workspace.protein_dir(protein)

        records = parse_log_dir(pdir / DOCKING_DIR, expected_protein=protein)
        if not any(r.parsed for r in records):
            raise ProteinAbort(f"no docking results in {pdir / DOCKING_DIR}")

        for rec in records:
            if not rec.parsed:
                self.report.warn(
                    protein, rr.UNPARSABLE_LOG,
                    f"no rank-1 affinity in {rec.source_file}",
                    ligand=rec.ligand, pocket=rec.pocket,
                )
            if rec.ambiguous:
                self.report.warn(
                    protein, rr.AMBIGUOUS_LOG_NAME,
                    f"{rec.source_file} read as protein={rec.protein}",
                    ligand=rec.ligand, pocket=rec.pocket,
                )

        agg = aggregate_best_affinity(records, analysis.affinity_band)
        for row in agg.excluded.itertuples(index=False):
            if row.exclusion_reason == "out_of_band":
                self.report.warn(
                    protein, rr.OUT_OF_BAND,
                    f"best affinity {row.min_affinity:g} outside "
                    f"({analysis.affinity_min:g}, {analysis.affinity_max:g})",
                    ligand=row.ligand, pocket=row.best_pocket,
                )
            else:
                self.report.warn(
                    protein, rr.NO_AFFINITY,
                    "no pocket produced an affinity", ligand=row.ligand,
                )

        joined, missing = join_descriptors(
            agg.ranked, self.load_descriptors(), analysis.ligand_column,
        )
        for ligand in missing:
            self.report.warn(
                protein, rr.MISSING_DESCRIPTORS,
                "ligand not found in descriptor table", ligand=ligand,
            )

        efficiency = compute_efficiency(joined, analysis)
        efficiency = classify_permeability(efficiency, analysis.egg_logp_column)
        ranked = rank_by_lle(efficiency)
        tables = write_result_tables(protein, pdir, agg, ranked, analysis.top_n)

        outcome.n_logs = len(records)
        outcome.n_ranked = len(ranked)
        outcome.n_excluded = len(agg.excluded)
        outcome.tables = {kind: str(path) for kind, path in tables.items()}
        return outcome

    def _process(self, protein: str, mode: str) -> ProteinOutcome:
        logger.info("=" * 60)
        logger.info("Protein %s (mode: %s)", protein, mode)
        t0 = time.monotonic()
        try:
            if mode == "analyze":
                outcome = self.analyze_protein(protein)
            else:
                outcome = self.run_protein(protein, analyze=(mode == "full"))
        except ProteinAbort as exc:
            self.report.abort_protein(protein, str(exc))
            outcome = ProteinOutcome(protein=protein, status="aborted", reason=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while processing %s", protein)
            reason = f"unexpected error: {exc}"
            self.report.abort_protein(protein, reason)
            outcome = ProteinOutcome(protein=protein, status="aborted", reason=reason)
        outcome.duration_seconds = round(time.monotonic() - t0, 3)
        return outcome

    # ── Campaign ──────────────────────────────────────────────────────

    def run(self, mode: str = "full") -> List[ProteinOutcome]:
        """Run the campaign; outcomes follow protein discovery order.

        Raises:
            WorkspaceError: Before any protein runs, if the workspace is unusable.
        """
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")
        self.validate_workspace(mode)
        if mode != "dock":
            self.load_descriptors()
        proteins = self.discover_proteins(mode)

        self.report.start()
        if mode != "analyze":
            n_converted, failures = convert_ligands(
                self.config.workspace.compounds_path, self.config.tools,
            )
            if self.config.tools.ligand_prep:
                self.report.info(
                    CAMPAIGN,
                    f"ligand conversion: {n_converted} converted, {len(failures)} failed",
                )
            for name, reason in failures:
                self.report.warn(
                    CAMPAIGN, rr.LIGAND_CONVERSION, f"conversion failed: {reason}", ligand=name,
                )

        workers = min(self.config.campaign.max_parallel_proteins, max(len(proteins), 1))
        if workers <= 1:
            outcomes = [self._process(p, mode) for p in proteins]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(lambda p: self._process(p, mode), proteins))

        self.report.finalize(outcomes)
        self.report.save_json()
        n_aborted = sum(1 for o in outcomes if not o.ok)
        logger.info(
            "Campaign complete: %d protein(s), %d aborted. Report: %s",
            len(outcomes), n_aborted, self.report.path,
        )
        return outcomes


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Multi-protein, multi-pocket AutoDock Vina screening campaign",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", default=str(DEFAULT_CONFIG),
        help="Campaign YAML config (default: packaged pipeline_config.yaml)",
    )
    parser.add_argument(
        "--workspace", default=None,
        help="Override workspace root from config",
    )
    parser.add_argument(
        "--mode", choices=MODES, default="full",
        help="full = dock + analyze; dock = no analysis; analyze = existing logs only",
    )
    parser.add_argument(
        "--max-workers", type=int, default=None,
        help="Concurrent Vina jobs per protein",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Per-job Vina timeout in seconds",
    )
    parser.add_argument(
        "--protein", action="append", default=None,
        help="Restrict the run to this protein (repeatable)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Write configs and report but do not invoke Vina",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Load the YAML config and apply CLI overrides."""
    config = PipelineConfig.from_yaml_file(args.config)
    if args.workspace:
        config.workspace.root = args.workspace
    if args.max_workers is not None:
        if args.max_workers < 1:
            raise ValueError("--max-workers must be >= 1")
        config.docking.max_workers = args.max_workers
    if args.timeout is not None:
        config.docking.timeout_seconds = args.timeout
    if args.protein:
        config.campaign.proteins = list(args.protein)
    if args.dry_run:
        config.docking.dry_run = True
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = build_config(args)
    logger.debug("Effective config:\n%s", json.dumps(config.to_dict(), indent=2))

    try:
        outcomes = CampaignPipeline(config).run(args.mode)
    except WorkspaceError as exc:
        logger.error("Run aborted: %s", exc)
        return 2

    return 1 if any(not o.ok for o in outcomes) else 0


if __name__ == "__main__":
    sys.exit(main())
