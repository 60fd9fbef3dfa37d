"""Run-level report for a docking campaign.

An append-only, human-readable text log (``Final_report.txt``) plus a JSON
twin with the same entries in structured form.  Records:

- every docking job (identity + box centre)
- per-job failures (non-zero exit, timeout, missing engine)
- per-record warnings (degraded centroid, unparsable log, ambiguous log
  name, out-of-band affinity, ligand missing from descriptors)
- per-protein aborts and the closing summary

Every failure line carries protein, ligand and pocket so that the single
job can be reproduced and re-run.  The report is the only object shared
between concurrently running jobs; all writes go through one lock.

Usage::

    report = RunReport(path="~/Vina_Workspace/Final_report.txt")
    report.start()
    report.log_job(job)
    report.record_failure(job, "exit status 1")
    report.warn("WNV_E", "degraded_centroid", "no CA matched", pocket="pocket2")
    report.finalize(outcomes)
    report.save_json()
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from dockscreen.interfaces import DockingJob

logger = logging.getLogger(__name__)

# Warning categories used by the pipeline.
DEGRADED_CENTROID = "degraded_centroid"
UNPARSABLE_LOG = "unparsable_log"
AMBIGUOUS_LOG_NAME = "ambiguous_log_name"
OUT_OF_BAND = "out_of_band_affinity"
NO_AFFINITY = "no_affinity"
MISSING_DESCRIPTORS = "missing_descriptors"
LIGAND_CONVERSION = "ligand_conversion"


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ReportEntry:
    """One line of the run report."""

    kind: str                      # "job" | "failure" | "warning" | "abort" | "info"
    protein: str
    message: str
    ligand: Optional[str] = None
    pocket: Optional[str] = None
    category: str = ""
    timestamp: str = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def render(self) -> str:
        where = f"Protein: {self.protein}"
        if self.ligand is not None:
            where += f" | Ligand: {self.ligand}"
        if self.pocket is not None:
            where += f" | Pocket: {self.pocket}"
        if self.kind == "failure":
            return f"FAILED  {where} | {self.message}"
        if self.kind == "warning":
            return f"WARNING [{self.category}] {where} | {self.message}"
        if self.kind == "abort":
            return f"ABORTED {where} | {self.message}"
        return f"{where} | {self.message}"


@dataclass
class RunReport:
    """Append-only campaign report."""

    path: str
    started: str = ""
    finished: str = ""
    entries: List[ReportEntry] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    # ── Lifecycle ──────────────────────────────────────────────────────

    def start(self) -> None:
        """Write the report header, replacing any report from a previous run."""
        self.started = _utcnow()
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        out = Path(self.path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            out.write_text(
                f"Docking Report - {stamp}\n" + "-" * 40 + "\n",
                encoding="utf-8",
            )
        logger.info("Run report started: %s", out)

    def finalize(self, outcomes: Iterable[Any] = ()) -> None:
        """Append the closing summary (one line per protein outcome)."""
        self.finished = _utcnow()
        lines = ["-" * 40, "Summary"]
        for outcome in outcomes:
            lines.append(outcome.summary_line())
        lines.append(
            f"Failures: {len(self.failures)} | Warnings: {len(self.warnings)} | "
            f"Aborted proteins: {len(self.aborts)}"
        )
        self._append_lines(lines)
        logger.info(
            "Run report finalized: %d failure(s), %d warning(s), %d abort(s)",
            len(self.failures), len(self.warnings), len(self.aborts),
        )

    # ── Recording ─────────────────────────────────────────────────────

    def log_job(self, job: DockingJob) -> None:
        """Record a job identity and its box centre before it runs."""
        center = job.pocket.centroid.format() if job.pocket.centroid else "(unassigned)"
        entry = ReportEntry(
            kind="job",
            protein=job.protein,
            ligand=job.ligand_id,
            pocket=job.pocket.label,
            message=f"Center: {center}",
        )
        self._add(entry, [job.identity, f"  Center: {center}"])

    def record_failure(self, job: DockingJob, reason: str) -> None:
        """Record a failed or timed-out docking job."""
        entry = ReportEntry(
            kind="failure",
            protein=job.protein,
            ligand=job.ligand_id,
            pocket=job.pocket.label,
            message=f"{reason} (log: {job.log_path})",
        )
        self._add(entry)
        logger.error("Job failed: %s: %s", job.identity, reason)

    def warn(
        self,
        protein: str,
        category: str,
        message: str,
        ligand: Optional[str] = None,
        pocket: Optional[str] = None,
    ) -> None:
        """Record a recoverable per-record condition."""
        entry = ReportEntry(
            kind="warning",
            protein=protein,
            ligand=ligand,
            pocket=pocket,
            category=category,
            message=message,
        )
        self._add(entry)
        logger.warning("%s: [%s] %s", protein, category, message)

    def abort_protein(self, protein: str, reason: str) -> None:
        """Record that processing of *protein* stopped."""
        self._add(ReportEntry(kind="abort", protein=protein, message=reason))
        logger.error("Protein %s aborted: %s", protein, reason)

    def info(self, protein: str, message: str) -> None:
        self._add(ReportEntry(kind="info", protein=protein, message=message))

    def _add(self, entry: ReportEntry, lines: Optional[List[str]] = None) -> None:
        with self._lock:
            self.entries.append(entry)
            self._write(lines if lines is not None else [entry.render()])

    def _append_lines(self, lines: List[str]) -> None:
        with self._lock:
            self._write(lines)

    def _write(self, lines: List[str]) -> None:
        out = Path(self.path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "a", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")

    # ── Queries ───────────────────────────────────────────────────────

    def _of_kind(self, kind: str, protein: Optional[str] = None) -> List[ReportEntry]:
        with self._lock:
            return [
                e for e in self.entries
                if e.kind == kind and (protein is None or e.protein == protein)
            ]

    @property
    def failures(self) -> List[ReportEntry]:
        return self._of_kind("failure")

    @property
    def warnings(self) -> List[ReportEntry]:
        return self._of_kind("warning")

    @property
    def aborts(self) -> List[ReportEntry]:
        return self._of_kind("abort")

    def failures_for(self, protein: str) -> List[ReportEntry]:
        return self._of_kind("failure", protein)

    def warnings_for(self, protein: str, category: Optional[str] = None) -> List[ReportEntry]:
        return [
            e for e in self._of_kind("warning", protein)
            if category is None or e.category == category
        ]

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            entries = [e.to_dict() for e in self.entries]
        return {
            "report_path": str(self.path),
            "started": self.started,
            "finished": self.finished,
            "n_failures": sum(1 for e in entries if e["kind"] == "failure"),
            "n_warnings": sum(1 for e in entries if e["kind"] == "warning"),
            "entries": entries,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save_json(self, path: Optional[str] = None) -> str:
        """Write the structured report next to the text report."""
        out = Path(path) if path else Path(self.path).with_name("run_report.json")
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(self.to_json(), encoding="utf-8")
        logger.info("Run report JSON saved: %s", out)
        return str(out)
