"""AutoDock Vina driver with per-job failure isolation.

Each job runs ``<vina> --config <config>`` in the protein working directory
with stdout and stderr redirected to the job's log.  A non-zero exit, a
missing executable, an OS error or a timeout marks that job as failed in
the run report; sibling jobs and other proteins keep going.
"""
from __future__ import annotations

import logging
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from dockscreen.docking.job_matrix import write_config
from dockscreen.interfaces import DockingConfig, DockingJob, JobOutcome
from dockscreen.pipeline.run_report import RunReport

logger = logging.getLogger(__name__)


class VinaDriver:
    """Run DockingJobs through the external Vina executable."""

    def __init__(
        self,
        config: Optional[DockingConfig] = None,
        report: Optional[RunReport] = None,
    ) -> None:
        self.config = config or DockingConfig()
        self.report = report

    def build_command(self, job: DockingJob) -> List[str]:
        return [self.config.vina_executable, "--config", job.relative(job.config_path)]

    def run_job(self, job: DockingJob) -> JobOutcome:
        """Write the job's config, invoke Vina, and never raise on failure."""
        if self.report is not None:
            self.report.log_job(job)

        try:
            write_config(job, self.config)
        except OSError as exc:
            return self._failed(job, f"could not write config: {exc}")

        cmd = self.build_command(job)
        if self.config.dry_run:
            logger.info("DRY-RUN: %s", " ".join(cmd))
            return JobOutcome(job=job, success=True, reason="dry_run")

        logger.info("Running Vina: %s", job.identity)
        t0 = time.monotonic()
        try:
            with open(job.log_path, "w") as log:
                result = subprocess.run(
                    cmd,
                    stdout=log,
                    stderr=subprocess.STDOUT,
                    cwd=str(job.workdir),
                    timeout=self.config.timeout_seconds,
                )
        except subprocess.TimeoutExpired:
            return self._failed(
                job, f"timeout after {self.config.timeout_seconds:g}s",
                duration=time.monotonic() - t0,
            )
        except FileNotFoundError as exc:
            return self._failed(job, f"engine not found: {exc}")
        except OSError as exc:
            return self._failed(job, f"engine error: {exc}")

        duration = round(time.monotonic() - t0, 3)
        if result.returncode != 0:
            return self._failed(
                job, f"exit status {result.returncode}",
                returncode=result.returncode, duration=duration,
            )

        logger.debug("Completed %s (%.1fs)", job.identity, duration)
        return JobOutcome(job=job, success=True, returncode=0, duration_seconds=duration)

    def run_jobs(self, jobs: List[DockingJob]) -> List[JobOutcome]:
        """Run all jobs, bounded by ``max_workers``; outcomes keep job order."""
        if not jobs:
            return []
        workers = min(self.config.max_workers, len(jobs))
        if workers == 1:
            outcomes = [self.run_job(job) for job in jobs]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(self.run_job, jobs))

        n_failed = sum(1 for o in outcomes if not o.success)
        logger.info(
            "Docking finished: %d/%d job(s) succeeded, %d failed",
            len(outcomes) - n_failed, len(outcomes), n_failed,
        )
        return outcomes

    def _failed(
        self,
        job: DockingJob,
        reason: str,
        returncode: Optional[int] = None,
        duration: float = 0.0,
    ) -> JobOutcome:
        if self.report is not None:
            self.report.record_failure(job, reason)
        else:
            logger.error("Job failed: %s: %s", job.identity, reason)
        return JobOutcome(
            job=job,
            success=False,
            returncode=returncode,
            reason=reason,
            duration_seconds=round(duration, 3),
        )
