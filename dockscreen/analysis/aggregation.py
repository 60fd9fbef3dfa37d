"""Best-affinity aggregation with a plausibility filter.

Per (protein, ligand), the representative affinity is the minimum
(most negative) rank-1 affinity over all pockets, ignoring logs without a
rank-1 row.  Rows outside the open band ``(-20, 0)`` kcal/mol are treated
as parsing artifacts or non-physical outliers: they are excluded from the
ranking but returned, with a reason, for auditing.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from dockscreen.interfaces import ResultRecord

logger = logging.getLogger(__name__)

DEFAULT_BAND = (-20.0, 0.0)

RECORD_COLUMNS = [
    "protein", "ligand", "pocket", "pocket_number", "affinity", "source_file", "ambiguous",
]
BEST_COLUMNS = [
    "protein", "ligand", "min_affinity", "best_pocket", "n_pockets", "n_parsed",
]

_DIGITS_RE = re.compile(r"(\d+)")


def _pocket_number(pocket: Optional[str]) -> Optional[int]:
    if pocket is None:
        return None
    m = _DIGITS_RE.search(pocket)
    return int(m.group(1)) if m else None


def records_to_frame(records: Iterable[ResultRecord]) -> pd.DataFrame:
    """One row per parsed log, in input order."""
    rows = [
        {
            "protein": r.protein,
            "ligand": r.ligand,
            "pocket": r.pocket,
            "pocket_number": _pocket_number(r.pocket),
            "affinity": np.nan if r.affinity is None else r.affinity,
            "source_file": r.source_file,
            "ambiguous": r.ambiguous,
        }
        for r in records
    ]
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["pocket_number"] = df["pocket_number"].astype("Int64")
    df["affinity"] = df["affinity"].astype(float)
    return df


@dataclass
class AggregationResult:
    """Output of :func:`aggregate_best_affinity`.

    Attributes:
        records:   Every parsed log (see RECORD_COLUMNS).
        best:      One row per (protein, ligand), sorted by protein, ligand.
        ranked:    Rows of ``best`` inside the plausibility band.
        excluded:  Rows of ``best`` outside it, with ``exclusion_reason``
                   ("out_of_band" or "no_affinity").
    """
    records: pd.DataFrame
    best: pd.DataFrame
    ranked: pd.DataFrame
    excluded: pd.DataFrame

    @property
    def n_unparsed(self) -> int:
        return int(self.records["affinity"].isna().sum())


def best_affinity_table(records: pd.DataFrame) -> pd.DataFrame:
    """Minimum non-absent affinity per (protein, ligand)."""
    rows = []
    grouped = records.groupby(["protein", "ligand"], sort=True, dropna=False)
    for (protein, ligand), grp in grouped:
        scored = grp.dropna(subset=["affinity"])
        if scored.empty:
            min_affinity, best_pocket = np.nan, None
        else:
            idx = scored["affinity"].idxmin()
            min_affinity = float(scored.at[idx, "affinity"])
            best_pocket = scored.at[idx, "pocket"]
        rows.append({
            "protein": protein,
            "ligand": None if pd.isna(ligand) else ligand,
            "min_affinity": min_affinity,
            "best_pocket": best_pocket,
            "n_pockets": len(grp),
            "n_parsed": len(scored),
        })
    return pd.DataFrame(rows, columns=BEST_COLUMNS)


def apply_plausibility_band(
    best: pd.DataFrame,
    band: Tuple[float, float] = DEFAULT_BAND,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split *best* into (kept, excluded) by the open interval *band*."""
    lo, hi = band
    keep = best["min_affinity"].gt(lo) & best["min_affinity"].lt(hi)
    kept = best[keep].reset_index(drop=True)
    excluded = best[~keep].reset_index(drop=True).copy()
    excluded["exclusion_reason"] = np.where(
        excluded["min_affinity"].isna(), "no_affinity", "out_of_band",
    )
    return kept, excluded


def aggregate_best_affinity(
    records: Iterable[ResultRecord],
    band: Tuple[float, float] = DEFAULT_BAND,
) -> AggregationResult:
    """Reduce per-pocket results to ranked best affinities.

    Args:
        records: ResultRecords from the log parser.
        band: Open (low, high) plausibility interval in kcal/mol.

    Returns:
        AggregationResult with the full, kept and excluded tables.
    """
    frame = records_to_frame(records)
    best = best_affinity_table(frame)
    ranked, excluded = apply_plausibility_band(best, band)

    logger.info(
        "Aggregation: %d log(s) -> %d ligand(s); %d kept, %d excluded "
        "(%d out of band, %d without affinity)",
        len(frame), len(best), len(ranked), len(excluded),
        int((excluded["exclusion_reason"] == "out_of_band").sum()),
        int((excluded["exclusion_reason"] == "no_affinity").sum()),
    )
    return AggregationResult(records=frame, best=best, ranked=ranked, excluded=excluded)
