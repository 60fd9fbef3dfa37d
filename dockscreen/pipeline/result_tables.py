"""Per-protein result tables written to ``<protein_dir>/results``.

    Affinities_<P>.csv       every parsed log
    Dock_Efficiency_<P>.csv  best affinity + efficiency + permeability + descriptors
    Top<N>_<P>.csv           first N rows of the efficiency table by LLE
    Excluded_<P>.csv         rows dropped by the plausibility band

All tables are plain CSV without an index column.  Re-running the analysis
on the same logs rewrites byte-identical files.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from dockscreen.analysis.aggregation import AggregationResult

logger = logging.getLogger(__name__)

RESULTS_DIR = "results"

EFFICIENCY_LEADING_COLUMNS = [
    "protein", "ligand", "ligand_key", "min_affinity", "best_pocket",
    "n_pockets", "n_parsed", "Kd", "pKd", "LE", "logP_selected", "LLE", "FQ",
    "egg_logp", "egg_hia", "egg_bbb",
]


def order_efficiency_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Fixed leading columns first, remaining (descriptor) columns after."""
    leading = [c for c in EFFICIENCY_LEADING_COLUMNS if c in df.columns]
    rest = [c for c in df.columns if c not in leading]
    return df[leading + rest]


def table_paths(protein: str, protein_dir: Path, top_n: int = 20) -> Dict[str, Path]:
    out = Path(protein_dir) / RESULTS_DIR
    return {
        "affinities": out / f"Affinities_{protein}.csv",
        "efficiency": out / f"Dock_Efficiency_{protein}.csv",
        "top": out / f"Top{top_n}_{protein}.csv",
        "excluded": out / f"Excluded_{protein}.csv",
    }


def write_result_tables(
    protein: str,
    protein_dir: Path,
    aggregation: AggregationResult,
    efficiency: pd.DataFrame,
    top_n: int = 20,
) -> Dict[str, Path]:
    """Write the four result tables for one protein.

    Args:
        protein: Protein identifier (used in file names).
        protein_dir: Protein working directory.
        aggregation: Output of the aggregation stage.
        efficiency: Ranked efficiency table (descending LLE).
        top_n: Rows kept in the top table.

    Returns:
        Mapping of table kind to written path.
    """
    paths = table_paths(protein, protein_dir, top_n)
    paths["affinities"].parent.mkdir(parents=True, exist_ok=True)

    efficiency = order_efficiency_columns(efficiency)
    aggregation.records.to_csv(paths["affinities"], index=False)
    efficiency.to_csv(paths["efficiency"], index=False)
    efficiency.head(top_n).to_csv(paths["top"], index=False)
    aggregation.excluded.to_csv(paths["excluded"], index=False)

    logger.info(
        "%s: wrote %d affinity row(s), %d ranked ligand(s), %d excluded -> %s",
        protein, len(aggregation.records), len(efficiency),
        len(aggregation.excluded), paths["affinities"].parent,
    )
    return paths

