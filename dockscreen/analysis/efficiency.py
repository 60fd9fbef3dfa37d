"""Ligand-efficiency metrics from docking affinities.

With R = 1.9872036e-3 kcal/(mol K) and T = 310.15 K:

    Kd   = exp(affinity / (R T))
    pKd  = -log10(Kd)
    LE   = -affinity / HAC                      (HAC > 0)
    LLE  = pKd - logP_selected
    FQ   = (pKd / HAC) / fq_denominator(HAC)    (HAC > 0)

``logP_selected`` is the first present value of an ordered chain of
lipophilicity estimators (consensus first).  The FQ denominator is the
empirical polynomial fit of Reynolds et al. (Bioorg Med Chem Lett 2007)
with fixed coefficients.

Ranking is by descending LLE; ties keep input order and rows without LLE
sort last.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from dockscreen.interfaces import AnalysisConfig

logger = logging.getLogger(__name__)

GAS_CONSTANT = 1.9872036e-3     # kcal / (mol K)
TEMPERATURE = 310.15            # K

EFFICIENCY_COLUMNS = ["Kd", "pKd", "LE", "logP_selected", "LLE", "FQ"]


def fq_denominator(ha):
    """Scaled LE reference value for a heavy-atom count (scalar or array)."""
    return 0.0715 + 7.5328 / ha + 25.7079 / ha ** 2 - 361.4722 / ha ** 3


def dissociation_constant(affinity, gas_constant: float = GAS_CONSTANT,
                          temperature: float = TEMPERATURE):
    return np.exp(affinity / (gas_constant * temperature))


def pkd_from_kd(kd):
    return -np.log10(kd)


def ligand_efficiency(affinity, hac):
    return -affinity / hac


def fit_quality(pkd, hac):
    """FQ for positive heavy-atom counts (scalar or array)."""
    return (pkd / hac) / fq_denominator(hac)


def _positive(hac: pd.Series) -> pd.Series:
    hac = pd.to_numeric(hac, errors="coerce").astype(float)
    return hac.where(hac > 0)


def coalesce_columns(df: pd.DataFrame, columns: Sequence[str]) -> pd.Series:
    """Row-wise first non-missing value over *columns* (absent ones skipped)."""
    result = pd.Series(np.nan, index=df.index, dtype=float)
    for col in columns:
        if col in df.columns:
            result = result.fillna(pd.to_numeric(df[col], errors="coerce"))
    return result


def compute_efficiency(
    df: pd.DataFrame,
    config: Optional[AnalysisConfig] = None,
    affinity_column: str = "min_affinity",
) -> pd.DataFrame:
    """Add heavy_atom_count, Kd, pKd, LE, logP_selected, LLE and FQ columns.

    Args:
        df: Best-affinity rows, optionally already joined with descriptors.
        config: Constants and column preference chains; defaults if None.
        affinity_column: Column holding the representative affinity.

    Returns:
        A new DataFrame; the input is not modified.
    """
    if config is None:
        config = AnalysisConfig()
    out = df.copy()
    affinity = pd.to_numeric(out[affinity_column], errors="coerce").astype(float)

    raw_hac = coalesce_columns(out, config.heavy_atom_columns)
    out["heavy_atom_count"] = raw_hac
    hac = _positive(raw_hac)

    out["Kd"] = dissociation_constant(affinity, config.gas_constant, config.temperature)
    out["pKd"] = pkd_from_kd(out["Kd"])
    out["LE"] = ligand_efficiency(affinity, hac)
    out["logP_selected"] = coalesce_columns(out, config.logp_chain)
    out["LLE"] = out["pKd"] - out["logP_selected"]
    out["FQ"] = fit_quality(out["pKd"], hac)

    logger.info(
        "Efficiency: %d row(s), %d with LE, %d with LLE",
        len(out), int(out["LE"].notna().sum()), int(out["LLE"].notna().sum()),
    )
    return out


def rank_by_lle(df: pd.DataFrame, top_n: Optional[int] = None) -> pd.DataFrame:
    """Sort by descending LLE (stable, missing last); optionally keep top N."""
    ranked = df.sort_values("LLE", ascending=False, kind="mergesort", na_position="last")
    ranked = ranked.reset_index(drop=True)
    if top_n is not None:
        ranked = ranked.head(top_n)
    return ranked


@dataclass(frozen=True)
class EfficiencyScores:
    """Efficiency metrics of one ligand; None where undefined."""
    affinity: float
    Kd: float
    pKd: float
    LE: Optional[float]
    LLE: Optional[float]
    FQ: Optional[float]


def score_ligand(
    affinity: float,
    heavy_atom_count: Optional[float] = None,
    logp_values: Iterable[Optional[float]] = (),
    gas_constant: float = GAS_CONSTANT,
    temperature: float = TEMPERATURE,
) -> EfficiencyScores:
    """Scalar version of :func:`compute_efficiency` for a single ligand.

    ``logp_values`` is the lipophilicity chain in preference order; the
    first value that is not None/NaN is used.
    """
    kd = float(dissociation_constant(affinity, gas_constant, temperature))
    pkd = float(pkd_from_kd(kd))

    logp: Optional[float] = None
    for value in logp_values:
        if value is not None and not np.isnan(value):
            logp = float(value)
            break

    le = fq = None
    if heavy_atom_count is not None and heavy_atom_count > 0:
        le = ligand_efficiency(affinity, heavy_atom_count)
        fq = fit_quality(pkd, heavy_atom_count)

    return EfficiencyScores(
        affinity=affinity,
        Kd=kd,
        pKd=pkd,
        LE=le,
        LLE=None if logp is None else pkd - logp,
        FQ=fq,
    )
