"""BOILED-Egg style passive-permeability flags.

A ligand is predicted to be absorbed in the gut (HIA) when it falls inside
the "white" region, and to cross the blood-brain barrier (BBB) when it
falls inside the "yolk".  Both regions are approximated here by rectangles
in (TPSA, logP) space:

    HIA:  TPSA <= 131.6 and -0.7 <= logP <= 6.0
    BBB:  TPSA <=  90.0 and -0.7 <= logP <= 6.0

The logP used is WLOGP when the descriptor table provides it, otherwise
the selected consensus value.  Flags are missing (pd.NA) when TPSA or the
effective logP is missing.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

HIA_TPSA_MAX = 131.6
BBB_TPSA_MAX = 90.0
LOGP_MIN = -0.7
LOGP_MAX = 6.0

TPSA_COLUMN = "tpsa"


def effective_logp(
    df: pd.DataFrame,
    column: str = "wlogp",
    fallback: str = "logP_selected",
) -> pd.Series:
    """Per-row *column*, filled from *fallback* where missing."""
    result = pd.Series(np.nan, index=df.index, dtype=float)
    for col in (column, fallback):
        if col in df.columns:
            result = result.fillna(pd.to_numeric(df[col], errors="coerce"))
    return result


def _inside(tpsa, logp, tpsa_max: float):
    return (tpsa <= tpsa_max) & (logp >= LOGP_MIN) & (logp <= LOGP_MAX)


def _flag(tpsa: pd.Series, logp: pd.Series, tpsa_max: float) -> pd.Series:
    flag = _inside(tpsa, logp, tpsa_max).astype("boolean")
    flag[tpsa.isna() | logp.isna()] = pd.NA
    return flag


def classify_permeability(df: pd.DataFrame, logp_column: str = "wlogp") -> pd.DataFrame:
    """Add ``egg_logp``, ``egg_hia`` and ``egg_bbb`` columns.

    Args:
        df: Efficiency table, optionally joined with descriptors.
        logp_column: Preferred logP column; ``logP_selected`` is the fallback.

    Returns:
        A new DataFrame.  Without a ``tpsa`` column every flag is NA.
    """
    out = df.copy()
    logp = effective_logp(out, logp_column)
    if TPSA_COLUMN in out.columns:
        tpsa = pd.to_numeric(out[TPSA_COLUMN], errors="coerce").astype(float)
    else:
        logger.warning("No %r column; permeability flags left empty", TPSA_COLUMN)
        tpsa = pd.Series(np.nan, index=out.index, dtype=float)

    out["egg_logp"] = logp
    out["egg_hia"] = _flag(tpsa, logp, HIA_TPSA_MAX)
    out["egg_bbb"] = _flag(tpsa, logp, BBB_TPSA_MAX)
    return out


def classify(tpsa: Optional[float], logp: Optional[float]) -> tuple:
    """Scalar (hia, bbb) for one ligand; (None, None) if an input is missing."""
    if tpsa is None or logp is None or np.isnan(tpsa) or np.isnan(logp):
        return None, None
    return bool(_inside(tpsa, logp, HIA_TPSA_MAX)), bool(_inside(tpsa, logp, BBB_TPSA_MAX))
