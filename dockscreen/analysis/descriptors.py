"""Physicochemical descriptor table: cleaning, duplicate collapse, fuzzy join.

The descriptor table (SwissADME-style CSV) names ligands differently from
the docking side ("Drug-A" vs "drug_a.pdbqt").  Both sides are reduced to a
normalized key: lower-case, transliterated to ASCII, everything outside
``[a-z0-9]`` removed.  Rows of the descriptor table that collide on the key
are collapsed (median for numeric columns, first occurrence otherwise)
before a left join from the docking results.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd
from unidecode import unidecode

logger = logging.getLogger(__name__)

KEY_COLUMN = "ligand_key"
NAME_COLUMN = "descriptor_name"

_NON_KEY_RE = re.compile(r"[^a-z0-9]")
_CAMEL_RE = re.compile(r"([a-z])([A-Z])")
_NON_WORD_RE = re.compile(r"[^A-Za-z0-9]+")


def normalize_key(name) -> str:
    """Join key for a ligand name: ``"Drug-A"`` and ``"drug a"`` → ``"druga"``.

    Missing names give ``""``, which never matches in :func:`join_descriptors`.
    """
    if name is None or (isinstance(name, float) and pd.isna(name)):
        return ""
    return _NON_KEY_RE.sub("", unidecode(str(name)).lower())


def clean_column_name(name) -> str:
    """snake_case a header: ``"Consensus Log P"`` → ``consensus_log_p``."""
    text = str(name).replace("#", " number ").replace("%", " percent ")
    text = _CAMEL_RE.sub(r"\1_\2", unidecode(text))
    text = _NON_WORD_RE.sub("_", text).strip("_").lower()
    return text or "x"


def clean_column_names(columns: Iterable) -> List[str]:
    """Clean all headers; repeated names get ``_2``, ``_3`` ... suffixes."""
    seen: dict = {}
    cleaned = []
    for col in columns:
        base = clean_column_name(col)
        seen[base] = seen.get(base, 0) + 1
        cleaned.append(base if seen[base] == 1 else f"{base}_{seen[base]}")
    return cleaned


def load_descriptor_table(
    path: Union[str, Path], ligand_column: Optional[str] = "drug",
) -> pd.DataFrame:
    """Read the descriptor CSV and clean its headers.

    Raises:
        ValueError: If *ligand_column* is given and absent after cleaning.
    """
    df = pd.read_csv(path)
    df.columns = clean_column_names(df.columns)
    if ligand_column is not None and ligand_column not in df.columns:
        raise ValueError(f"Descriptor table {path} has no {ligand_column!r} column")
    logger.info("Loaded descriptor table %s: %d row(s), %d column(s)",
                path, len(df), len(df.columns))
    return df


def _is_numeric(series: pd.Series) -> bool:
    return (
        pd.api.types.is_numeric_dtype(series)
        and not pd.api.types.is_bool_dtype(series)
    )


def _first(series: pd.Series):
    return series.iloc[0]


def collapse_duplicates(df: pd.DataFrame, ligand_column: str = "drug") -> pd.DataFrame:
    """One row per normalized ligand key.

    Args:
        df: Cleaned descriptor table.
        ligand_column: Column holding the ligand name.

    Returns:
        DataFrame keyed by ``ligand_key`` (sorted); numeric columns hold the
        median over colliding rows (missing values skipped), other columns
        the first row's value.

    Raises:
        ValueError: If *ligand_column* is not in the table.
    """
    if ligand_column not in df.columns:
        raise ValueError(
            f"Descriptor table has no {ligand_column!r} column "
            f"(columns: {', '.join(map(str, df.columns))})"
        )
    work = df.copy()
    work[KEY_COLUMN] = work[ligand_column].map(normalize_key)
    unnamed = work[KEY_COLUMN] == ""
    if unnamed.any():
        logger.warning("Dropping %d descriptor row(s) with no usable name", int(unnamed.sum()))
        work = work[~unnamed]

    agg = {
        col: ("median" if _is_numeric(work[col]) else _first)
        for col in work.columns if col != KEY_COLUMN
    }
    collapsed = work.groupby(KEY_COLUMN, sort=True).agg(agg).reset_index()

    n_dup = len(work) - len(collapsed)
    if n_dup:
        logger.info("Collapsed %d duplicate descriptor row(s) by normalized name", n_dup)
    return collapsed


def join_descriptors(
    results: pd.DataFrame,
    descriptors: Optional[pd.DataFrame],
    ligand_column: str = "drug",
) -> Tuple[pd.DataFrame, List[str]]:
    """Left-join collapsed descriptors onto docking results by ligand key.

    Args:
        results: Rows with a ``ligand`` column (best affinities).
        descriptors: Output of :func:`collapse_duplicates`, or None when
            descriptor integration is disabled.
        ligand_column: Name column of *descriptors*; renamed to
            ``descriptor_name`` in the output.

    Returns:
        (joined, missing): every input row in input order, and the ligands
        that found no descriptor row.
    """
    left = results.copy()
    left[KEY_COLUMN] = left["ligand"].map(normalize_key)
    if descriptors is None:
        return left, []

    right = descriptors.rename(columns={ligand_column: NAME_COLUMN})
    # An empty key is a missing name on either side; it never matches.
    right = right[right[KEY_COLUMN] != ""]
    clashes = [c for c in right.columns if c in left.columns and c != KEY_COLUMN]
    right = right.rename(columns={c: f"{c}_descriptor" for c in clashes})

    joined = left.merge(right, on=KEY_COLUMN, how="left", indicator=True)
    unmatched = joined["_merge"] == "left_only"
    missing = [str(x) for x in joined.loc[unmatched, "ligand"].tolist()]
    joined = joined.drop(columns="_merge")

    logger.info("Descriptor join: %d/%d ligand(s) matched", len(joined) - len(missing), len(joined))
    return joined, missing
