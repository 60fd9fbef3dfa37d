"""Vina log parsing.

The log file name (without ``.log``) encodes protein, ligand and pocket.
Two encodings are tried in order:

1. pocket-suffixed ``<prefix>_pocket<digits>``: the last ``_`` token of the
   prefix is the ligand, the remaining tokens rejoined with ``_`` are the
   protein, the pocket is ``pocket<digits>``.
2. positional fallback: split on ``_``; token 0 is the protein, token 1 the
   ligand, token 2 the pocket (each absent when missing).

Identifiers that themselves contain ``_`` make both encodings ambiguous.
No further guessing is done; such parses are flagged ``ambiguous`` and keep
the raw file name for manual reconciliation.

The affinity is the second token of the first line whose first token is
the pose rank ``1``.  Vina sorts poses, so this is the best pose.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from dockscreen.interfaces import ResultRecord

logger = logging.getLogger(__name__)

_POCKET_SUFFIX_RE = re.compile(r"^(.*)_pocket(\d+)$")


def parse_log_name(
    stem: str,
    expected_protein: Optional[str] = None,
) -> Tuple[str, Optional[str], Optional[str], bool]:
    """Decode ``(protein, ligand, pocket, ambiguous)`` from a log file stem.

    Examples:
        >>> parse_log_name("WNV_E_DrugA_pocket3")
        ('WNV_E', 'DrugA', 'pocket3', False)
        >>> parse_log_name("ProteinX_Ligand1_2")
        ('ProteinX', 'Ligand1', '2', False)
    """
    m = _POCKET_SUFFIX_RE.match(stem)
    if m:
        parts = m.group(1).split("_")
        ligand: Optional[str] = parts[-1]
        protein = "_".join(parts[:-1])
        pocket: Optional[str] = f"pocket{m.group(2)}"
        ambiguous = False
    else:
        parts = stem.split("_")
        protein = parts[0]
        ligand = parts[1] if len(parts) >= 2 else None
        pocket = parts[2] if len(parts) >= 3 else None
        ambiguous = len(parts) != 3

    if not protein or (expected_protein is not None and protein != expected_protein):
        ambiguous = True
    return protein, ligand, pocket, ambiguous


def parse_affinity(lines: Iterable[str]) -> Optional[float]:
    """Affinity of the rank-1 pose, or None when no rank-1 row exists."""
    for line in lines:
        tokens = line.split()
        if len(tokens) >= 2 and tokens[0] == "1":
            try:
                return float(tokens[1])
            except ValueError:
                return None
    return None


def parse_log(
    path: Union[str, Path],
    expected_protein: Optional[str] = None,
) -> ResultRecord:
    """Parse one Vina log into a ResultRecord."""
    path = Path(path)
    protein, ligand, pocket, ambiguous = parse_log_name(path.stem, expected_protein)
    with open(path, errors="replace") as f:
        affinity = parse_affinity(f)

    if affinity is None:
        logger.warning("No rank-1 pose in %s", path.name)
    if ambiguous:
        logger.warning("Ambiguous log name %s -> protein=%s ligand=%s pocket=%s",
                       path.name, protein, ligand, pocket)

    return ResultRecord(
        protein=protein,
        ligand=ligand,
        pocket=pocket,
        affinity=affinity,
        source_file=path.name,
        ambiguous=ambiguous,
    )


def parse_log_dir(
    directory: Union[str, Path],
    expected_protein: Optional[str] = None,
) -> List[ResultRecord]:
    """Parse every ``*.log`` in *directory*, in file-name order."""
    files = sorted(Path(directory).glob("*.log"))
    records = [parse_log(f, expected_protein) for f in files]
    logger.info(
        "Parsed %d log(s) in %s: %d with affinity",
        len(records), directory, sum(1 for r in records if r.parsed),
    )
    return records
