"""Pocket extraction from a per-residue pocket score stream.

The pocket scorer (Concavity) writes one whitespace-delimited line per
residue: column 1 is the residue id, column 3 the pocket-likelihood score.
A pocket is a maximal run of consecutive lines whose scores exceed the
threshold and whose residue ids step by exactly +1.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Union

from dockscreen.interfaces import Pocket, ScoreRecord

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1


def parse_score_lines(lines: Iterable[str]) -> List[ScoreRecord]:
    """Parse score-stream lines, skipping comments, blanks and bad rows."""
    records: List[ScoreRecord] = []
    n_bad = 0
    for lineno, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        fields = stripped.split()
        try:
            records.append(ScoreRecord(residue_id=int(fields[0]), score=float(fields[2])))
        except (IndexError, ValueError):
            n_bad += 1
            logger.debug("Skipping malformed score line %d: %r", lineno, stripped)
    if n_bad:
        logger.warning("Skipped %d malformed score line(s)", n_bad)
    return records


def read_score_stream(path: Union[str, Path]) -> List[ScoreRecord]:
    """Read a pocket-scorer output file into ScoreRecords (input order)."""
    with open(path) as f:
        return parse_score_lines(f)


def extract_pockets(
    records: Iterable[ScoreRecord],
    threshold: float = DEFAULT_THRESHOLD,
) -> List[Pocket]:
    """Group a score stream into pockets with a single forward scan.

    Args:
        records: ScoreRecords in stream order.
        threshold: Scores strictly above this value are pocket residues.

    Returns:
        Pockets in discovery order, ids assigned from 0.  A sub-threshold
        score or a residue-id gap always closes the open run; one residue is
        enough for a pocket.
    """
    runs: List[List[int]] = []
    current: List[int] = []

    for rec in records:
        if rec.score > threshold:
            if current and rec.residue_id == current[-1] + 1:
                current.append(rec.residue_id)
            else:
                if current:
                    runs.append(current)
                current = [rec.residue_id]
        elif current:
            runs.append(current)
            current = []

    if current:
        runs.append(current)

    pockets = [Pocket(pocket_id=i, residue_ids=tuple(run)) for i, run in enumerate(runs)]
    if not pockets:
        logger.warning("No residue scored above %.3f; zero pockets", threshold)
    else:
        logger.info(
            "Extracted %d pocket(s) (threshold %.3f, sizes %s)",
            len(pockets), threshold, [p.size for p in pockets],
        )
    return pockets


def pockets_from_file(
    path: Union[str, Path],
    threshold: float = DEFAULT_THRESHOLD,
) -> List[Pocket]:
    """Convenience: read the score stream at *path* and extract pockets."""
    return extract_pockets(read_score_stream(path), threshold=threshold)
