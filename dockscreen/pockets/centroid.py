"""Pocket centroids from receptor reference atoms.

The docking box of each pocket is centred on the mean position of the
pocket residues' reference atoms (alpha carbons by default), read from the
receptor PDB with the fixed PDB column layout:

    atom name   cols 13-16
    residue seq cols 23-26
    x, y, z     cols 31-38, 39-46, 47-54

When no atom matches (residue numbering of the score stream differs from
the structure) the centroid falls back to the origin and is flagged as
degraded; the resulting box is physically meaningless.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, NamedTuple, Union

import numpy as np

from dockscreen.interfaces import Centroid, Pocket

logger = logging.getLogger(__name__)


class ReferenceAtom(NamedTuple):
    residue_id: int
    x: float
    y: float
    z: float


def parse_reference_atoms(lines: Iterable[str], atom_name: str = "CA") -> List[ReferenceAtom]:
    """Collect ``ATOM`` records whose atom name equals *atom_name*."""
    atoms: List[ReferenceAtom] = []
    for line in lines:
        if not line.startswith("ATOM"):
            continue
        if line[12:16].strip() != atom_name:
            continue
        try:
            atoms.append(ReferenceAtom(
                residue_id=int(line[22:26]),
                x=float(line[30:38]),
                y=float(line[38:46]),
                z=float(line[46:54]),
            ))
        except ValueError:
            continue
    return atoms


def read_reference_atoms(pdb_path: Union[str, Path], atom_name: str = "CA") -> List[ReferenceAtom]:
    """Read reference atoms from a PDB file."""
    with open(pdb_path) as f:
        atoms = parse_reference_atoms(f, atom_name=atom_name)
    logger.debug("Read %d %s atoms from %s", len(atoms), atom_name, pdb_path)
    return atoms


def compute_centroid(atoms: Iterable[ReferenceAtom], residue_ids: Iterable[int]) -> Centroid:
    """Arithmetic mean of the atoms belonging to *residue_ids*.

    Parameters
    ----------
    atoms : iterable of ReferenceAtom
        Reference atoms of the whole structure.
    residue_ids : iterable of int
        Residue ids of one pocket.

    Returns
    -------
    Centroid
        Mean coordinates, or ``(0, 0, 0)`` with ``degraded=True`` when no
        atom matched.
    """
    wanted = set(residue_ids)
    coords = [(a.x, a.y, a.z) for a in atoms if a.residue_id in wanted]
    if not coords:
        return Centroid(0.0, 0.0, 0.0, n_atoms=0, degraded=True)
    mean = np.asarray(coords, dtype=np.float64).mean(axis=0)
    return Centroid(float(mean[0]), float(mean[1]), float(mean[2]), n_atoms=len(coords))


def assign_centroids(
    pockets: Iterable[Pocket],
    atoms: List[ReferenceAtom],
) -> List[Pocket]:
    """Return copies of *pockets* with their centroids filled in."""
    result: List[Pocket] = []
    for pocket in pockets:
        centroid = compute_centroid(atoms, pocket.residue_ids)
        if centroid.degraded:
            logger.warning(
                "Pocket %d: no reference atom matched residues %s; centroid set to (0,0,0)",
                pocket.pocket_id, list(pocket.residue_ids),
            )
        result.append(pocket.with_centroid(centroid))
    return result
