"""Pocket interface: residue score records and pocket candidates.

Produced by the pocket extractor from the pocket-scorer stream, filled with
centroids by the centroid calculator, and consumed once by the job-matrix
builder.
"""
from __future__ import annotations

import copy
import json
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ScoreRecord:
    """One line of the per-residue pocket score stream.

    Attributes:
        residue_id:  Residue sequence number as reported by the scorer.
        score:       Pocket-likelihood score for that residue.
    """
    residue_id: int
    score: float


@dataclass(frozen=True)
class Centroid:
    """Geometric centre of a pocket's reference atoms.

    Attributes:
        x, y, z:    Mean coordinates (Angstrom).
        n_atoms:    Number of structural entries averaged.
        degraded:   True when no entry matched and the centre fell back to
                    the origin.
    """
    x: float
    y: float
    z: float
    n_atoms: int = 0
    degraded: bool = False

    @property
    def xyz(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def format(self, precision: int = 3) -> str:
        """Render as ``(x,y,z)`` with fixed decimals."""
        return "(" + ",".join(f"{v:.{precision}f}" for v in self.xyz) + ")"


@dataclass(frozen=True)
class Pocket:
    """A contiguous run of above-threshold residues.

    Attributes:
        pocket_id:    0-based index in discovery order.
        residue_ids:  Residue ids, consecutive by exactly 1 in input order.
        centroid:     Box anchor, or None until assigned.
    """
    pocket_id: int
    residue_ids: Tuple[int, ...]
    centroid: Optional[Centroid] = None

    def __post_init__(self) -> None:
        if not self.residue_ids:
            raise ValueError("Pocket must contain at least one residue")
        object.__setattr__(self, "residue_ids", tuple(self.residue_ids))

    @property
    def size(self) -> int:
        return len(self.residue_ids)

    @property
    def label(self) -> str:
        return f"pocket{self.pocket_id}"

    def with_centroid(self, centroid: Centroid) -> Pocket:
        return replace(self, centroid=centroid)

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["residue_ids"] = list(d["residue_ids"])
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Pocket:
        data = copy.deepcopy(d)
        data["residue_ids"] = tuple(data["residue_ids"])
        if data.get("centroid") is not None:
            data["centroid"] = Centroid(**data["centroid"])
        return cls(**data)

    @classmethod
    def from_json(cls, s: str) -> Pocket:
        return cls.from_dict(json.loads(s))
