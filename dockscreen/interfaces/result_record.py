"""ResultRecord interface: one parsed Vina log.

Produced by the log parser; consumed by the aggregation engine.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ResultRecord:
    """Identity and rank-1 affinity recovered from one log file.

    Attributes:
        protein:      Protein identifier decoded from the file name.
        ligand:       Ligand identifier, or None if the name was too short.
        pocket:       Pocket label ("pocket3" or a bare positional token),
                      or None.
        affinity:     Score of the rank-1 pose (kcal/mol), or None when the
                      log holds no rank-1 row.
        source_file:  Raw file name, kept for manual reconciliation.
        ambiguous:    True when the name could not be decoded with
                      confidence (see log_parser).
    """
    protein: str
    ligand: Optional[str]
    pocket: Optional[str]
    affinity: Optional[float]
    source_file: str = ""
    ambiguous: bool = False

    @property
    def parsed(self) -> bool:
        return self.affinity is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ResultRecord:
        return cls(**d)
