"""Shared fixtures for post-docking analysis tests."""
from __future__ import annotations

import pandas as pd
import pytest

from dockscreen.interfaces import ResultRecord


def _rec(ligand, pocket, affinity, protein="WNV_E"):
    return ResultRecord(
        protein=protein,
        ligand=ligand,
        pocket=pocket,
        affinity=affinity,
        source_file=f"{protein}_{ligand}_{pocket}.log",
    )


@pytest.fixture
def records():
    """DrugA over three pockets, DrugB out of band, DrugC at 0.0, DrugD unparsed."""
    return [
        _rec("DrugA", "pocket0", -6.1),
        _rec("DrugA", "pocket1", -8.3),
        _rec("DrugA", "pocket2", -2.0),
        _rec("DrugB", "pocket0", -25.0),
        _rec("DrugC", "pocket0", 0.0),
        _rec("DrugD", "pocket0", None),
        _rec("DrugE", "pocket0", -9.1),
        _rec("DrugE", "pocket1", None),
    ]


@pytest.fixture
def descriptor_table() -> pd.DataFrame:
    """Descriptor rows as they look after header cleaning."""
    return pd.DataFrame({
        "drug": ["Drug-A", "drug a", "DrugE", "Unused"],
        "consensus_log_p": [2.0, 4.0, None, 1.0],
        "wlogp": [2.5, 3.5, 1.2, 0.5],
        "xlogp3": [None, None, 2.2, None],
        "tpsa": [80.0, 100.0, 140.0, 20.0],
        "hac": [20, 22, 30, 10],
        "formula": ["C20", "C21", "C30", "C10"],
    })
