"""dockscreen: structure-based virtual-screening campaign automation.

Subpackages:
    interfaces  Data types and configuration shared by all stages.
    pockets     Pocket extraction and centroid calculation.
    docking     Job matrix, Vina driver, external preparation tools, log parsing.
    analysis    Aggregation, efficiency metrics, descriptor join, permeability.
    pipeline    Run report, result tables, per-protein orchestration and CLI.
"""

__version__ = "0.1.0"
