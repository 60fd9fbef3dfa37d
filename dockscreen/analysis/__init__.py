"""Post-docking analysis.

Chain:  aggregation → efficiency → descriptors (join) → permeability

  aggregation   Best affinity per (protein, ligand) + plausibility band.
  efficiency    Kd, pKd, LE, LLE, FQ.
  descriptors   Descriptor-table cleaning, duplicate collapse, fuzzy join.
  permeability  BOILED-Egg absorption / brain-barrier flags.
"""
