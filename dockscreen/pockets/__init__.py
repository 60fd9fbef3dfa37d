"""Pocket detection from per-residue scores.

  pocket_extractor  Contiguous above-threshold runs → Pocket candidates.
  centroid          Reference-atom centroids from the receptor PDB.
"""
