"""Docking stage: job matrix, engine driver, external tools and log parsing.

  job_matrix    (ligand x pocket) cross product + Vina config files.
  vina_driver   Engine invocation with per-job failure isolation.
  preparation   Receptor/ligand conversion and pocket-scorer wrappers.
  log_parser    Identity + rank-1 affinity recovery from Vina logs.
"""
