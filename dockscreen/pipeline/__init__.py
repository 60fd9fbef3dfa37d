"""Campaign orchestration and reporting.

Modules:
    campaign        Per-protein pipeline runner + CLI.
    run_report      Append-only run-level report.
    result_tables   Per-protein CSV result tables.
"""
