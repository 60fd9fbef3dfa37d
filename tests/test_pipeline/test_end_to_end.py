"""End-to-end tests for the docking campaign orchestrator.

Runs the whole campaign on a synthetic workspace with the Vina engine
replaced by a fake that writes deterministic logs, then checks tables,
the run report, failure isolation and idempotence.
"""
from __future__ import annotations

import json
from unittest.mock import patch

import pandas as pd
import pytest

from dockscreen.pipeline.campaign import CampaignPipeline, main
from dockscreen.pipeline.run_report import (
    AMBIGUOUS_LOG_NAME,
    DEGRADED_CENTROID,
    MISSING_DESCRIPTORS,
    OUT_OF_BAND,
    UNPARSABLE_LOG,
)

VINA_RUN = "dockscreen.docking.vina_driver.subprocess.run"


@pytest.fixture
def completed_run(config, vina_engine):
    pipeline = CampaignPipeline(config)
    with patch(VINA_RUN, side_effect=vina_engine):
        outcomes = pipeline.run()
    return pipeline, outcomes


def _results(workspace, protein="WNV_E"):
    return workspace / "receptors" / protein / "results"


# ---------------------------------------------------------------------------
# Full campaign
# ---------------------------------------------------------------------------

class TestFullCampaign:
    def test_outcomes(self, completed_run):
        _, outcomes = completed_run
        assert [o.protein for o in outcomes] == ["WNV_E", "ZIKV_NS5"]
        wnv, zikv = outcomes
        assert wnv.ok
        assert (wnv.n_pockets, wnv.n_jobs, wnv.n_failed_jobs) == (3, 9, 1)
        assert (wnv.n_logs, wnv.n_ranked, wnv.n_excluded) == (9, 2, 1)
        assert zikv.status == "aborted"
        assert "no pocket" in zikv.reason

    def test_job_artifacts(self, completed_run, workspace):
        pdir = workspace / "receptors" / "WNV_E"
        assert len(list((pdir / "configs").glob("config_*_pocket_*.txt"))) == 9
        assert len(list((pdir / "dockings").glob("*.log"))) == 9
        assert (pdir / "dockings" / "WNV_E_DrugA_pocket1.log").exists()
        assert (pdir / "ligands" / "DrugC.pdbqt").exists()

    def test_affinities_table(self, completed_run, workspace):
        df = pd.read_csv(_results(workspace) / "Affinities_WNV_E.csv")
        assert len(df) == 9
        assert set(df["ligand"]) == {"DrugA", "DrugB", "DrugC"}
        assert df["affinity"].isna().sum() == 1

    def test_efficiency_table(self, completed_run, workspace):
        df = pd.read_csv(_results(workspace) / "Dock_Efficiency_WNV_E.csv")
        assert df["ligand"].tolist() == ["DrugA", "DrugC"]
        assert list(df.columns[:7]) == [
            "protein", "ligand", "ligand_key", "min_affinity", "best_pocket",
            "n_pockets", "n_parsed",
        ]
        drug_a = df.iloc[0]
        assert drug_a["min_affinity"] == -8.3
        assert drug_a["best_pocket"] == "pocket1"
        assert drug_a["LE"] == pytest.approx(8.3 / 20)
        assert drug_a["logP_selected"] == 3.0
        assert bool(drug_a["egg_hia"]) and bool(drug_a["egg_bbb"])
        assert drug_a["descriptor_name"] == "Drug-A"

    def test_ligand_without_descriptors_ranked_last(self, completed_run, workspace):
        df = pd.read_csv(_results(workspace) / "Dock_Efficiency_WNV_E.csv")
        drug_c = df.iloc[1]
        assert drug_c["min_affinity"] == -5.0
        assert pd.isna(drug_c["LLE"])
        assert pd.isna(drug_c["egg_hia"])

    def test_top_and_excluded(self, completed_run, workspace):
        top = pd.read_csv(_results(workspace) / "Top20_WNV_E.csv")
        assert top["ligand"].tolist() == ["DrugA", "DrugC"]
        excluded = pd.read_csv(_results(workspace) / "Excluded_WNV_E.csv")
        assert excluded["ligand"].tolist() == ["DrugB"]
        assert excluded["min_affinity"].tolist() == [-25.0]
        assert excluded["exclusion_reason"].tolist() == ["out_of_band"]

    def test_aborted_protein_has_no_tables(self, completed_run, workspace):
        assert not _results(workspace, "ZIKV_NS5").exists()


# ---------------------------------------------------------------------------
# Run report
# ---------------------------------------------------------------------------

class TestRunReport:
    def test_text_report(self, completed_run, workspace):
        text = (workspace / "Final_report.txt").read_text()
        assert text.startswith("Docking Report - ")
        assert "Protein: WNV_E | Ligand: DrugA | Pocket #0" in text
        assert "  Center: (3.000,4.000,5.000)" in text
        assert "  Center: (0.000,0.000,0.000)" in text
        assert "FAILED  Protein: WNV_E | Ligand: DrugC | Pocket: pocket1" in text
        assert "ABORTED Protein: ZIKV_NS5" in text
        assert "Summary" in text

    def test_warnings(self, completed_run):
        pipeline, _ = completed_run
        report = pipeline.report
        assert len(report.warnings_for("WNV_E", DEGRADED_CENTROID)) == 1
        assert len(report.warnings_for("WNV_E", UNPARSABLE_LOG)) == 1
        assert [w.ligand for w in report.warnings_for("WNV_E", OUT_OF_BAND)] == ["DrugB"]
        assert [w.ligand for w in report.warnings_for("WNV_E", MISSING_DESCRIPTORS)] == ["DrugC"]
        assert report.warnings_for("WNV_E", AMBIGUOUS_LOG_NAME) == []

    def test_json_twin(self, completed_run, workspace):
        data = json.loads((workspace / "run_report.json").read_text())
        assert data["n_failures"] == 1
        assert any(e["kind"] == "abort" and e["protein"] == "ZIKV_NS5" for e in data["entries"])


# ---------------------------------------------------------------------------
# Modes, idempotence and CLI
# ---------------------------------------------------------------------------

class TestModes:
    def test_rerun_is_byte_identical(self, config, vina_engine, workspace):
        tables = [
            "Affinities_WNV_E.csv", "Dock_Efficiency_WNV_E.csv",
            "Top20_WNV_E.csv", "Excluded_WNV_E.csv",
        ]
        with patch(VINA_RUN, side_effect=vina_engine):
            CampaignPipeline(config).run()
        first = {t: (_results(workspace) / t).read_bytes() for t in tables}
        with patch(VINA_RUN, side_effect=vina_engine):
            CampaignPipeline(config).run()
        second = {t: (_results(workspace) / t).read_bytes() for t in tables}
        assert first == second

    def test_analyze_only(self, completed_run, config, workspace):
        table = _results(workspace) / "Dock_Efficiency_WNV_E.csv"
        before = table.read_bytes()
        with patch(VINA_RUN) as mock_run:
            outcomes = CampaignPipeline(config).run(mode="analyze")
        mock_run.assert_not_called()
        assert [o.protein for o in outcomes] == ["WNV_E"]
        assert table.read_bytes() == before

    def test_dock_only_writes_no_tables(self, config, vina_engine, workspace):
        config.campaign.proteins = ["WNV_E"]
        with patch(VINA_RUN, side_effect=vina_engine):
            outcomes = CampaignPipeline(config).run(mode="dock")
        assert outcomes[0].ok
        assert outcomes[0].n_jobs == 9
        assert not _results(workspace).exists()

    def test_dry_run(self, config, workspace):
        config.docking.dry_run = True
        config.campaign.proteins = ["WNV_E"]
        with patch(VINA_RUN) as mock_run:
            outcomes = CampaignPipeline(config).run()
        mock_run.assert_not_called()
        assert outcomes[0].ok
        assert len(list((workspace / "receptors" / "WNV_E" / "configs").iterdir())) == 9

    def test_parallel_matches_sequential(self, config, vina_engine, workspace):
        config.docking.max_workers = 4
        config.campaign.max_parallel_proteins = 2
        with patch(VINA_RUN, side_effect=vina_engine):
            outcomes = CampaignPipeline(config).run()
        assert [o.protein for o in outcomes] == ["WNV_E", "ZIKV_NS5"]
        df = pd.read_csv(_results(workspace) / "Dock_Efficiency_WNV_E.csv")
        assert df["ligand"].tolist() == ["DrugA", "DrugC"]


class TestCLI:
    def test_exit_code_with_aborted_protein(self, workspace, vina_engine):
        with patch(VINA_RUN, side_effect=vina_engine):
            assert main(["--workspace", str(workspace)]) == 1

    def test_exit_code_clean(self, workspace, vina_engine):
        with patch(VINA_RUN, side_effect=vina_engine):
            assert main(["--workspace", str(workspace), "--protein", "WNV_E", "--max-workers", "2"]) == 0

    def test_missing_workspace(self, tmp_path):
        assert main(["--workspace", str(tmp_path / "nowhere")]) == 2

    def test_dry_run_flag(self, workspace):
        with patch(VINA_RUN) as mock_run:
            rc = main(["--workspace", str(workspace), "--protein", "WNV_E", "--dry-run"])
        mock_run.assert_not_called()
        assert rc == 0
