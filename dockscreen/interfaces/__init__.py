"""dockscreen interface contracts: data types passed between stages.

    ScoreRecord, Centroid, Pocket
    DockingJob, JobOutcome
    ResultRecord
    PipelineConfig, WorkspaceConfig, PocketConfig, DockingConfig,
    ToolsConfig, AnalysisConfig, CampaignConfig
"""

from .pocket import Centroid, Pocket, ScoreRecord
from .docking_job import DockingJob, JobOutcome
from .result_record import ResultRecord
from .pipeline_config import (
    AnalysisConfig,
    CampaignConfig,
    DockingConfig,
    PipelineConfig,
    PocketConfig,
    ToolsConfig,
    WorkspaceConfig,
)

__all__ = [
    # pocket
    "ScoreRecord",
    "Centroid",
    "Pocket",
    # docking_job
    "DockingJob",
    "JobOutcome",
    # result_record
    "ResultRecord",
    # pipeline_config
    "AnalysisConfig",
    "CampaignConfig",
    "DockingConfig",
    "PipelineConfig",
    "PocketConfig",
    "ToolsConfig",
    "WorkspaceConfig",
]
