"""Multi-stage external command pipeline."""

from .models import (
    CompletionPredicate,
    PipelineResult,
    Stage,
    StageRecord,
    StageStatus,
    exited_ok,
    marker_seen,
)
from .orchestrator import PipelineOrchestrator
from .dashboard import DashboardOptions, build_dashboard_stages

__all__ = [
    "CompletionPredicate",
    "PipelineResult",
    "Stage",
    "StageRecord",
    "StageStatus",
    "exited_ok",
    "marker_seen",
    "PipelineOrchestrator",
    "DashboardOptions",
    "build_dashboard_stages",
]
