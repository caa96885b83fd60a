"""Deployment diagnostics from CloudFormation stack events."""

from .analyzer import DEFAULT_WINDOW, DeploymentEventAnalyzer
from .models import DeploymentEvent, IncidentReport, StackOutput

__all__ = [
    "DEFAULT_WINDOW",
    "DeploymentEventAnalyzer",
    "DeploymentEvent",
    "IncidentReport",
    "StackOutput",
]
