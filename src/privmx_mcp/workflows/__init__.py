"""Workflow catalog, goal matching and next-step suggestions."""

from privmx_mcp.workflows.catalog import default_workflows
from privmx_mcp.workflows.matcher import WorkflowMatcher
from privmx_mcp.workflows.models import (
    NextStepSuggestion,
    WorkflowDefinition,
    WorkflowStep,
    WorkflowSuggestion,
)

__all__ = [
    "default_workflows",
    "WorkflowMatcher",
    "NextStepSuggestion",
    "WorkflowDefinition",
    "WorkflowStep",
    "WorkflowSuggestion",
]
