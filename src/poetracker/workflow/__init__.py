"""
Workflow Module

Submission → assessment → verification transitions and their best-effort
notification and activity-log side effects.
"""

from .engine import WorkflowEngine, submission_status_for
from .side_effects import ActivityRecorder, Notifier

__all__ = [
    "WorkflowEngine",
    "submission_status_for",
    "Notifier",
    "ActivityRecorder",
]
