"""
Notification, Activity Log and Report Schemas
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from poetracker.core.models.enums import NotificationType


class NotificationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    title: str
    message: str
    is_read: bool
    type: NotificationType
    linked_item_id: int | None
    created_at: datetime


class ActivityLogSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    action: str
    details: dict[str, Any]
    ip_address: str | None
    timestamp: datetime


# Report Schemas
class TraineePerformance(BaseModel):
    trainee_id: int
    trainee_name: str
    submissions_count: int
    approved_count: int
    rejected_count: int
    resubmit_count: int
    pending_count: int
    average_turnaround: float  # days


class AssessorActivity(BaseModel):
    assessor_id: int
    assessor_name: str
    assessments_count: int
    approved_count: int
    rejected_count: int
    resubmit_count: int
    average_turnaround: float  # days


class AssessmentOutcome(BaseModel):
    unit_id: int
    unit_name: str
    task_id: int
    task_name: str
    total_submissions: int
    approved_count: int
    rejected_count: int
    resubmit_count: int
    pending_count: int
