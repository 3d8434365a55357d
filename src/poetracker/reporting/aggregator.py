"""
Reporting Aggregator

Read-only statistics over the workflow records: per trainee, per assessor and
per unit/task. Reports are computed by scanning the store, which is fine at
the data volumes a training provider produces.

Turnaround is the time from submission to assessment, in days. A report row
with nothing assessed has an average turnaround of 0.
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from poetracker.core.models import (
    Assessment,
    AssessmentStatus,
    Role,
    Submission,
    SubmissionStatus,
    Task,
    Unit,
    User,
)
from poetracker.core.schemas import AssessmentOutcome, AssessorActivity, TraineePerformance

if TYPE_CHECKING:
    from poetracker.core.store import EntityStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24


def turnaround_days(submitted_at: datetime, assessed_at: datetime) -> float:
    return (assessed_at - submitted_at).total_seconds() / SECONDS_PER_DAY


def mean(values: list[float]) -> float:
    """Arithmetic mean, 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


class ReportAggregator:
    """Builds the trainee, assessor and outcome reports."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def _assessments_by_submission(self) -> dict[int, list[Assessment]]:
        """All assessments grouped per submission, oldest first."""
        grouped: dict[int, list[Assessment]] = defaultdict(list)
        for assessment in await self.store.list_by(
            Assessment, order_by=[Assessment.assessed_at, Assessment.id]
        ):
            grouped[assessment.submission_id].append(assessment)
        return grouped

    async def trainees_covered_by(self, assessor_id: int) -> list[int]:
        """Ids of trainees the assessor holds an assignment over, in first-seen order."""
        trainee_ids: list[int] = []
        for assignment in await self.store.assignments_by_assessor(assessor_id):
            if assignment.trainee_id is not None:
                trainee_ids.append(assignment.trainee_id)
                continue
            enrolled = await self.store.list_by(
                User,
                User.role == Role.TRAINEE,
                User.class_intake_id == assignment.class_intake_id,
            )
            trainee_ids.extend(trainee.id for trainee in enrolled)
        return list(dict.fromkeys(trainee_ids))

    async def trainee_performance(
        self, trainee_ids: Iterable[int] | None = None
    ) -> list[TraineePerformance]:
        """Submission counts by status and mean first-assessment turnaround per trainee.

        Args:
            trainee_ids: Restrict the report to these trainees (unknown ids are
                skipped); None reports on every trainee.
        """
        if trainee_ids is None:
            trainees = await self.store.users_by_role(Role.TRAINEE)
        else:
            wanted = list(dict.fromkeys(trainee_ids))
            if not wanted:
                return []
            trainees = await self.store.list_by(User, User.id.in_(wanted))

        assessments = await self._assessments_by_submission()
        report = []
        for trainee in trainees:
            submissions = await self.store.submissions_by_trainee(trainee.id)
            counts = Counter(submission.status for submission in submissions)

            turnarounds = [
                turnaround_days(submission.submitted_at, assessments[submission.id][0].assessed_at)
                for submission in submissions
                if assessments.get(submission.id)
            ]

            report.append(
                TraineePerformance(
                    trainee_id=trainee.id,
                    trainee_name=trainee.full_name,
                    submissions_count=len(submissions),
                    approved_count=counts[SubmissionStatus.APPROVED],
                    rejected_count=counts[SubmissionStatus.REJECTED],
                    resubmit_count=counts[SubmissionStatus.RESUBMIT],
                    pending_count=counts[SubmissionStatus.PENDING],
                    average_turnaround=mean(turnarounds),
                )
            )

        logger.debug(f"Trainee performance report covers {len(report)} trainees")
        return report

    async def assessor_activity(self) -> list[AssessorActivity]:
        """Assessment counts by decision and mean turnaround per assessor."""
        assessors = await self.store.users_by_role(Role.ASSESSOR)
        submissions = {s.id: s for s in await self.store.list_by(Submission)}

        report = []
        for assessor in assessors:
            assessments = await self.store.list_by(
                Assessment, Assessment.assessor_id == assessor.id
            )
            counts = Counter(assessment.status for assessment in assessments)
            turnarounds = [
                turnaround_days(submissions[a.submission_id].submitted_at, a.assessed_at)
                for a in assessments
                if a.submission_id in submissions
            ]

            report.append(
                AssessorActivity(
                    assessor_id=assessor.id,
                    assessor_name=assessor.full_name,
                    assessments_count=len(assessments),
                    approved_count=counts[AssessmentStatus.APPROVED],
                    rejected_count=counts[AssessmentStatus.REJECTED],
                    resubmit_count=counts[AssessmentStatus.RESUBMIT],
                    average_turnaround=mean(turnarounds),
                )
            )
        return report

    async def assessment_outcomes(self) -> list[AssessmentOutcome]:
        """Submission counts by status for every (unit, task) pair, including empty ones."""
        submissions_by_task: dict[int, list[Submission]] = defaultdict(list)
        for submission in await self.store.list_by(Submission):
            submissions_by_task[submission.task_id].append(submission)

        report = []
        for unit in await self.store.list_by(Unit):
            for task in await self.store.list_by(Task, Task.unit_id == unit.id):
                submissions = submissions_by_task.get(task.id, [])
                counts = Counter(submission.status for submission in submissions)
                report.append(
                    AssessmentOutcome(
                        unit_id=unit.id,
                        unit_name=unit.name,
                        task_id=task.id,
                        task_name=task.name,
                        total_submissions=len(submissions),
                        approved_count=counts[SubmissionStatus.APPROVED],
                        rejected_count=counts[SubmissionStatus.REJECTED],
                        resubmit_count=counts[SubmissionStatus.RESUBMIT],
                        pending_count=counts[SubmissionStatus.PENDING],
                    )
                )
        return report
