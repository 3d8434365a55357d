"""
Unit Tests for the Reporting Aggregator
"""

from datetime import UTC, datetime, timedelta

import pytest

from poetracker.core.models import (
    Assessment,
    AssessmentStatus,
    Assignment,
    Role,
    Submission,
    SubmissionStatus,
    Task,
)
from poetracker.reporting import ReportAggregator
from poetracker.reporting.aggregator import mean, turnaround_days

SUBMITTED = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
DAY = timedelta(days=1)


async def add_submission(store, trainee, hierarchy, status=SubmissionStatus.PENDING):
    submission = await store.create(
        Submission,
        trainee_id=trainee.id,
        task_id=hierarchy.task.id,
        unit_id=hierarchy.unit.id,
        title="Evidence",
        status=status,
        submitted_at=SUBMITTED,
    )
    await store.commit()
    return submission


async def add_assessment(store, submission, assessor, status, after: timedelta):
    assessment = await store.create(
        Assessment,
        submission_id=submission.id,
        assessor_id=assessor.id,
        status=status,
        assessed_at=submission.submitted_at + after,
    )
    await store.commit()
    return assessment


@pytest.fixture
def aggregator(store) -> ReportAggregator:
    return ReportAggregator(store)


class TestHelpers:
    def test_turnaround_in_days(self):
        assert turnaround_days(SUBMITTED, SUBMITTED + timedelta(hours=36)) == 1.5

    def test_mean_of_nothing_is_zero(self):
        assert mean([]) == 0.0
        assert mean([1.0, 2.0]) == 1.5


class TestTraineePerformance:
    async def test_trainee_without_assessments_has_zero_turnaround(
        self, aggregator, store, trainee, hierarchy
    ):
        await add_submission(store, trainee, hierarchy)

        (row,) = await aggregator.trainee_performance()

        assert row.trainee_id == trainee.id
        assert row.submissions_count == 1
        assert row.pending_count == 1
        assert row.average_turnaround == 0.0

    async def test_counts_by_status_and_first_assessment_turnaround(
        self, aggregator, store, trainee, assessor, hierarchy
    ):
        approved = await add_submission(store, trainee, hierarchy, SubmissionStatus.APPROVED)
        await add_assessment(store, approved, assessor, AssessmentStatus.RESUBMIT, DAY * 1)
        await add_assessment(store, approved, assessor, AssessmentStatus.APPROVED, DAY * 5)
        rejected = await add_submission(store, trainee, hierarchy, SubmissionStatus.REJECTED)
        await add_assessment(store, rejected, assessor, AssessmentStatus.REJECTED, DAY * 3)
        await add_submission(store, trainee, hierarchy, SubmissionStatus.RESUBMIT)

        (row,) = await aggregator.trainee_performance()

        assert row.submissions_count == 3
        assert (row.approved_count, row.rejected_count, row.resubmit_count) == (1, 1, 1)
        assert row.pending_count == 0
        # First assessment per submission: 1 day and 3 days
        assert row.average_turnaround == pytest.approx(2.0)

    async def test_restricted_to_given_trainees(self, aggregator, make_user, trainee):
        await make_user(Role.TRAINEE)

        rows = await aggregator.trainee_performance([trainee.id])

        assert [r.trainee_id for r in rows] == [trainee.id]
        assert await aggregator.trainee_performance([]) == []

    async def test_trainees_covered_by_assessor(
        self, aggregator, store, make_user, trainee, assessor, hierarchy
    ):
        classmate = await make_user(Role.TRAINEE, class_intake_id=hierarchy.intake.id)
        await make_user(Role.TRAINEE)
        await store.create(
            Assignment,
            class_intake_id=hierarchy.intake.id,
            unit_id=hierarchy.unit.id,
            assessor_id=assessor.id,
        )
        await store.commit()

        covered = await aggregator.trainees_covered_by(assessor.id)

        assert sorted(covered) == sorted([trainee.id, classmate.id])


class TestAssessorActivity:
    async def test_counts_and_turnaround(self, aggregator, store, trainee, assessor, hierarchy):
        submission = await add_submission(store, trainee, hierarchy, SubmissionStatus.APPROVED)
        await add_assessment(store, submission, assessor, AssessmentStatus.RESUBMIT, DAY * 2)
        await add_assessment(store, submission, assessor, AssessmentStatus.APPROVED, DAY * 4)

        (row,) = await aggregator.assessor_activity()

        assert row.assessor_id == assessor.id
        assert row.assessments_count == 2
        assert row.approved_count == 1
        assert row.resubmit_count == 1
        assert row.average_turnaround == pytest.approx(3.0)

    async def test_idle_assessor_reported_with_zeros(self, aggregator, assessor):
        (row,) = await aggregator.assessor_activity()

        assert row.assessments_count == 0
        assert row.average_turnaround == 0.0


class TestAssessmentOutcomes:
    async def test_every_unit_task_pair_is_listed(self, aggregator, store, trainee, hierarchy):
        empty_task = await store.create(Task, unit_id=hierarchy.unit.id, name="Normalisation")
        await store.commit()
        await add_submission(store, trainee, hierarchy, SubmissionStatus.APPROVED)
        await add_submission(store, trainee, hierarchy, SubmissionStatus.PENDING)

        rows = {row.task_id: row for row in await aggregator.assessment_outcomes()}

        assert rows[hierarchy.task.id].total_submissions == 2
        assert rows[hierarchy.task.id].approved_count == 1
        assert rows[hierarchy.task.id].pending_count == 1
        assert rows[empty_task.id].total_submissions == 0
        assert rows[empty_task.id].unit_name == hierarchy.unit.name
