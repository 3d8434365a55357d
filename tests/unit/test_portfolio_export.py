"""
Unit Tests for Portfolio Export

Content assembly (ordering, table of contents, criteria outcomes) and PDF
rendering with reportlab.
"""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from reportlab.platypus import Paragraph, SimpleDocTemplate

from poetracker.core.errors import NotFoundError, UpstreamFailure
from poetracker.core.models import (
    Assessment,
    AssessmentStatus,
    Submission,
    SubmissionFile,
    SubmissionStatus,
    Verification,
    VerificationStatus,
    VerifierType,
)
from poetracker.export import PdfPortfolioRenderer, PortfolioBuilder, PortfolioDocument

SUBMITTED = datetime(2024, 5, 6, 10, 30, tzinfo=UTC)


@pytest.fixture
async def portfolio_records(store, trainee, assessor, internal_verifier, hierarchy):
    """Two submissions; the first assessed and internally verified."""
    first = await store.create(
        Submission,
        trainee_id=trainee.id,
        task_id=hierarchy.task.id,
        unit_id=hierarchy.unit.id,
        title="ER Diagram & Notes",
        description="Entity relationship model for the library system",
        status=SubmissionStatus.APPROVED,
        submitted_at=SUBMITTED,
    )
    second = await store.create(
        Submission,
        trainee_id=trainee.id,
        task_id=hierarchy.task.id,
        unit_id=hierarchy.unit.id,
        title="Normalised Schema",
        status=SubmissionStatus.PENDING,
        submitted_at=SUBMITTED + timedelta(days=2),
    )
    await store.create(
        SubmissionFile,
        submission_id=first.id,
        file_name="erd.pdf",
        file_type="application/pdf",
        file_path="/tmp/erd.pdf",
        file_size=2048,
    )
    assessment = await store.create(
        Assessment,
        submission_id=first.id,
        assessor_id=assessor.id,
        feedback="Clear diagram",
        criteria={"Entities correctly identified": True, "Cardinality correctly specified": False},
        status=AssessmentStatus.APPROVED,
        assessed_at=SUBMITTED + timedelta(days=1),
    )
    await store.create(
        Verification,
        assessment_id=assessment.id,
        verifier_id=internal_verifier.id,
        verifier_type=VerifierType.INTERNAL,
        status=VerificationStatus.CONFIRMED,
        comments="Agreed",
    )
    await store.commit()
    return first, second


def paragraph_texts(flowables) -> list[str]:
    return [f.getPlainText() for f in flowables if isinstance(f, Paragraph)]


class TestPortfolioBuilder:
    async def test_get_trainee_rejects_non_trainee(self, store, assessor):
        with pytest.raises(NotFoundError, match=f"Trainee not found with ID: {assessor.id}"):
            await PortfolioBuilder(store).get_trainee(assessor.id)

    async def test_get_trainee_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            await PortfolioBuilder(store).get_trainee(9999)

    async def test_sections_follow_submission_order(
        self, store, trainee, assessor, internal_verifier, hierarchy, portfolio_records
    ):
        document = await PortfolioBuilder(store).build(trainee)

        assert document.trainee_name == trainee.full_name
        assert document.table_of_contents == ["1. ER Diagram & Notes", "2. Normalised Schema"]

        first, second = document.sections
        assert first.unit_name == hierarchy.unit.name
        assert first.task_name == hierarchy.task.name
        assert [f.label for f in first.files] == ["erd.pdf (application/pdf, 2 KB)"]

        (assessment,) = first.assessments
        assert assessment.assessor_name == assessor.full_name
        assert assessment.criteria == [
            ("Entities correctly identified", True),
            ("Cardinality correctly specified", False),
        ]
        (verification,) = assessment.verifications
        assert verification.verifier_name == internal_verifier.full_name
        assert verification.verifier_type == "internal"

        assert second.assessments == []
        assert second.status == "pending"

    async def test_trainee_without_submissions(self, store, trainee):
        document = await PortfolioBuilder(store).build(trainee)

        assert document.sections == []
        assert document.table_of_contents == []


class TestPdfPortfolioRenderer:
    async def test_flowables_contain_portfolio_content(self, store, trainee, portfolio_records):
        document = await PortfolioBuilder(store).build(trainee)

        texts = paragraph_texts(PdfPortfolioRenderer().flowables(document))

        assert "Portfolio of Evidence" in texts
        assert f"Trainee: {trainee.full_name}" in texts
        assert "Table of Contents" in texts
        assert "1. ER Diagram & Notes" in texts
        assert "Submission: ER Diagram & Notes" in texts
        assert "- Entities correctly identified: Met" in texts
        assert "- Cardinality correctly specified: Not Met" in texts
        assert "Comments: Agreed" in texts

    def test_empty_portfolio_says_so(self):
        document = PortfolioDocument(
            trainee_id=1, trainee_name="Nobody", generated_at=SUBMITTED, sections=[]
        )

        texts = paragraph_texts(PdfPortfolioRenderer().flowables(document))

        assert "No submissions yet." in texts

    async def test_render_writes_pdf(self, store, trainee, portfolio_records, tmp_path):
        document = await PortfolioBuilder(store).build(trainee)

        pdf_path = PdfPortfolioRenderer(output_dir=tmp_path / "exports").render(document)

        assert pdf_path.parent == tmp_path / "exports"
        assert pdf_path.name.startswith(f"portfolio_{trainee.id}_")
        assert pdf_path.read_bytes().startswith(b"%PDF")

    def test_render_failure_leaves_no_partial_file(self, tmp_path, monkeypatch):
        def broken_build(self, flowables, *args, **kwargs):
            Path(self.filename).write_bytes(b"%PDF-partial")
            raise RuntimeError("layout error")

        monkeypatch.setattr(SimpleDocTemplate, "build", broken_build)
        output_dir = tmp_path / "exports"
        document = PortfolioDocument(trainee_id=1, trainee_name="T", generated_at=SUBMITTED)

        with pytest.raises(UpstreamFailure, match="Failed to export portfolio"):
            PdfPortfolioRenderer(output_dir=output_dir).render(document)

        assert list(output_dir.iterdir()) == []
