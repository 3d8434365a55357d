"""
Portfolio Export

``PortfolioBuilder`` decides what goes into a trainee's Portfolio of Evidence
and in what order; ``PdfPortfolioRenderer`` lays that content out with
reportlab and writes the file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    HRFlowable,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from poetracker.config import settings
from poetracker.core.errors import NotFoundError, UpstreamFailure
from poetracker.core.models import Role, Task, Unit, User, utcnow
from poetracker.core.validation import criterion_met

if TYPE_CHECKING:
    from poetracker.core.store import EntityStore

logger = logging.getLogger(__name__)


# ============================================================================
# Document content
# ============================================================================


@dataclass
class FileEntry:
    file_name: str
    file_type: str
    file_size: int

    @property
    def label(self) -> str:
        return f"{self.file_name} ({self.file_type}, {round(self.file_size / 1024)} KB)"


@dataclass
class VerificationEntry:
    verifier_type: str
    verifier_name: str
    verified_at: datetime
    status: str
    comments: str | None = None


@dataclass
class AssessmentEntry:
    assessor_name: str
    assessed_at: datetime
    status: str
    feedback: str | None
    criteria: list[tuple[str, bool]] = field(default_factory=list)
    verifications: list[VerificationEntry] = field(default_factory=list)


@dataclass
class SubmissionSection:
    number: int
    title: str
    unit_name: str
    task_name: str
    submitted_at: datetime
    status: str
    description: str | None
    files: list[FileEntry] = field(default_factory=list)
    assessments: list[AssessmentEntry] = field(default_factory=list)


@dataclass
class PortfolioDocument:
    """Everything that goes into one trainee's portfolio, in reading order."""

    trainee_id: int
    trainee_name: str
    generated_at: datetime
    sections: list[SubmissionSection] = field(default_factory=list)

    @property
    def table_of_contents(self) -> list[str]:
        return [f"{section.number}. {section.title}" for section in self.sections]


class PortfolioBuilder:
    """Walks a trainee's submissions, assessments and verifications."""

    def __init__(self, store: EntityStore):
        self.store = store
        self._names: dict[int, str] = {}

    async def _user_name(self, user_id: int, fallback: str) -> str:
        if user_id not in self._names:
            user = await self.store.find(User, user_id)
            self._names[user_id] = user.full_name if user else fallback
        return self._names[user_id]

    async def get_trainee(self, trainee_id: int) -> User:
        """Load the trainee whose portfolio is requested.

        Raises:
            NotFoundError: No user with that id, or the user is not a trainee
        """
        trainee = await self.store.find(User, trainee_id)
        if trainee is None or trainee.role != Role.TRAINEE:
            raise NotFoundError(f"Trainee not found with ID: {trainee_id}")
        return trainee

    async def build(self, trainee: User) -> PortfolioDocument:
        document = PortfolioDocument(
            trainee_id=trainee.id,
            trainee_name=trainee.full_name,
            generated_at=utcnow(),
        )

        submissions = await self.store.submissions_by_trainee(trainee.id)
        for number, submission in enumerate(submissions, start=1):
            unit = await self.store.find(Unit, submission.unit_id)
            task = await self.store.find(Task, submission.task_id)
            section = SubmissionSection(
                number=number,
                title=submission.title,
                unit_name=unit.name if unit else "Unknown Unit",
                task_name=task.name if task else "Unknown Task",
                submitted_at=submission.submitted_at,
                status=str(submission.status),
                description=submission.description,
                files=[
                    FileEntry(f.file_name, f.file_type, f.file_size)
                    for f in await self.store.files_by_submission(submission.id)
                ],
            )

            for assessment in await self.store.assessments_by_submission(submission.id):
                entry = AssessmentEntry(
                    assessor_name=await self._user_name(
                        assessment.assessor_id, "Unknown Assessor"
                    ),
                    assessed_at=assessment.assessed_at,
                    status=str(assessment.status),
                    feedback=assessment.feedback,
                    criteria=[
                        (label, criterion_met(value))
                        for label, value in (assessment.criteria or {}).items()
                    ],
                )
                for verification in await self.store.verifications_by_assessment(assessment.id):
                    entry.verifications.append(
                        VerificationEntry(
                            verifier_type=str(verification.verifier_type),
                            verifier_name=await self._user_name(
                                verification.verifier_id, "Unknown Verifier"
                            ),
                            verified_at=verification.verified_at,
                            status=str(verification.status),
                            comments=verification.comments,
                        )
                    )
                section.assessments.append(entry)

            document.sections.append(section)

        return document


# ============================================================================
# PDF rendering
# ============================================================================


class PdfPortfolioRenderer:
    """Renders a ``PortfolioDocument`` to a PDF file."""

    BRAND_PRIMARY = colors.HexColor("#1F3A5F")
    BRAND_GRAY = colors.HexColor("#555555")

    def __init__(self, output_dir: Path | None = None):
        self.output_dir = output_dir or settings.EXPORT_DIR

    def render(self, document: PortfolioDocument) -> Path:
        """Write the portfolio and return the file path.

        Raises:
            UpstreamFailure: The document could not be rendered or written; no
                partial file is left behind.
        """
        timestamp = document.generated_at.strftime("%Y%m%d_%H%M%S_%f")
        pdf_path = self.output_dir / f"portfolio_{document.trainee_id}_{timestamp}.pdf"

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            doc = SimpleDocTemplate(
                str(pdf_path),
                pagesize=A4,
                rightMargin=0.75 * inch,
                leftMargin=0.75 * inch,
                topMargin=0.75 * inch,
                bottomMargin=0.75 * inch,
                title=f"Portfolio of Evidence - {document.trainee_name}",
            )
            doc.build(self.flowables(document))
        except Exception as e:
            logger.error(
                f"Failed to render portfolio for trainee {document.trainee_id}: {e}",
                exc_info=True,
            )
            pdf_path.unlink(missing_ok=True)
            raise UpstreamFailure("Failed to export portfolio") from e

        logger.info(f"Generated portfolio PDF: {pdf_path}")
        return pdf_path

    def flowables(self, document: PortfolioDocument) -> list[Any]:
        """Title page, table of contents, then one page run per submission."""
        styles = self._create_styles()
        elements: list[Any] = []

        # Title page
        elements.append(Spacer(1, 2 * inch))
        elements.append(Paragraph("Portfolio of Evidence", styles["title"]))
        elements.append(Paragraph(f"Trainee: {escape(document.trainee_name)}", styles["subtitle"]))
        elements.append(Paragraph(f"ID: {document.trainee_id}", styles["centered"]))
        elements.append(
            Paragraph(f"Generated: {document.generated_at:%Y-%m-%d}", styles["centered"])
        )

        # Table of contents
        elements.append(PageBreak())
        elements.append(Paragraph("Table of Contents", styles["section_header"]))
        if document.table_of_contents:
            for line in document.table_of_contents:
                elements.append(Paragraph(escape(line), styles["normal"]))
        else:
            elements.append(Paragraph("No submissions yet.", styles["normal"]))

        for section in document.sections:
            elements.append(PageBreak())
            elements.extend(self._submission_section(section, styles))

        return elements

    def _submission_section(
        self, section: SubmissionSection, styles: dict[str, ParagraphStyle]
    ) -> list[Any]:
        elements: list[Any] = [
            Paragraph(f"Submission: {escape(section.title)}", styles["section_header"]),
            self._details_table(
                [
                    ("Unit", section.unit_name),
                    ("Task", section.task_name),
                    ("Submission Date", f"{section.submitted_at:%Y-%m-%d}"),
                    ("Status", section.status),
                ],
                styles,
            ),
            Spacer(1, 0.15 * inch),
        ]

        if section.description:
            elements.append(Paragraph("Description:", styles["label"]))
            elements.append(Paragraph(escape(section.description), styles["normal"]))
            elements.append(Spacer(1, 0.1 * inch))

        if section.files:
            elements.append(Paragraph("Attached Files:", styles["label"]))
            for entry in section.files:
                elements.append(Paragraph(f"- {escape(entry.label)}", styles["normal"]))
            elements.append(Spacer(1, 0.1 * inch))

        if section.assessments:
            elements.append(Paragraph("Assessment Feedback:", styles["label"]))
        for assessment in section.assessments:
            elements.append(
                HRFlowable(width="100%", thickness=0.5, color=self.BRAND_GRAY, spaceAfter=4)
            )
            elements.append(
                Paragraph(
                    f"Assessment by: {escape(assessment.assessor_name)}", styles["normal"]
                )
            )
            elements.append(Paragraph(f"Date: {assessment.assessed_at:%Y-%m-%d}", styles["normal"]))
            elements.append(Paragraph(f"Status: {assessment.status}", styles["normal"]))
            if assessment.feedback:
                elements.append(Paragraph("Feedback:", styles["normal"]))
                elements.append(Paragraph(escape(assessment.feedback), styles["small"]))
            if assessment.criteria:
                elements.append(Paragraph("Assessment Criteria:", styles["normal"]))
                for label, met in assessment.criteria:
                    outcome = "Met" if met else "Not Met"
                    elements.append(Paragraph(f"- {escape(label)}: {outcome}", styles["small"]))

            if assessment.verifications:
                elements.append(Paragraph("Verification:", styles["normal"]))
            for verification in assessment.verifications:
                elements.append(
                    Paragraph(
                        f"{verification.verifier_type.capitalize()} Verification by: "
                        f"{escape(verification.verifier_name)}",
                        styles["small"],
                    )
                )
                elements.append(
                    Paragraph(f"Date: {verification.verified_at:%Y-%m-%d}", styles["small"])
                )
                elements.append(Paragraph(f"Status: {verification.status}", styles["small"]))
                if verification.comments:
                    elements.append(
                        Paragraph(f"Comments: {escape(verification.comments)}", styles["small"])
                    )
            elements.append(Spacer(1, 0.1 * inch))

        return elements

    def _details_table(
        self, rows: list[tuple[str, str]], styles: dict[str, ParagraphStyle]
    ) -> Table:
        data = [
            [Paragraph(label, styles["label"]), Paragraph(escape(value), styles["normal"])]
            for label, value in rows
        ]
        table = Table(data, colWidths=[1.6 * inch, 5 * inch])
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                ]
            )
        )
        return table

    def _create_styles(self) -> dict[str, ParagraphStyle]:
        base = getSampleStyleSheet()
        return {
            "title": ParagraphStyle(
                "PortfolioTitle",
                parent=base["Title"],
                fontSize=24,
                leading=28,
                textColor=self.BRAND_PRIMARY,
                alignment=1,
                spaceAfter=18,
            ),
            "subtitle": ParagraphStyle(
                "PortfolioSubtitle",
                parent=base["Normal"],
                fontSize=16,
                leading=20,
                alignment=1,
                spaceAfter=8,
            ),
            "centered": ParagraphStyle(
                "Centered", parent=base["Normal"], fontSize=12, leading=15, alignment=1
            ),
            "section_header": ParagraphStyle(
                "SectionHeader",
                parent=base["Heading2"],
                textColor=self.BRAND_PRIMARY,
                spaceAfter=10,
            ),
            "label": ParagraphStyle(
                "Label", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=11, leading=14
            ),
            "normal": ParagraphStyle("Body", parent=base["Normal"], fontSize=10, leading=13),
            "small": ParagraphStyle(
                "Small", parent=base["Normal"], fontSize=9, leading=11, textColor=self.BRAND_GRAY
            ),
        }
