"""
Portfolio Export API

Renders a trainee's Portfolio of Evidence to PDF and returns the file.
"""
# ruff: noqa: B008 - FastAPI Depends in function defaults is standard pattern

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from poetracker.api.deps import get_current_user, get_recorder, get_store
from poetracker.core.models import Role, User
from poetracker.core.policy import can_export_portfolio, enforce
from poetracker.core.store import EntityStore
from poetracker.export import PdfPortfolioRenderer, PortfolioBuilder
from poetracker.workflow import ActivityRecorder

router = APIRouter(tags=["Portfolio"])


@router.get(
    "/export-portfolio/{trainee_id}",
    response_class=FileResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def export_portfolio(
    trainee_id: int,
    current_user: User = Depends(get_current_user),
    store: EntityStore = Depends(get_store),
    recorder: ActivityRecorder = Depends(get_recorder),
) -> FileResponse:
    """
    Export a trainee's portfolio as PDF.

    Allowed for the trainee themself, an assessor assigned to them, or an admin.
    """
    builder = PortfolioBuilder(store)
    trainee = await builder.get_trainee(trainee_id)

    assignments = []
    if current_user.role == Role.ASSESSOR:
        assignments = await store.assignments_covering(trainee)
    enforce(can_export_portfolio(current_user, trainee, assignments))

    document = await builder.build(trainee)
    pdf_path = await run_in_threadpool(PdfPortfolioRenderer().render, document)

    await recorder.record(current_user.id, "exported_portfolio", {"trainee_id": trainee_id})
    return FileResponse(pdf_path, media_type="application/pdf", filename=pdf_path.name)
