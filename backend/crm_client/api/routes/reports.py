"""Reports — PDF export and email report side actions.

Invariants:
    - PDF download streams the upstream bytes with a report filename
    - A JSON answer from the download endpoint is passed through as JSON
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from crm_client.api.dependencies import get_caller_client
from crm_client.core.domain_types import ContentKind
from crm_client.infrastructure.api_client import ApiClient, report_filename
from crm_client.schemas.reports import EmailReportRequest, PdfReportRequest

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.post("/pdf", status_code=status.HTTP_201_CREATED)
async def generate_pdf(
    body: PdfReportRequest, client: ApiClient = Depends(get_caller_client),
):
    return await client.generate_pdf(body.dashboard_type, body.data, body.filters)


@router.get("/pdf/{pdf_id}")
async def download_pdf(pdf_id: str, client: ApiClient = Depends(get_caller_client)):
    envelope = await client.download_pdf(pdf_id)
    if envelope.content_kind is ContentKind.JSON:
        return envelope.payload
    content = envelope.payload
    if isinstance(content, str):
        content = content.encode("utf-8")
    return Response(
        content=content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{report_filename(pdf_id)}"',
        },
    )


@router.post("/email", status_code=status.HTTP_202_ACCEPTED)
async def send_email_report(
    body: EmailReportRequest, client: ApiClient = Depends(get_caller_client),
):
    return await client.send_email(
        body.recipients, body.subject, body.message, body.dashboard_type,
    )
