from fastapi import APIRouter
from fastapi.responses import StreamingResponse
from ..models.io import HealthIn
from .health import overview_payload
from ..exporters.ppt import build_ppt

router = APIRouter()


@router.post("/api/export/pptx")
def export_pptx(req: HealthIn):
    data = overview_payload(req)
    deck = build_ppt(data, title="Campaign Health Report")
    return StreamingResponse(
        deck,
        media_type="application/vnd.openxmlformats-officedocument.presentationml.presentation",
        headers={"Content-Disposition": 'attachment; filename="campaign_health.pptx"'}
    )
