"""API routes"""
import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse, StreamingResponse

from ..models.domain import DownloadRequest
from ..models.schemas import ErrorResponse, HealthResponse, InspectResponse, VideoURL

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@router.post("/inspect", response_model=InspectResponse)
async def inspect(video: VideoURL, request: Request):
    """Get title and selectable formats for a link"""
    if not video.url:
        return _error(400, "Missing url in request body.")

    descriptor = await request.app.state.inspection_service.inspect(video.url)
    return InspectResponse.from_descriptor(descriptor)


@router.get("/download")
async def download(
    request: Request,
    url: Optional[str] = None,
    type: str = "mp4",
    itag: Optional[str] = None
):
    """Stream the selected format, converting to MP3 when asked"""
    if not url:
        return _error(400, "Missing url query parameter.")

    delivery = await request.app.state.delivery_service.deliver(
        DownloadRequest(origin_url=url, output_container=type.lower(), format_id=itag or None)
    )
    if delivery.is_redirect:
        return RedirectResponse(delivery.redirect_url, status_code=302)

    return StreamingResponse(
        delivery.body,
        media_type=delivery.media_type,
        headers={"Content-Disposition": f'attachment; filename="{delivery.filename}"'},
    )


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse()
