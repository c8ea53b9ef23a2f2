"""Health check endpoint."""

from pydantic import BaseModel

from formdata.core.logger import LogIcon, logger
from formdata.core.router import Router
from formdata.core.settings import settings as st
from formdata.multipart.sizes import parse_size

router = Router(__file__, prefix="/")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    upload_max_filesize: int | None
    uploads_enabled: bool


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return HealthResponse(
        status="healthy",
        service=st.API_NAME,
        version=st.API_VERSION,
        upload_max_filesize=parse_size(st.UPLOAD_MAX_FILESIZE),
        uploads_enabled=bool(st.UPLOAD_TMP_DIR),
    )
