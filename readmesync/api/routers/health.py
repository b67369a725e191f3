"""Health check router."""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from readmesync.config import VERSION

router = APIRouter()


@router.get("/health", response_class=PlainTextResponse)
async def health_check() -> str:
    """Liveness probe.  Never signed, never touches GitHub or hugo."""
    return "ok"


@router.get("/health/version")
async def health_version() -> dict:
    """Return the running version."""
    return {"version": VERSION}
