"""Health check router."""

from fastapi import APIRouter

from tasktrack.utils.time import utc_now_iso

router = APIRouter()


@router.get("/health")
async def health_check():
    """Report that the API process is up."""
    return {"status": "OK", "timestamp": utc_now_iso()}
