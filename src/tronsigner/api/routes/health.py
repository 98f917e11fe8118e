"""Health check endpoints."""

from fastapi import APIRouter, Depends, Request

from tronsigner import __version__
from tronsigner.api.deps import get_service
from tronsigner.transfer.service import SigningService

router = APIRouter()


@router.get("/")
async def liveness():
    """Liveness probe."""
    return {"status": "signer-up"}


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "tronsigner"}


@router.get("/health/detailed")
async def detailed_health(request: Request, service: SigningService = Depends(get_service)):
    """Detailed health check with redacted configuration."""
    settings = request.app.state.settings
    return {
        "status": "healthy" if await service.signer.health_check() else "degraded",
        "service": "tronsigner",
        "version": __version__,
        "signer": {
            "type": service.signer.signer_type.value,
            "address": service.signer.address,
        },
        "config": settings.get_safe_dict(),
    }
