"""FastAPI dependencies."""

from fastapi import Request

from tronsigner.transfer.service import SigningService


def get_service(request: Request) -> SigningService:
    """Signing service built by create_app()."""
    return request.app.state.service
