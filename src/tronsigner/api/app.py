"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from tronsigner import __version__
from tronsigner.config import Settings, get_settings, validate_startup
from tronsigner.signing.base import SignerBackend
from tronsigner.signing.local import LocalSigner
from tronsigner.transfer.service import SigningService
from tronsigner.tron.client import NodeClient, TronGridClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield
    # Shutdown
    await app.state.service.client.close()


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[NodeClient] = None,
    signer: Optional[SignerBackend] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Raises:
        ConfigError: If the secret or private key is missing or invalid
    """
    settings = settings or get_settings()
    credential = validate_startup(settings)

    if signer is None:
        signer = LocalSigner(credential)
    if client is None:
        client = TronGridClient(
            base_url=settings.trongrid_base,
            api_key=settings.trongrid_api_key,
            timeout=settings.node_timeout,
        )

    app = FastAPI(
        title="tronsigner",
        description="Hot wallet signing service for TRX and TRC20 transfers",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.service = SigningService.from_settings(settings, client, signer)

    # Register routes
    from tronsigner.api.routes import health, sign

    app.include_router(health.router, tags=["Health"])
    app.include_router(sign.router, tags=["Signing"])

    logger.info(f"Signer ready for {signer.address} via {settings.trongrid_base}")
    return app
