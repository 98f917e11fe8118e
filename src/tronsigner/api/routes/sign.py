"""Signing endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tronsigner.api.deps import get_service
from tronsigner.errors import NodeTransportError, SignerServiceError, TransportError
from tronsigner.transfer.auth import extract_secret
from tronsigner.transfer.normalizer import parse_body
from tronsigner.transfer.service import SigningService
from tronsigner.tron.client import transaction_status

router = APIRouter()


@router.post("/sign")
async def sign(request: Request, service: SigningService = Depends(get_service)) -> JSONResponse:
    """Build, sign and broadcast a TRX or TRC20 transfer.

    The body is a JSON object (or urlencoded form) using any of the accepted
    field aliases. The caller secret goes in X-Signer-Secret.
    """
    body = parse_body(await request.body())
    outcome = await service.handle(body, extract_secret(request.headers))
    return JSONResponse(status_code=outcome.response.status_code, content=outcome.response.body)


@router.get("/tx/{txid}")
async def transaction(txid: str, request: Request, service: SigningService = Depends(get_service)) -> JSONResponse:
    """Look up the on-chain status of a broadcast transaction."""
    try:
        service.authenticator.authenticate(extract_secret(request.headers))
        try:
            data = await service.client.get_transaction(txid)
        except NodeTransportError as e:
            raise TransportError(str(e))
    except SignerServiceError as e:
        formatted = service.formatter.error(e)
        return JSONResponse(status_code=formatted.status_code, content=formatted.body)

    return JSONResponse(
        status_code=200,
        content={"status": "ok", "txid": txid, "state": transaction_status(data).value},
    )
