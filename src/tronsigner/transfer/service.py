"""Signing pipeline orchestration.

received -> authenticated -> normalized -> built -> signed -> broadcast -> completed

Any stage can short-circuit to error; the error carries the stage tag.
Build, sign and broadcast run under the sender's account lock.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from tronsigner.config import Settings
from tronsigner.errors import (
    BuildError,
    ErrorKind,
    InternalError,
    SignerServiceError,
)
from tronsigner.signing.base import SignerBackend
from tronsigner.transfer.auth import Authenticator
from tronsigner.transfer.base import (
    BroadcastResult,
    RequestState,
    SigningRequest,
    TransferMode,
)
from tronsigner.transfer.broadcaster import Broadcaster
from tronsigner.transfer.builder import get_builder
from tronsigner.transfer.formatter import FormattedResponse, ResponseFormatter
from tronsigner.transfer.normalizer import normalize
from tronsigner.transfer.signer import TransactionSigner
from tronsigner.tron.client import NodeClient
from tronsigner.utils.locks import AccountLockRegistry, LockTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class RequestContext:
    """Mutable per-request progress record."""
    state: RequestState = RequestState.RECEIVED
    request: Optional[SigningRequest] = None
    history: list[RequestState] = field(default_factory=lambda: [RequestState.RECEIVED])

    def advance(self, state: RequestState) -> None:
        self.state = state
        self.history.append(state)


@dataclass
class SigningOutcome:
    """Final state of one request and the response to send."""
    state: RequestState
    response: FormattedResponse
    history: list[RequestState]
    mode: Optional[TransferMode] = None
    txid: Optional[str] = None
    failed_stage: Optional[str] = None


class SigningService:
    """Runs /sign requests through the pipeline."""

    def __init__(
        self,
        client: NodeClient,
        signer: SignerBackend,
        secret: str,
        fee_limit: int = 30_000_000,
        enforce_owner_match: bool = False,
        lock_timeout: Optional[float] = 30.0,
    ):
        self.client = client
        self.signer = signer
        self.fee_limit = fee_limit
        self.lock_timeout = lock_timeout

        self._secret = secret
        self.authenticator = Authenticator(secret)
        self.transaction_signer = TransactionSigner(signer, enforce_owner_match)
        self.broadcaster = Broadcaster(client)
        self.formatter = ResponseFormatter(redact=self.redact)
        self.locks = AccountLockRegistry()

    @classmethod
    def from_settings(cls, settings: Settings, client: NodeClient, signer: SignerBackend) -> "SigningService":
        return cls(
            client=client,
            signer=signer,
            secret=settings.signer_secret.get_secret_value() if settings.signer_secret else "",
            fee_limit=settings.fee_limit_sun,
            enforce_owner_match=settings.enforce_owner_match,
            lock_timeout=settings.account_lock_timeout,
        )

    def redact(self, text: str) -> str:
        """Scrub the private key and the shared secret from text."""
        if not text:
            return text
        text = self.signer.redact(text)
        if self._secret and self._secret in text:
            text = text.replace(self._secret, "***")
        return text

    def _lock_key(self, request: SigningRequest) -> str:
        try:
            return self.client.resolve_address(request.from_address)
        except ValueError:
            return request.from_address

    async def execute(self, request: SigningRequest, context: RequestContext) -> BroadcastResult:
        """Build, sign and broadcast under the sender's lock.

        Raises:
            SignerServiceError: From the failing stage
        """
        try:
            async with self.locks.hold(
                self._lock_key(request),
                timeout=self.lock_timeout,
                operation=request.mode.value,
            ):
                builder = get_builder(request, self.client, self.fee_limit)
                unsigned = await builder.build(request)
                context.advance(RequestState.BUILT)

                signed = self.transaction_signer.sign(unsigned, request)
                context.advance(RequestState.SIGNED)

                result = await self.broadcaster.broadcast(signed)
                context.advance(RequestState.BROADCAST)
        except LockTimeoutError as e:
            raise BuildError(str(e), kind=ErrorKind.ACCOUNT_BUSY)

        return result

    async def handle(self, body: Mapping, provided_secret: Optional[str]) -> SigningOutcome:
        """Process one request end to end. Never raises."""
        context = RequestContext()

        try:
            self.authenticator.authenticate(provided_secret)
            context.advance(RequestState.AUTHENTICATED)

            context.request = normalize(body, redact=self.redact)
            context.advance(RequestState.NORMALIZED)

            result = await self.execute(context.request, context)

        except SignerServiceError as e:
            return self._failed(e, context, body)

        except Exception as e:
            # Tracebacks can carry request or key material; log the scrubbed message only
            error = InternalError(self.redact(f"{e.__class__.__name__}: {e}"))
            logger.error(f"Unexpected error after state {context.state.value}: {error.detail}")
            return self._failed(error, context, body)

        request = context.request
        context.advance(RequestState.COMPLETED)
        logger.info(
            f"Request completed: {request.mode.value} {request.from_address} -> "
            f"{request.to_address} txid={result.txid}"
        )
        return SigningOutcome(
            state=context.state,
            response=self.formatter.success(request.mode, result),
            history=context.history,
            mode=request.mode,
            txid=result.txid,
        )

    def _failed(self, error: SignerServiceError, context: RequestContext, body: Mapping) -> SigningOutcome:
        request = context.request
        if request:
            shape = f"mode={request.mode.value} {request.to_dict()}"
        elif isinstance(body, Mapping):
            shape = f"keys={sorted(str(k) for k in body.keys())}"
        else:
            shape = "body=<not a mapping>"

        log = logger.warning if error.status_code < 500 else logger.error
        log(
            f"Request failed at stage {error.stage.value} (after {context.state.value}): "
            f"{error.kind.value}: {self.redact(error.detail)} [{shape}]"
        )

        context.advance(RequestState.ERROR)
        return SigningOutcome(
            state=context.state,
            response=self.formatter.error(error),
            history=context.history,
            mode=request.mode if request else None,
            failed_stage=error.stage.value,
        )
