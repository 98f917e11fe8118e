"""Error taxonomy for the signing pipeline.

Every failure surfaced to a caller is one of a closed set of kinds, tagged
with the pipeline stage that raised it. The stage lets the caller tell
"never reached the node" apart from "node rejected".
"""

from enum import Enum
from typing import Optional

MAX_DETAIL_LENGTH = 512


class Stage(str, Enum):
    """Pipeline stage an error was raised in."""
    AUTH = "auth"
    NORMALIZE = "normalize"
    BUILD = "build"
    SIGN = "sign"
    BROADCAST = "broadcast"
    INTERNAL = "internal"


class ErrorKind(str, Enum):
    """Machine-parseable error identifiers."""
    INVALID_SIGNER_SECRET = "invalid_signer_secret"
    MISSING_PARAMETERS = "missing_parameters"
    INVALID_AMOUNT = "invalid_amount"
    BUILD_FAILED = "build_failed"
    ACCOUNT_BUSY = "account_busy"
    SIGNING_FAILED = "signing_failed"
    OWNER_MISMATCH = "owner_mismatch"
    INVALID_SIGNED_TRANSACTION = "invalid_signed_transaction"
    TRANSPORT_ERROR = "transport_error"
    NODE_REJECTED = "node_rejected"
    INTERNAL_ERROR = "internal_error"


def bound_detail(detail: str) -> str:
    """Truncate a detail string to MAX_DETAIL_LENGTH characters."""
    if len(detail) <= MAX_DETAIL_LENGTH:
        return detail
    return detail[: MAX_DETAIL_LENGTH - 3] + "..."


class SignerServiceError(Exception):
    """Base class for all pipeline errors."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    stage: Stage = Stage.INTERNAL
    status_code: int = 500

    def __init__(
        self,
        detail: str = "",
        kind: Optional[ErrorKind] = None,
        stage: Optional[Stage] = None,
    ):
        self.detail = bound_detail(detail)
        if kind is not None:
            self.kind = kind
        if stage is not None:
            self.stage = stage
        super().__init__(self.detail or self.kind.value)


class AuthError(SignerServiceError):
    """Caller credential missing or wrong."""
    kind = ErrorKind.INVALID_SIGNER_SECRET
    stage = Stage.AUTH
    status_code = 403


class ValidationError(SignerServiceError):
    """Request fields unresolvable or malformed."""
    kind = ErrorKind.MISSING_PARAMETERS
    stage = Stage.NORMALIZE
    status_code = 400

    def __init__(
        self,
        detail: str = "",
        kind: Optional[ErrorKind] = None,
        received: Optional[dict] = None,
    ):
        super().__init__(detail, kind=kind)
        self.received = received


class BuildError(SignerServiceError):
    """Transaction construction failed."""
    kind = ErrorKind.BUILD_FAILED
    stage = Stage.BUILD


class SigningError(SignerServiceError):
    """Signature production failed."""
    kind = ErrorKind.SIGNING_FAILED
    stage = Stage.SIGN


class BroadcastError(SignerServiceError):
    """Delivery of a signed transaction failed."""
    kind = ErrorKind.TRANSPORT_ERROR
    stage = Stage.BROADCAST


class TransportError(BroadcastError):
    """Node unreachable or returned a malformed response."""
    kind = ErrorKind.TRANSPORT_ERROR


class NodeRejected(BroadcastError):
    """Node parsed the submission and refused it."""
    kind = ErrorKind.NODE_REJECTED

    def __init__(self, detail: str = "", code: Optional[str] = None):
        super().__init__(detail)
        self.code = code


class InvalidSignedTransaction(BroadcastError):
    """Signed transaction is malformed and was not sent."""
    kind = ErrorKind.INVALID_SIGNED_TRANSACTION


class InternalError(SignerServiceError):
    """Anything unanticipated."""
    kind = ErrorKind.INTERNAL_ERROR
    stage = Stage.INTERNAL


class NodeTransportError(Exception):
    """Raised by node clients when the node cannot be reached or parsed."""
    pass


class ConfigError(Exception):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))
