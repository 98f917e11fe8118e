"""Transfer signing pipeline.

Normalizes a transfer request, builds the TRX or TRC20 transaction on the
node, signs it with the hot wallet key and broadcasts it.
"""

from tronsigner.transfer.base import (
    BroadcastResult,
    RequestState,
    SignedTransaction,
    SigningRequest,
    TransferMode,
    UnsignedTransaction,
)
from tronsigner.transfer.service import SigningOutcome, SigningService

__all__ = [
    "BroadcastResult",
    "RequestState",
    "SignedTransaction",
    "SigningOutcome",
    "SigningRequest",
    "SigningService",
    "TransferMode",
    "UnsignedTransaction",
]
