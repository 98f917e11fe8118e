"""Response formatting.

Every pipeline outcome maps onto one of:

    {"status": "ok", "type": "native" | "contract", "result": {...}}
    {"status": "error", "stage": ..., "error": ..., "detail": ...}
"""

from dataclasses import dataclass
from typing import Callable, Optional

from tronsigner.errors import SignerServiceError, ValidationError, bound_detail
from tronsigner.transfer.base import BroadcastResult, TransferMode


@dataclass
class FormattedResponse:
    """HTTP status and JSON body."""
    status_code: int
    body: dict


class ResponseFormatter:
    """Maps pipeline outcomes to the response contract.

    Args:
        redact: Scrubs credential material out of detail strings
    """

    def __init__(self, redact: Optional[Callable[[str], str]] = None):
        self._redact = redact

    def _scrub(self, text: str) -> str:
        if self._redact:
            text = self._redact(text)
        return bound_detail(text)

    def success(self, mode: TransferMode, result: BroadcastResult) -> FormattedResponse:
        return FormattedResponse(
            status_code=200,
            body={
                "status": "ok",
                "type": mode.value,
                "result": result.to_dict(),
            },
        )

    def error(self, error: SignerServiceError) -> FormattedResponse:
        body = {
            "status": "error",
            "stage": error.stage.value,
            "error": error.kind.value,
            "detail": self._scrub(error.detail),
        }
        if isinstance(error, ValidationError) and error.received is not None:
            body["received"] = error.received
        return FormattedResponse(status_code=error.status_code, body=body)
