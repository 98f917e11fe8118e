"""Broadcast stage.

Separates transport failures (node unreachable, unparseable reply) from
node rejections (node understood the transaction and refused it). Neither
is retried.
"""

import logging

from tronsigner.errors import (
    InvalidSignedTransaction,
    NodeRejected,
    NodeTransportError,
    TransportError,
)
from tronsigner.signing.base import SIGNATURE_LENGTH
from tronsigner.transfer.base import BroadcastResult, SignedTransaction
from tronsigner.tron.client import NodeClient, decode_node_message

logger = logging.getLogger(__name__)

# TRON accounts with a single owner key expect exactly one signature
EXPECTED_SIGNATURES = 1


def validate_signed(signed: SignedTransaction) -> None:
    """Reject malformed signed transactions before they reach the node.

    Raises:
        InvalidSignedTransaction: On wrong signature count or form
    """
    if len(signed.signatures) != EXPECTED_SIGNATURES:
        raise InvalidSignedTransaction(
            f"expected {EXPECTED_SIGNATURES} signature, got {len(signed.signatures)}"
        )

    for signature in signed.signatures:
        try:
            raw = bytes.fromhex(signature)
        except (TypeError, ValueError):
            raise InvalidSignedTransaction("signature is not hex")
        if len(raw) != SIGNATURE_LENGTH:
            raise InvalidSignedTransaction(
                f"signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
            )

    if not signed.txid or not signed.unsigned.raw_data_hex:
        raise InvalidSignedTransaction("transaction has no txID or raw data")


class Broadcaster:
    """Submits signed transactions to the node."""

    def __init__(self, client: NodeClient):
        self.client = client

    async def broadcast(self, signed: SignedTransaction) -> BroadcastResult:
        """Broadcast a signed transaction.

        Raises:
            InvalidSignedTransaction: Not sent, malformed
            TransportError: Node unreachable or reply malformed
            NodeRejected: Node refused the transaction
        """
        validate_signed(signed)

        try:
            data = await self.client.broadcast_transaction(signed.to_payload())
        except NodeTransportError as e:
            logger.error(f"Broadcast of {signed.txid} failed in transport: {e}")
            raise TransportError(str(e))

        if not isinstance(data, dict):
            raise TransportError("broadcast reply is not an object")

        if data.get("result") is True:
            txid = data.get("txid") or signed.txid
            logger.info(f"Tron {signed.mode.value} tx broadcast: {txid}")
            return BroadcastResult(success=True, txid=txid, raw=data)

        code = data.get("code")
        message = decode_node_message(data.get("message"))
        if not code and not message:
            if data.get("result") is False:
                message = "transaction refused without a reason"
            else:
                raise TransportError(f"unrecognised broadcast reply: {sorted(data.keys())}")

        logger.error(f"Broadcast of {signed.txid} rejected: {code} {message}")
        raise NodeRejected(f"{code}: {message}" if code else message, code=code)
