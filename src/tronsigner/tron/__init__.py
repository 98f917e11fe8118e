"""TRON ledger helpers: addresses, ABI encoding and node clients."""

from tronsigner.tron.client import NodeClient, TransactionStatus, TronGridClient

__all__ = [
    "NodeClient",
    "TransactionStatus",
    "TronGridClient",
]
