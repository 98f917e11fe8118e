"""TRON node clients.

The signing pipeline only talks to the node through NodeClient. The node
owns protobuf encoding, timestamps, expiration and reference-block fields;
the pipeline decides which fields to populate.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

import httpx

from tronsigner.errors import NodeTransportError
from tronsigner.tron.address import to_hex_address

logger = logging.getLogger(__name__)


class TransactionStatus(str, Enum):
    """On-chain status of a broadcast transaction."""
    PENDING = "pending"          # Not yet seen by the node
    CONFIRMING = "confirming"    # Seen, no execution result yet
    COMPLETED = "completed"      # Executed successfully
    FAILED = "failed"            # Executed and reverted


class NodeClient(ABC):
    """Abstract interface to a TRON full node.

    Methods return the node's parsed JSON payload. They raise
    NodeTransportError when the node cannot be reached or its reply cannot
    be parsed; ledger-level errors are returned in the payload.
    """

    def resolve_address(self, address: str) -> str:
        """Resolve an address to canonical hex (41 + 20 bytes).

        Raises:
            ValueError: If the address is not valid
        """
        return to_hex_address(address)

    @abstractmethod
    async def create_transfer(self, owner_address: str, to_address: str, amount_sun: int) -> dict:
        """Create an unsigned TRX transfer.

        Args:
            owner_address: Sender, canonical hex
            to_address: Recipient, canonical hex
            amount_sun: Amount in sun

        Returns:
            Transaction template (txID, raw_data, raw_data_hex) or an error payload
        """
        pass

    @abstractmethod
    async def trigger_smart_contract(
        self,
        owner_address: str,
        contract_address: str,
        function_selector: str,
        parameter: str,
        fee_limit: int,
        call_value: int = 0,
    ) -> dict:
        """Create an unsigned smart contract call.

        Returns:
            Payload with "result" and "transaction" keys
        """
        pass

    @abstractmethod
    async def broadcast_transaction(self, signed_transaction: dict) -> dict:
        """Submit a signed transaction.

        Returns:
            Node reply, {"result": true, "txid": ...} on acceptance
        """
        pass

    @abstractmethod
    async def get_transaction(self, txid: str) -> dict:
        """Look up a transaction by id. Empty dict if unknown."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass


class TronGridClient(NodeClient):
    """NodeClient over the TronGrid HTTP API."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key

        self._headers = {"Accept": "application/json"}
        if api_key:
            self._headers["TRON-PRO-API-KEY"] = api_key

        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def _post(self, path: str, payload: dict) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.post(url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"TronGrid request to {path} failed: {e}")
            raise NodeTransportError(f"{path}: {e.__class__.__name__}: {e}") from e

        if response.status_code != 200:
            logger.error(f"TronGrid error on {path}: HTTP {response.status_code}")
            raise NodeTransportError(f"{path}: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise NodeTransportError(f"{path}: malformed JSON response") from e

        if not isinstance(data, dict):
            raise NodeTransportError(f"{path}: unexpected response type {type(data).__name__}")
        return data

    async def create_transfer(self, owner_address: str, to_address: str, amount_sun: int) -> dict:
        return await self._post(
            "/wallet/createtransaction",
            {
                "owner_address": owner_address,
                "to_address": to_address,
                "amount": amount_sun,
            },
        )

    async def trigger_smart_contract(
        self,
        owner_address: str,
        contract_address: str,
        function_selector: str,
        parameter: str,
        fee_limit: int,
        call_value: int = 0,
    ) -> dict:
        return await self._post(
            "/wallet/triggersmartcontract",
            {
                "owner_address": owner_address,
                "contract_address": contract_address,
                "function_selector": function_selector,
                "parameter": parameter,
                "fee_limit": fee_limit,
                "call_value": call_value,
            },
        )

    async def broadcast_transaction(self, signed_transaction: dict) -> dict:
        return await self._post("/wallet/broadcasttransaction", signed_transaction)

    async def get_transaction(self, txid: str) -> dict:
        return await self._post("/wallet/gettransactionbyid", {"value": txid})

    async def get_transaction_status(self, txid: str) -> TransactionStatus:
        """Check transaction confirmation status."""
        data = await self.get_transaction(txid)
        return transaction_status(data)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def transaction_status(data: dict) -> TransactionStatus:
    """Map a gettransactionbyid payload to a TransactionStatus."""
    if not data:
        return TransactionStatus.PENDING

    ret = (data.get("ret") or [{}])[0]
    contract_ret = ret.get("contractRet", "")

    if contract_ret == "SUCCESS":
        return TransactionStatus.COMPLETED
    elif contract_ret:
        return TransactionStatus.FAILED
    return TransactionStatus.CONFIRMING


def decode_node_message(message) -> str:
    """TronGrid hex-encodes error messages; decode them when possible."""
    if not isinstance(message, str):
        return "" if message is None else str(message)
    if message and len(message) % 2 == 0:
        try:
            decoded = bytes.fromhex(message).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            return message
        if decoded.isprintable():
            return decoded
    return message
