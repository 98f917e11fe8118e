"""Transaction builders.

NativeTransferBuilder asks the node for a TRX transfer template.
ContractInvocationBuilder ABI-encodes a TRC20 transfer(address,uint256)
call and asks the node for a TriggerSmartContract template.
"""

import logging
from abc import ABC, abstractmethod
from decimal import ROUND_DOWN, Decimal

from tronsigner.errors import BuildError, NodeTransportError
from tronsigner.transfer.base import SigningRequest, TransferMode, UnsignedTransaction
from tronsigner.tron.abi import (
    TRANSFER_SIGNATURE,
    encode_transfer_call,
    encode_transfer_parameters,
)
from tronsigner.tron.client import NodeClient, decode_node_message

logger = logging.getLogger(__name__)

# 1 TRX = 1,000,000 SUN
SUN_PER_TRX = 1_000_000


def sun_to_trx(amount_sun: int) -> Decimal:
    """Convert sun to TRX. Exact."""
    return Decimal(amount_sun) / Decimal(SUN_PER_TRX)


def trx_to_sun(amount_trx: Decimal) -> int:
    """Convert TRX to sun, truncating any sub-sun fraction toward zero."""
    return int((Decimal(amount_trx) * SUN_PER_TRX).to_integral_value(rounding=ROUND_DOWN))


def _check_template(payload: dict, what: str) -> dict:
    """Validate a node transaction template, raising BuildError on node errors."""
    if not payload:
        raise BuildError(f"{what}: node returned no transaction")

    if "Error" in payload:
        raise BuildError(f"{what}: {decode_node_message(payload['Error'])}")

    if not payload.get("txID") or not payload.get("raw_data_hex"):
        raise BuildError(f"{what}: node transaction is missing txID or raw_data_hex")

    return payload


class TransactionBuilder(ABC):
    """Builds an UnsignedTransaction from a SigningRequest."""

    mode: TransferMode

    def __init__(self, client: NodeClient):
        self.client = client

    def _resolve(self, address: str, role: str) -> str:
        try:
            return self.client.resolve_address(address)
        except ValueError as e:
            raise BuildError(f"invalid {role} address: {e}")

    @abstractmethod
    async def build(self, request: SigningRequest) -> UnsignedTransaction:
        """Build the unsigned transaction.

        Raises:
            BuildError: If the node cannot produce a transaction
        """
        pass


class NativeTransferBuilder(TransactionBuilder):
    """TRX transfer between two accounts."""

    mode = TransferMode.NATIVE

    async def build(self, request: SigningRequest) -> UnsignedTransaction:
        if not request.amount_sun:
            raise BuildError("amountBaseUnits must be greater than zero")

        amount_trx = sun_to_trx(request.amount_sun)
        amount_sun = trx_to_sun(amount_trx)

        owner = self._resolve(request.from_address, "from")
        to = self._resolve(request.to_address, "to")

        logger.info(f"Building TRX transfer: {amount_trx} TRX {request.from_address} -> {request.to_address}")

        try:
            payload = await self.client.create_transfer(owner, to, amount_sun)
        except NodeTransportError as e:
            raise BuildError(f"node unavailable: {e}")

        return UnsignedTransaction(
            mode=self.mode,
            payload=_check_template(payload, "createtransaction"),
            owner_address=owner,
            amount_sun=amount_sun,
            amount_trx=amount_trx,
        )


class ContractInvocationBuilder(TransactionBuilder):
    """TRC20 transfer(address,uint256) call."""

    mode = TransferMode.CONTRACT

    def __init__(self, client: NodeClient, fee_limit: int):
        super().__init__(client)
        self.fee_limit = fee_limit

    async def build(self, request: SigningRequest) -> UnsignedTransaction:
        if not request.token_amount:
            raise BuildError("tokenAmountBaseUnits must be greater than zero")

        contract = self._resolve(request.token_contract or "", "tokenContract")
        owner = self._resolve(request.from_address, "from")
        to = self._resolve(request.to_address, "to")

        try:
            parameter = encode_transfer_parameters(to, request.token_amount)
        except ValueError as e:
            raise BuildError(f"cannot encode transfer call: {e}")

        logger.info(
            f"Building TRC20 transfer: {request.token_amount} units of {request.token_contract} "
            f"{request.from_address} -> {request.to_address} (fee_limit={self.fee_limit})"
        )

        try:
            data = await self.client.trigger_smart_contract(
                owner_address=owner,
                contract_address=contract,
                function_selector=TRANSFER_SIGNATURE,
                parameter=parameter,
                fee_limit=self.fee_limit,
            )
        except NodeTransportError as e:
            raise BuildError(f"node unavailable: {e}")

        if not data:
            raise BuildError("triggersmartcontract: node returned no response")

        result = data.get("result") or {}
        if not result.get("result"):
            message = decode_node_message(result.get("message")) or result.get("code") or "unknown error"
            raise BuildError(f"triggersmartcontract: {message}")

        transaction = data.get("transaction")
        if not transaction:
            raise BuildError("triggersmartcontract: node returned no transaction")

        return UnsignedTransaction(
            mode=self.mode,
            payload=_check_template(transaction, "triggersmartcontract"),
            owner_address=owner,
            contract_address=contract,
            call_data=encode_transfer_call(to, request.token_amount),
            fee_limit=self.fee_limit,
        )


def get_builder(request: SigningRequest, client: NodeClient, fee_limit: int) -> TransactionBuilder:
    """Select the builder for the request's transfer mode."""
    if request.mode == TransferMode.CONTRACT:
        return ContractInvocationBuilder(client, fee_limit)
    return NativeTransferBuilder(client)
