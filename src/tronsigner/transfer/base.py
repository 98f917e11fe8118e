"""Data model for the signing pipeline.

Request flow:
1. Caller posts a transfer request (aliased field names)
2. Request is authenticated and normalized into a SigningRequest
3. Node builds an UnsignedTransaction (native or contract variant)
4. Hot wallet key signs it into a SignedTransaction
5. Signed transaction is broadcast, yielding a BroadcastResult
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransferMode(str, Enum):
    """Transaction construction variant."""
    NATIVE = "native"        # TRX transfer
    CONTRACT = "contract"    # TRC20 transfer(address,uint256)


class RequestState(str, Enum):
    """Lifecycle of one /sign request."""
    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    NORMALIZED = "normalized"
    BUILT = "built"
    SIGNED = "signed"
    BROADCAST = "broadcast"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class SigningRequest:
    """Canonical transfer request."""
    from_address: str
    to_address: str
    mode: TransferMode
    amount_sun: Optional[int] = None
    token_contract: Optional[str] = None
    token_amount: Optional[int] = None

    def to_dict(self) -> dict:
        """Canonical field names, as echoed to callers."""
        return {
            "from": self.from_address,
            "to": self.to_address,
            "amountBaseUnits": self.amount_sun,
            "tokenContract": self.token_contract,
            "tokenAmountBaseUnits": self.token_amount,
        }


@dataclass
class UnsignedTransaction:
    """Node-built transaction template plus the metadata needed to sign it.

    Attributes:
        mode: Which builder produced it
        payload: Node transaction object (txID, raw_data, raw_data_hex)
        owner_address: Sender, canonical hex
        amount_sun: Native transfer amount in sun
        amount_trx: Native transfer amount in TRX
        contract_address: Token contract, canonical hex
        call_data: selector + ABI-encoded parameters (hex)
        fee_limit: Fee ceiling in sun for the contract call
    """
    mode: TransferMode
    payload: dict
    owner_address: str
    amount_sun: Optional[int] = None
    amount_trx: Optional[Decimal] = None
    contract_address: Optional[str] = None
    call_data: Optional[str] = None
    fee_limit: Optional[int] = None

    @property
    def txid(self) -> str:
        return self.payload.get("txID", "")

    @property
    def raw_data_hex(self) -> str:
        return self.payload.get("raw_data_hex", "")


@dataclass
class SignedTransaction:
    """Unsigned payload with signatures attached."""
    unsigned: UnsignedTransaction
    signatures: list[str] = field(default_factory=list)

    @property
    def mode(self) -> TransferMode:
        return self.unsigned.mode

    @property
    def txid(self) -> str:
        return self.unsigned.txid

    def to_payload(self) -> dict:
        """Node broadcast body."""
        payload = dict(self.unsigned.payload)
        payload["signature"] = list(self.signatures)
        return payload


@dataclass
class BroadcastResult:
    """Outcome of a broadcast the node accepted or refused."""
    success: bool
    txid: Optional[str] = None
    code: Optional[str] = None
    message: str = ""
    raw: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {"result": self.success, "txid": self.txid}
        if self.code:
            data["code"] = self.code
        if self.message:
            data["message"] = self.message
        return data
