"""Pytest configuration and fixtures."""

import asyncio
import hashlib
import json
import os
from typing import Optional

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["SIGNER_SECRET"] = "test-signer-secret"
os.environ["SIGNER_PRIVATE_KEY"] = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
os.environ["DEBUG"] = "true"

from tronsigner.config import Settings
from tronsigner.signing.local import Credential, LocalSigner
from tronsigner.tron.address import is_valid_address, to_hex_address
from tronsigner.tron.client import NodeClient

TEST_SECRET = os.environ["SIGNER_SECRET"]
TEST_PRIVATE_KEY = os.environ["SIGNER_PRIVATE_KEY"]
# Address of TEST_PRIVATE_KEY
TEST_SIGNER_HEX = "412c7536e3605d9c16a7a3d7b1898e529396a65c23"

USDT_CONTRACT = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
USDT_CONTRACT_HEX = "41a614f803b6fd780986a42c78ec9c7f77e6ded13c"


def make_template(**fields) -> dict:
    """Node-style transaction template whose txID is sha256(raw_data)."""
    raw_data = dict(fields)
    raw_bytes = json.dumps(raw_data, sort_keys=True).encode()
    return {
        "visible": False,
        "txID": hashlib.sha256(raw_bytes).hexdigest(),
        "raw_data": raw_data,
        "raw_data_hex": raw_bytes.hex(),
    }


class FakeNodeClient(NodeClient):
    """In-memory NodeClient recording every call.

    Non-TRON address strings (e.g. "A") resolve to a deterministic hex
    address so scenario tests can use short names.
    """

    def __init__(self, delay: float = 0.0):
        self.delay = delay
        self.calls: list[tuple[str, dict]] = []
        self.events: list[tuple[str, str]] = []
        self.transfer_reply: Optional[dict] = None
        self.trigger_reply: Optional[dict] = None
        self.broadcast_reply: Optional[dict] = None
        self.broadcast_error: Optional[Exception] = None
        self.build_error: Optional[Exception] = None
        self.transaction_reply: dict = {}
        self.closed = False

    def resolve_address(self, address: str) -> str:
        if is_valid_address(address):
            return to_hex_address(address)
        if not address:
            raise ValueError("empty address")
        return "41" + hashlib.sha256(address.encode()).digest()[:20].hex()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def calls_to(self, name: str) -> list[dict]:
        return [kwargs for call, kwargs in self.calls if call == name]

    async def create_transfer(self, owner_address: str, to_address: str, amount_sun: int) -> dict:
        self.calls.append(("create_transfer", {
            "owner_address": owner_address,
            "to_address": to_address,
            "amount_sun": amount_sun,
        }))
        self.events.append(("start", owner_address))
        if self.build_error:
            raise self.build_error
        if self.transfer_reply is not None:
            return self.transfer_reply
        return make_template(
            owner=owner_address,
            to=to_address,
            amount=amount_sun,
            n=len(self.calls),
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
        self.calls.append(("trigger_smart_contract", {
            "owner_address": owner_address,
            "contract_address": contract_address,
            "function_selector": function_selector,
            "parameter": parameter,
            "fee_limit": fee_limit,
            "call_value": call_value,
        }))
        self.events.append(("start", owner_address))
        if self.build_error:
            raise self.build_error
        if self.trigger_reply is not None:
            return self.trigger_reply
        return {
            "result": {"result": True},
            "transaction": make_template(
                owner=owner_address,
                contract=contract_address,
                data=parameter,
                fee_limit=fee_limit,
                n=len(self.calls),
            ),
        }

    async def broadcast_transaction(self, signed_transaction: dict) -> dict:
        self.calls.append(("broadcast_transaction", signed_transaction))
        if self.delay:
            await asyncio.sleep(self.delay)
        self.events.append(("end", signed_transaction["raw_data"].get("owner", "")))
        if self.broadcast_error:
            raise self.broadcast_error
        if self.broadcast_reply is not None:
            return self.broadcast_reply
        return {"result": True, "txid": signed_transaction["txID"]}

    async def get_transaction(self, txid: str) -> dict:
        self.calls.append(("get_transaction", {"txid": txid}))
        return self.transaction_reply

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Settings independent of any .env file."""
    return Settings(
        _env_file=None,
        signer_secret=TEST_SECRET,
        signer_private_key=TEST_PRIVATE_KEY,
    )


@pytest.fixture
def credential() -> Credential:
    return Credential.from_hex(TEST_PRIVATE_KEY)


@pytest.fixture
def signer(credential) -> LocalSigner:
    return LocalSigner(credential)


@pytest.fixture
def node_client() -> FakeNodeClient:
    return FakeNodeClient()
