"""Local signing backend.

Uses a single in-memory private key (hot wallet). The key is loaded once
at startup and is never logged or returned.
"""

import logging
import re

from eth_keys import keys
from eth_keys.exceptions import ValidationError as KeyValidationError

from tronsigner.signing.base import (
    SIGNATURE_LENGTH,
    SignatureResult,
    SignerBackend,
    SignerType,
)
from tronsigner.tron.address import ADDRESS_PREFIX, from_account_id

logger = logging.getLogger(__name__)


class Credential:
    """Hot wallet private key held in memory.

    repr() and str() never include key material.
    """

    __slots__ = ("_private_key",)

    def __init__(self, private_key: keys.PrivateKey):
        self._private_key = private_key

    @classmethod
    def from_hex(cls, private_key_hex: str) -> "Credential":
        """Load a credential from a 64-char hex string (0x prefix allowed).

        Raises:
            ValueError: If the key is malformed. The message never contains the key.
        """
        value = private_key_hex.strip()
        if value.lower().startswith("0x"):
            value = value[2:]
        if len(value) != 64:
            raise ValueError(f"expected 64 hex characters, got {len(value)}")
        try:
            raw = bytes.fromhex(value)
        except ValueError:
            raise ValueError("private key is not valid hex") from None
        try:
            return cls(keys.PrivateKey(raw))
        except KeyValidationError:
            raise ValueError("private key is out of range for secp256k1") from None

    @property
    def account_id(self) -> bytes:
        """20-byte account id derived from the public key."""
        return self._private_key.public_key.to_canonical_address()

    @property
    def address(self) -> str:
        return from_account_id(self.account_id)

    @property
    def hex_address(self) -> str:
        return (ADDRESS_PREFIX + self.account_id).hex()

    def redact(self, text: str) -> str:
        """Replace any occurrence of the key hex in text with ***."""
        if not text:
            return text
        key_hex = self._private_key.to_bytes().hex()
        pattern = re.compile(re.escape(key_hex), re.IGNORECASE)
        return pattern.sub("***", text)

    def sign_msg_hash(self, digest: bytes) -> keys.Signature:
        return self._private_key.sign_msg_hash(digest)

    def __repr__(self) -> str:
        return f"Credential(address={self.address})"

    __str__ = __repr__


class LocalSigner(SignerBackend):
    """Local signing backend using the in-memory hot wallet key."""

    def __init__(self, credential: Credential):
        super().__init__(SignerType.LOCAL)
        self._credential = credential
        logger.info(f"Loaded hot wallet key for {credential.address}")

    @property
    def address(self) -> str:
        return self._credential.address

    @property
    def hex_address(self) -> str:
        return self._credential.hex_address

    @property
    def credential(self) -> Credential:
        return self._credential

    def sign_digest(self, digest: bytes) -> SignatureResult:
        """Sign a 32-byte digest with secp256k1 (RFC 6979 deterministic k)."""
        if len(digest) != 32:
            return SignatureResult(success=False, error=f"digest must be 32 bytes, got {len(digest)}")

        try:
            signature = self._credential.sign_msg_hash(digest)
        except Exception as e:
            logger.error(f"Local signing failed: {e.__class__.__name__}")
            return SignatureResult(success=False, error=f"signing primitive failed: {e.__class__.__name__}")

        sig_bytes = signature.to_bytes()
        if len(sig_bytes) != SIGNATURE_LENGTH:
            return SignatureResult(success=False, error="signing primitive returned a malformed signature")

        return SignatureResult(
            success=True,
            signature=sig_bytes.hex(),
            v=signature.v,
        )

    def redact(self, text: str) -> str:
        return self._credential.redact(text)

    async def health_check(self) -> bool:
        return True
