"""Base interfaces for transaction signing.

Signing flow:
1. Node builds the unsigned transaction
2. Digest = sha256(raw_data) (the TRON txID)
3. Signer returns a recoverable signature (never the raw private key)
4. Signature is attached to the transaction
5. Signed transaction is broadcast
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tronsigner.tron.address import to_hex_address

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 65


class SignerType(str, Enum):
    """Type of signing backend."""
    LOCAL = "local"           # Private key in memory (hot wallet)


@dataclass
class SignatureResult:
    """Result of signing operation.

    Attributes:
        success: Whether signing succeeded
        signature: r + s + v as hex (65 bytes)
        v: Recovery parameter (0 or 1)
        error: Error message if signing failed
    """
    success: bool
    signature: Optional[str] = None
    v: Optional[int] = None
    error: Optional[str] = None


class SignerBackend(ABC):
    """Abstract base class for signing backends.

    Implementations should NEVER expose raw private keys.
    All signing operations return signatures only.
    """

    def __init__(self, signer_type: SignerType):
        self.signer_type = signer_type

    @property
    @abstractmethod
    def address(self) -> str:
        """Base58 TRON address of the signing key."""
        pass

    @property
    @abstractmethod
    def hex_address(self) -> str:
        """Hex TRON address (41 + 20 bytes) of the signing key."""
        pass

    @abstractmethod
    def sign_digest(self, digest: bytes) -> SignatureResult:
        """Sign a 32-byte digest.

        Args:
            digest: sha256 of the transaction raw data

        Returns:
            SignatureResult with a 65-byte recoverable signature
        """
        pass

    def owns(self, address: str) -> bool:
        """Check whether an address (base58, 41-hex or 0x-hex) belongs to this key."""
        if not address:
            return False
        try:
            return to_hex_address(address) == self.hex_address.lower()
        except ValueError:
            return False

    def redact(self, text: str) -> str:
        """Scrub key material from text before it leaves the process."""
        return text

    async def health_check(self) -> bool:
        """Check if the signing backend is available."""
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value}, address={self.address})"
