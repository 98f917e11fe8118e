"""Transaction signing services.

- LocalSigner: hot wallet (private key in memory)
"""

from tronsigner.signing.base import (
    SignatureResult,
    SignerBackend,
    SignerType,
)
from tronsigner.signing.local import Credential, LocalSigner

__all__ = [
    "Credential",
    "LocalSigner",
    "SignatureResult",
    "SignerBackend",
    "SignerType",
]
