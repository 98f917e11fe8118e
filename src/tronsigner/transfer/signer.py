"""Signing stage: attaches the hot wallet signature to a node template."""

import hashlib
import logging

from tronsigner.errors import ErrorKind, SigningError
from tronsigner.signing.base import SIGNATURE_LENGTH, SignerBackend
from tronsigner.transfer.base import SignedTransaction, SigningRequest, UnsignedTransaction

logger = logging.getLogger(__name__)


def transaction_digest(unsigned: UnsignedTransaction) -> bytes:
    """sha256 of the raw transaction data, i.e. the TRON txID.

    Raises:
        SigningError: If raw_data_hex is missing or does not hash to txID
    """
    raw_data_hex = unsigned.raw_data_hex
    if not raw_data_hex:
        raise SigningError("transaction has no raw_data_hex")

    try:
        raw = bytes.fromhex(raw_data_hex)
    except ValueError:
        raise SigningError("transaction raw_data_hex is not hex")

    digest = hashlib.sha256(raw).digest()
    if unsigned.txid and digest.hex() != unsigned.txid.lower():
        raise SigningError("transaction txID does not match its raw data")
    return digest


class TransactionSigner:
    """Signs unsigned transactions with a SignerBackend.

    Owner policy: when the key's address differs from the request's sender,
    log a warning, or reject if enforce_owner_match is set.
    """

    def __init__(self, backend: SignerBackend, enforce_owner_match: bool = False):
        self.backend = backend
        self.enforce_owner_match = enforce_owner_match

    def check_owner(self, request: SigningRequest) -> None:
        if self.backend.owns(request.from_address):
            return
        if self.enforce_owner_match:
            raise SigningError(
                f"signer key does not control {request.from_address}",
                kind=ErrorKind.OWNER_MISMATCH,
            )
        logger.warning(
            f"Signing for {request.from_address} with key of {self.backend.address} "
            "(owner match not enforced)"
        )

    def sign(self, unsigned: UnsignedTransaction, request: SigningRequest) -> SignedTransaction:
        """Sign an unsigned transaction.

        Raises:
            SigningError: If the digest or signature is invalid
        """
        self.check_owner(request)
        digest = transaction_digest(unsigned)

        result = self.backend.sign_digest(digest)
        if not result.success:
            raise SigningError(result.error or "signing failed")

        signature = result.signature or ""
        if len(signature) != SIGNATURE_LENGTH * 2:
            raise SigningError("signer returned an empty or malformed signature")

        logger.debug(f"Signed {unsigned.mode.value} transaction {unsigned.txid}")
        return SignedTransaction(unsigned=unsigned, signatures=[signature])
