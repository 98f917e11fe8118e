"""TRON address conversions.

TRON addresses are a 0x41 prefix byte followed by the 20-byte account id.
They appear as base58check strings (T...) or as 42 hex chars (41...).
"""

import base58

ADDRESS_PREFIX = b"\x41"
ADDRESS_LENGTH = 21
HEX_ADDRESS_LENGTH = ADDRESS_LENGTH * 2
BASE58_ADDRESS_LENGTH = 34


def _is_hex(value: str) -> bool:
    try:
        bytes.fromhex(value)
    except ValueError:
        return False
    return True


def to_hex_address(address: str) -> str:
    """Convert a TRON address to its canonical hex form (41 + 40 hex chars).

    Accepts base58check (T...), hex with the 41 prefix, or a 0x-prefixed
    20-byte EVM style address.

    Raises:
        ValueError: If the address is not a valid TRON address
    """
    if not address:
        raise ValueError("empty address")
    address = address.strip()

    if address.startswith("T") and len(address) == BASE58_ADDRESS_LENGTH:
        try:
            raw = base58.b58decode_check(address)
        except ValueError:
            raise ValueError(f"bad base58check checksum: {address}")
        if len(raw) != ADDRESS_LENGTH or raw[:1] != ADDRESS_PREFIX:
            raise ValueError(f"not a TRON address: {address}")
        return raw.hex()

    if address.lower().startswith("0x") and len(address) == 42 and _is_hex(address[2:]):
        return ADDRESS_PREFIX.hex() + address[2:].lower()

    if len(address) == HEX_ADDRESS_LENGTH and address.lower().startswith("41") and _is_hex(address):
        return address.lower()

    raise ValueError(f"not a TRON address: {address}")


def to_base58_address(address: str) -> str:
    """Convert a TRON address (any accepted form) to base58check."""
    raw = bytes.fromhex(to_hex_address(address))
    return base58.b58encode_check(raw).decode("ascii")


def from_account_id(account_id: bytes) -> str:
    """Build a base58check TRON address from a 20-byte account id."""
    if len(account_id) != 20:
        raise ValueError("account id must be 20 bytes")
    return base58.b58encode_check(ADDRESS_PREFIX + account_id).decode("ascii")


def is_valid_address(address: str) -> bool:
    """Check whether a string parses as a TRON address."""
    try:
        to_hex_address(address)
    except ValueError:
        return False
    return True
