"""ABI encoding for TRC20 transfer calls."""

TRANSFER_SIGNATURE = "transfer(address,uint256)"
# First 4 bytes of keccak256(TRANSFER_SIGNATURE)
TRANSFER_SELECTOR = "a9059cbb"

WORD_HEX_LENGTH = 64
MAX_UINT256 = 2**256 - 1


def encode_address(hex_address: str) -> str:
    """Encode a TRON hex address as a 32-byte ABI word.

    The 41 prefix byte is dropped; the 20-byte account id is left-padded.
    """
    value = hex_address.lower()
    if value.startswith("0x"):
        value = value[2:]
    if len(value) == 42 and value.startswith("41"):
        value = value[2:]
    if len(value) != 40:
        raise ValueError(f"expected a 20-byte address, got {hex_address}")
    bytes.fromhex(value)
    return value.zfill(WORD_HEX_LENGTH)


def encode_uint256(value: int) -> str:
    """Encode an integer as a 32-byte big-endian ABI word."""
    if value < 0 or value > MAX_UINT256:
        raise ValueError(f"value out of uint256 range: {value}")
    return hex(value)[2:].zfill(WORD_HEX_LENGTH)


def encode_transfer_parameters(to_hex_address: str, amount: int) -> str:
    """Encode (address, uint256) parameters for transfer(), without selector."""
    return encode_address(to_hex_address) + encode_uint256(amount)


def encode_transfer_call(to_hex_address: str, amount: int) -> str:
    """Full call data for transfer(to, amount): selector + parameters."""
    return TRANSFER_SELECTOR + encode_transfer_parameters(to_hex_address, amount)
