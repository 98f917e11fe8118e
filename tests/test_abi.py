"""Tests for TRON address handling and ABI encoding."""

import pytest

from tronsigner.tron.abi import (
    MAX_UINT256,
    TRANSFER_SELECTOR,
    encode_address,
    encode_transfer_call,
    encode_transfer_parameters,
    encode_uint256,
)
from tronsigner.tron.address import (
    from_account_id,
    is_valid_address,
    to_base58_address,
    to_hex_address,
)

from conftest import USDT_CONTRACT, USDT_CONTRACT_HEX

# transfer(TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t, 500)
REFERENCE_CALL = (
    "a9059cbb"
    "000000000000000000000000a614f803b6fd780986a42c78ec9c7f77e6ded13c"
    "00000000000000000000000000000000000000000000000000000000000001f4"
)


class TestAddress:
    """Tests for address conversion."""

    def test_base58_to_hex(self):
        """Test known base58 address converts to its hex form."""
        assert to_hex_address(USDT_CONTRACT) == USDT_CONTRACT_HEX

    def test_hex_to_base58(self):
        """Test known hex address converts back to base58."""
        assert to_base58_address(USDT_CONTRACT_HEX) == USDT_CONTRACT

    def test_evm_style_hex(self):
        """Test 0x-prefixed 20-byte addresses get the 41 prefix."""
        assert to_hex_address("0x" + USDT_CONTRACT_HEX[2:].upper()) == USDT_CONTRACT_HEX

    def test_hex_is_lowercased(self):
        assert to_hex_address(USDT_CONTRACT_HEX.upper()) == USDT_CONTRACT_HEX

    def test_from_account_id(self):
        assert from_account_id(bytes.fromhex(USDT_CONTRACT_HEX[2:])) == USDT_CONTRACT

    @pytest.mark.parametrize("address", [
        "",
        "A",
        "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6u",  # bad checksum
        "42a614f803b6fd780986a42c78ec9c7f77e6ded13c",  # wrong prefix
        "41zz14f803b6fd780986a42c78ec9c7f77e6ded13c",
        "0x1234",
    ])
    def test_invalid_addresses(self, address):
        """Test invalid addresses are rejected."""
        assert is_valid_address(address) is False
        with pytest.raises(ValueError):
            to_hex_address(address)


class TestAbiEncoding:
    """Tests for transfer(address,uint256) encoding."""

    def test_reference_vector(self):
        """Test encoding matches the reference call data."""
        assert encode_transfer_call(USDT_CONTRACT_HEX, 500) == REFERENCE_CALL

    def test_parameters_are_two_words(self):
        """Test parameters are exactly 64 bytes."""
        params = encode_transfer_parameters(USDT_CONTRACT_HEX, 500)

        assert len(params) == 128
        assert params == REFERENCE_CALL[len(TRANSFER_SELECTOR):]

    def test_idempotent(self):
        """Test re-encoding the same inputs yields the same bytes."""
        first = encode_transfer_call(USDT_CONTRACT_HEX, 123456789)
        second = encode_transfer_call(USDT_CONTRACT_HEX, 123456789)
        assert first == second

    def test_address_word_accepts_forms(self):
        """Test 41-prefixed, 0x-prefixed and bare ids encode the same."""
        bare = USDT_CONTRACT_HEX[2:]
        expected = "0" * 24 + bare

        assert encode_address(USDT_CONTRACT_HEX) == expected
        assert encode_address("0x" + bare) == expected
        assert encode_address(bare) == expected

    def test_uint256_bounds(self):
        """Test uint256 range is enforced."""
        assert encode_uint256(0) == "0" * 64
        assert encode_uint256(MAX_UINT256) == "f" * 64

        with pytest.raises(ValueError):
            encode_uint256(MAX_UINT256 + 1)
        with pytest.raises(ValueError):
            encode_uint256(-1)

    def test_bad_address_word(self):
        with pytest.raises(ValueError):
            encode_address("41abcd")
