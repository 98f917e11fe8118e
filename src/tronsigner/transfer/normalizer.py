"""Request normalization.

Callers name the same fields many different ways. Each canonical field has
a fixed, priority-ordered alias list; the first present, non-empty value
wins.
"""

import json
import logging
from typing import Any, Callable, Mapping, Optional
from urllib.parse import parse_qsl

from tronsigner.errors import ErrorKind, ValidationError
from tronsigner.transfer.base import SigningRequest, TransferMode

logger = logging.getLogger(__name__)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "from": ("from", "from_address", "address", "source", "sender"),
    "to": ("to", "to_address", "company", "destination", "recipient"),
    "amountBaseUnits": ("amountSun", "amount_sun", "trx_amount", "trxAmount", "amount", "value"),
    "tokenContract": ("tokenContract", "token_contract", "contract", "token"),
    "tokenAmountBaseUnits": (
        "tokenAmount",
        "token_amount",
        "token_amount_units",
        "token_value",
        "tokenValue",
        "amount_in_base",
        "amount",
    ),
}

# Body keys whose values are never echoed back
SENSITIVE_KEY_MARKERS = ("secret", "private", "password", "mnemonic", "seed", "auth")

# Largest float that still holds every integer below it exactly
MAX_EXACT_FLOAT = 2**53

Redactor = Callable[[str], str]


def parse_body(raw: bytes) -> dict:
    """Parse a request body into a mapping.

    JSON objects are used as is. Anything else is tried as a urlencoded
    form; unparseable bodies become an empty mapping.
    """
    if not raw:
        return {}

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("Request body is not UTF-8")
        return {}

    try:
        data = json.loads(text)
    except ValueError:
        data = None

    if isinstance(data, dict):
        return data
    if data is not None:
        logger.debug(f"Request body is JSON {type(data).__name__}, not an object")
        return {}

    pairs = parse_qsl(text.strip(), keep_blank_values=False)
    if pairs:
        return dict(pairs)

    logger.debug("Request body is neither JSON nor a form")
    return {}


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def resolve_field(body: Mapping, aliases: tuple[str, ...]) -> tuple[Optional[str], Any]:
    """Return (alias, value) for the first present, non-empty alias."""
    for alias in aliases:
        if alias in body and not _is_empty(body[alias]):
            value = body[alias]
            if isinstance(value, str):
                value = value.strip()
            return alias, value
    return None, None


def parse_base_units(value: Any, field_name: str) -> int:
    """Parse an amount given in base units into an int.

    Raises:
        ValidationError: If the value is not a non-negative integer
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer amount", kind=ErrorKind.INVALID_AMOUNT)

    if isinstance(value, int):
        amount = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")) or not value.is_integer():
            raise ValidationError(
                f"{field_name} must be a whole number of base units", kind=ErrorKind.INVALID_AMOUNT
            )
        if abs(value) > MAX_EXACT_FLOAT:
            raise ValidationError(
                f"{field_name} is too large for a JSON number; send it as an integer string",
                kind=ErrorKind.INVALID_AMOUNT,
            )
        amount = int(value)
    elif isinstance(value, str) and value.isdigit() and value.isascii():
        amount = int(value)
    else:
        raise ValidationError(
            f"{field_name} must be a whole number of base units", kind=ErrorKind.INVALID_AMOUNT
        )

    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative", kind=ErrorKind.INVALID_AMOUNT)
    return amount


def _echo_value(key: str, value: Any, redact: Optional[Redactor]) -> Any:
    if any(marker in key.lower() for marker in SENSITIVE_KEY_MARKERS):
        return "***"
    if isinstance(value, str):
        return redact(value) if redact else value
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return f"<{type(value).__name__}>"


def received_echo(body: Mapping, resolved: dict, redact: Optional[Redactor] = None) -> dict:
    """Build the debug echo for a validation failure. Credentials are masked."""
    return {
        "parsedBody": {str(k): _echo_value(str(k), v, redact) for k, v in body.items()},
        "resolved": {k: _echo_value(k, v, redact) for k, v in resolved.items()},
    }


def normalize(body: Mapping, redact: Optional[Redactor] = None) -> SigningRequest:
    """Map a raw request body onto a SigningRequest.

    Contract transfer takes precedence when both a native amount and a
    complete token transfer resolve.

    Args:
        body: Raw request mapping
        redact: Applied to echoed string values

    Raises:
        ValidationError: missing_parameters or invalid_amount
    """
    if not isinstance(body, Mapping):
        body = {}

    found = {name: resolve_field(body, aliases) for name, aliases in FIELD_ALIASES.items()}
    resolved = {name: value for name, (_, value) in found.items()}

    from_address = resolved["from"]
    to_address = resolved["to"]
    amount_alias, amount = found["amountBaseUnits"]
    token_contract = resolved["tokenContract"]
    token_alias, token_amount = found["tokenAmountBaseUnits"]

    has_native = amount is not None
    has_contract = token_contract is not None and token_amount is not None

    if from_address is None or to_address is None or not (has_native or has_contract):
        missing = [name for name in ("from", "to") if resolved[name] is None]
        if not (has_native or has_contract):
            missing.append("amountBaseUnits or tokenContract+tokenAmountBaseUnits")
        raise ValidationError(
            f"Required fields not found: {', '.join(missing)}",
            received=received_echo(body, resolved, redact),
        )

    from_address = str(from_address)
    to_address = str(to_address)

    if has_contract:
        if has_native and amount_alias != token_alias:
            logger.warning(
                f"Both native amount ({amount_alias}) and token transfer given; using token transfer"
            )
        return SigningRequest(
            from_address=from_address,
            to_address=to_address,
            mode=TransferMode.CONTRACT,
            token_contract=str(token_contract),
            token_amount=parse_base_units(token_amount, "tokenAmountBaseUnits"),
        )

    if token_contract is not None:
        logger.warning("tokenContract given without a token amount; using native transfer")

    return SigningRequest(
        from_address=from_address,
        to_address=to_address,
        mode=TransferMode.NATIVE,
        amount_sun=parse_base_units(amount, "amountBaseUnits"),
    )
