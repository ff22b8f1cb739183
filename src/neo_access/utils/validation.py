"""
Validation utilities for neo-access.

Provides input validation functions for:
- Neo N3 addresses (base58check, version byte 0x35)
- Transaction/block hashes and contract script hashes
- Block identifiers (height or hash)
- Transfer amounts and integer contract arguments
- Wallet passwords
- Network names and contract names

All validation functions raise ValidationError (or subclasses) on failure
and return the canonical form of their input.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import base58

from neo_access.config import Network
from neo_access.constants import (
    ADDRESS_LENGTH,
    ADDRESS_VERSION,
    HASH_HEX_LENGTH,
    MAX_PASSWORD_LENGTH,
    MAX_TRANSFER_AMOUNT,
    MIN_PASSWORD_LENGTH,
    SCRIPT_HASH_HEX_LENGTH,
)
from neo_access.errors import (
    InvalidAddressError,
    InvalidAmountError,
    InvalidHashError,
    ValidationError,
)

AmountInput = Union[str, int, float, Decimal]
BlockIdentifier = Union[int, str]

_BASE58_PATTERN = re.compile(
    r"^[123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz]+$"
)
_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]+$")
_DIGITS_PATTERN = re.compile(r"^[0-9]+$")
_DECIMAL_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def _decode_address(address: str, field_name: str) -> bytes:
    if len(address) != ADDRESS_LENGTH:
        raise InvalidAddressError(
            address,
            field=field_name,
            reason=f"must be {ADDRESS_LENGTH} characters",
        )
    if not _BASE58_PATTERN.match(address):
        raise InvalidAddressError(
            address,
            field=field_name,
            reason="contains non-base58 characters",
        )

    try:
        payload = base58.b58decode_check(address)
    except ValueError:
        raise InvalidAddressError(address, field=field_name, reason="checksum mismatch")

    if len(payload) != 21 or payload[0] != ADDRESS_VERSION:
        raise InvalidAddressError(
            address,
            field=field_name,
            reason="unsupported address version",
        )
    return payload


def validate_address(address: str, field_name: str = "address") -> str:
    """
    Validate Neo N3 address format.

    Args:
        address: Address to validate
        field_name: Field name for error messages

    Returns:
        The address, unchanged

    Raises:
        InvalidAddressError: If address is invalid
    """
    if not address:
        raise InvalidAddressError("", field=field_name, reason=f"{field_name} is required")

    if not isinstance(address, str):
        raise InvalidAddressError(
            str(address),
            field=field_name,
            reason=f"{field_name} must be a string",
        )

    _decode_address(address, field_name)
    return address


def is_valid_address(address: object) -> bool:
    """Boolean form of validate_address."""
    try:
        validate_address(address)  # type: ignore[arg-type]
    except ValidationError:
        return False
    return True


def address_to_script_hash(address: str) -> str:
    """
    Convert an address to its account script hash.

    The address payload stores the hash little-endian; the returned form is
    the big-endian ``0x``-prefixed string the RPC interface expects.
    """
    validate_address(address)
    payload = _decode_address(address, "address")
    return "0x" + payload[1:21][::-1].hex()


def script_hash_to_address(script_hash: str) -> str:
    """Inverse of address_to_script_hash."""
    normalized = validate_script_hash(script_hash)
    little_endian = bytes.fromhex(normalized[2:])[::-1]
    return base58.b58encode_check(bytes([ADDRESS_VERSION]) + little_endian).decode("ascii")


def _validate_hex(
    value: str,
    length: int,
    field_name: str,
) -> str:
    if not value or not isinstance(value, str):
        raise InvalidHashError(
            "" if not value else str(value),
            field=field_name,
            expected_length=length,
            reason=f"{field_name} must be a non-empty string",
        )

    clean = value[2:] if value[:2].lower() == "0x" else value

    if len(clean) != length:
        raise InvalidHashError(
            value,
            field=field_name,
            expected_length=length,
            reason=f"expected {length} hex characters without 0x prefix",
        )
    if not _HEX_PATTERN.match(clean):
        raise InvalidHashError(
            value,
            field=field_name,
            expected_length=length,
            reason="not hexadecimal",
        )

    return "0x" + clean.lower()


def validate_hash(value: str, field_name: str = "hash") -> str:
    """
    Validate a 32-byte transaction or block hash.

    Accepts the hash with or without ``0x``; returns the lowercase prefixed
    form. Validating the output again returns it unchanged.

    Raises:
        InvalidHashError: If the hash is malformed
    """
    return _validate_hex(value, HASH_HEX_LENGTH, field_name)


def validate_script_hash(value: str, field_name: str = "script_hash") -> str:
    """
    Validate a 20-byte contract script hash.

    Raises:
        InvalidHashError: If the script hash is malformed
    """
    return _validate_hex(value, SCRIPT_HASH_HEX_LENGTH, field_name)


def is_script_hash(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_script_hash(value)
    except ValidationError:
        return False
    return True


def is_hash(value: object) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_hash(value)
    except ValidationError:
        return False
    return True


def parse_block_identifier(value: BlockIdentifier) -> BlockIdentifier:
    """
    Parse a block height or block hash.

    Returns:
        ``int`` height for numeric input (including digit strings), or the
        normalized ``0x`` hash string.

    Raises:
        ValidationError: For negative heights, booleans or any other shape
    """
    if isinstance(value, bool):
        raise ValidationError(
            "Block identifier must be a height or a block hash",
            details={"value": value},
        )

    if isinstance(value, int):
        if value < 0:
            raise ValidationError(
                f"Block height must be non-negative: {value}",
                details={"value": value},
            )
        return value

    if isinstance(value, str):
        stripped = value.strip()
        if _DIGITS_PATTERN.match(stripped):
            return int(stripped)
        return validate_hash(stripped, field_name="block_hash")

    raise ValidationError(
        "Block identifier must be a height or a block hash",
        details={"value": repr(value)},
    )


def validate_integer(value: Union[int, str], field_name: str = "value", minimum: int = 0) -> int:
    """
    Validate a whole number given as an int or a digit string.

    Raises:
        ValidationError: For booleans, non-integers or values below ``minimum``
    """
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and _DIGITS_PATTERN.match(value.strip()):
        number = int(value.strip())
    else:
        raise ValidationError(
            f"{field_name} must be an integer: {value!r}",
            details={"field": field_name, "value": repr(value)},
        )

    if number < minimum:
        raise ValidationError(
            f"{field_name} must be at least {minimum}: {number}",
            details={"field": field_name, "value": number},
        )
    return number


def _to_decimal(amount: AmountInput, field_name: str) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmountError(str(amount), field=field_name, reason="must be a number")

    if isinstance(amount, Decimal):
        return amount

    if isinstance(amount, int):
        return Decimal(amount)

    if isinstance(amount, float):
        # str() gives the shortest repr, avoiding binary expansion noise
        try:
            return Decimal(str(amount))
        except InvalidOperation:
            raise InvalidAmountError(str(amount), field=field_name, reason="must be a number")

    if isinstance(amount, str):
        text = amount.strip()
        if not _DECIMAL_PATTERN.match(text):
            raise InvalidAmountError(
                amount,
                field=field_name,
                reason="must be a positive decimal number",
            )
        return Decimal(text)

    raise InvalidAmountError(
        str(amount),
        field=field_name,
        reason="must be a number or numeric string",
    )


def validate_amount(
    amount: AmountInput,
    field_name: str = "amount",
    max_amount: Optional[Decimal] = None,
) -> str:
    """
    Validate a transfer amount.

    Args:
        amount: Decimal string, int, float or Decimal
        field_name: Field name for error messages
        max_amount: Upper bound (default: MAX_TRANSFER_AMOUNT)

    Returns:
        Canonical decimal string (no exponent, no trailing zeros)

    Raises:
        InvalidAmountError: If amount is not positive, finite and bounded
    """
    limit = MAX_TRANSFER_AMOUNT if max_amount is None else Decimal(max_amount)
    value = _to_decimal(amount, field_name)

    if not value.is_finite():
        raise InvalidAmountError(str(amount), field=field_name, reason="must be finite")

    if value <= 0:
        raise InvalidAmountError(
            str(amount),
            field=field_name,
            reason="must be greater than zero",
        )

    if value > limit:
        raise InvalidAmountError(
            str(amount),
            field=field_name,
            reason=f"exceeds maximum allowed ({limit})",
            max_amount=str(limit),
        )

    return format(value.normalize(), "f")


def amount_to_fractions(amount: str, decimals: int, field_name: str = "amount") -> int:
    """
    Convert a canonical amount string into the asset's smallest unit.

    Raises:
        InvalidAmountError: If the amount has more precision than the asset
    """
    scaled = Decimal(amount).scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise InvalidAmountError(
            amount,
            field=field_name,
            reason=f"asset supports at most {decimals} decimal places",
        )
    return int(scaled)


def validate_password(password: str) -> str:
    """
    Validate a wallet password.

    Raises:
        ValidationError: If missing or outside the allowed length
    """
    if not password or not isinstance(password, str):
        raise ValidationError("Password must be a non-empty string")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    if len(password) > MAX_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_LENGTH} characters long"
        )

    return password


def validate_network(network: Optional[Union[str, Network]] = None) -> Network:
    """
    Validate a network name.

    Returns:
        Network enum value (mainnet when ``network`` is empty)
    """
    if network is None or network == "":
        return Network.MAINNET

    if isinstance(network, Network):
        return network

    if not isinstance(network, str):
        raise ValidationError("Network must be a string")

    normalized = network.strip().lower()
    try:
        return Network(normalized)
    except ValueError:
        valid = ", ".join(n.value for n in Network)
        raise ValidationError(
            f"Invalid network: {network}. Must be one of: {valid}",
            details={"network": network},
        )


def validate_contract_name(name: str) -> str:
    """Trim and lowercase a contract name; empty or non-string names fail."""
    if not name or not isinstance(name, str) or not name.strip():
        raise ValidationError(
            "Contract name must be a non-empty string",
            details={"name": name if isinstance(name, str) else repr(name)},
        )
    return name.strip().lower()
