"""
Typed contract parameters.

``ContractParam`` is the tagged value the node's ``invokefunction`` method
accepts. ``marshal_param`` turns a raw Python value into one, either by a
declared type or by inference:

    >>> marshal_param("Integer", "42").to_json()
    {'type': 'Integer', 'value': '42'}
    >>> marshal_param(None, True).to_json()
    {'type': 'Boolean', 'value': True}
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from neo_access.errors import ValidationError
from neo_access.utils.validation import (
    address_to_script_hash,
    is_hash,
    is_script_hash,
    is_valid_address,
    validate_hash,
    validate_script_hash,
)

_PUBLIC_KEY_PATTERN = re.compile(r"^(02|03)[0-9a-fA-F]{64}$")


class ParamType(str, Enum):
    ANY = "Any"
    BOOLEAN = "Boolean"
    INTEGER = "Integer"
    STRING = "String"
    HASH160 = "Hash160"
    HASH256 = "Hash256"
    BYTE_ARRAY = "ByteArray"
    PUBLIC_KEY = "PublicKey"
    ARRAY = "Array"


# Declared-type spellings used in operation metadata
_TYPE_ALIASES: Dict[str, ParamType] = {
    "any": ParamType.ANY,
    "boolean": ParamType.BOOLEAN,
    "bool": ParamType.BOOLEAN,
    "integer": ParamType.INTEGER,
    "int": ParamType.INTEGER,
    "number": ParamType.INTEGER,
    "string": ParamType.STRING,
    "hash160": ParamType.HASH160,
    "address": ParamType.HASH160,
    "hash256": ParamType.HASH256,
    "bytearray": ParamType.BYTE_ARRAY,
    "bytestring": ParamType.BYTE_ARRAY,
    "bytes": ParamType.BYTE_ARRAY,
    "publickey": ParamType.PUBLIC_KEY,
    "array": ParamType.ARRAY,
}


@dataclass(frozen=True)
class ContractParam:
    """A typed VM argument."""

    type: ParamType
    value: Any

    def to_json(self) -> Dict[str, Any]:
        if self.type is ParamType.ANY:
            return {"type": self.type.value}
        if self.type is ParamType.ARRAY:
            return {"type": self.type.value, "value": [p.to_json() for p in self.value]}
        return {"type": self.type.value, "value": self.value}


def parse_param_type(declared: Union[str, ParamType]) -> ParamType:
    if isinstance(declared, ParamType):
        return declared
    key = str(declared).strip().lower().replace("_", "")
    if key not in _TYPE_ALIASES:
        raise ValidationError(
            f"Unsupported parameter type: {declared}",
            details={"type": declared},
        )
    return _TYPE_ALIASES[key]


def _as_integer(raw: Any) -> str:
    if isinstance(raw, bool):
        raise ValidationError("Integer parameter cannot be a boolean", details={"value": raw})
    if isinstance(raw, int):
        return str(raw)
    if isinstance(raw, str) and re.match(r"^-?[0-9]+$", raw.strip()):
        return str(int(raw.strip()))
    raise ValidationError(f"Invalid Integer parameter: {raw!r}", details={"value": repr(raw)})


def _as_boolean(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    raise ValidationError(f"Invalid Boolean parameter: {raw!r}", details={"value": repr(raw)})


def _as_hash160(raw: Any) -> str:
    if isinstance(raw, str) and is_valid_address(raw):
        return address_to_script_hash(raw)
    return validate_script_hash(raw, field_name="Hash160 parameter")


def _as_byte_array(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return base64.b64encode(bytes(raw)).decode("ascii")
    if isinstance(raw, str):
        try:
            base64.b64decode(raw, validate=True)
        except ValueError as e:
            raise ValidationError(
                f"ByteArray parameter is not base64: {raw!r}",
                details={"value": repr(raw)},
            ) from e
        return raw
    raise ValidationError(f"Invalid ByteArray parameter: {raw!r}", details={"value": repr(raw)})


def _as_public_key(raw: Any) -> str:
    if isinstance(raw, str) and _PUBLIC_KEY_PATTERN.match(raw):
        return raw.lower()
    raise ValidationError(
        f"Invalid PublicKey parameter: {raw!r}",
        details={"value": repr(raw)},
    )


def infer_param_type(raw: Any) -> ParamType:
    """Pick a parameter type for an undeclared value."""
    if raw is None:
        return ParamType.ANY
    if isinstance(raw, ContractParam):
        return raw.type
    if isinstance(raw, bool):
        return ParamType.BOOLEAN
    if isinstance(raw, int):
        return ParamType.INTEGER
    if isinstance(raw, (bytes, bytearray)):
        return ParamType.BYTE_ARRAY
    if isinstance(raw, (list, tuple)):
        return ParamType.ARRAY
    if isinstance(raw, str):
        if is_valid_address(raw):
            return ParamType.HASH160
        if raw.startswith("0x") and is_script_hash(raw):
            return ParamType.HASH160
        if raw.startswith("0x") and is_hash(raw):
            return ParamType.HASH256
        return ParamType.STRING
    raise ValidationError(
        f"Cannot infer parameter type for {type(raw).__name__}",
        details={"value": repr(raw)},
    )


def marshal_param(
    declared_type: Optional[Union[str, ParamType]],
    raw: Any,
) -> ContractParam:
    """
    Convert a raw value into a ContractParam.

    Pure: no I/O, no client library types.

    Args:
        declared_type: Type from operation metadata, or None to infer
        raw: Caller-supplied value

    Raises:
        ValidationError: If the value cannot be represented as the type
    """
    if isinstance(raw, ContractParam) and declared_type is None:
        return raw

    param_type = infer_param_type(raw) if declared_type is None else parse_param_type(declared_type)

    if param_type is ParamType.ANY:
        return ContractParam(ParamType.ANY, None)
    if param_type is ParamType.BOOLEAN:
        return ContractParam(param_type, _as_boolean(raw))
    if param_type is ParamType.INTEGER:
        return ContractParam(param_type, _as_integer(raw))
    if param_type is ParamType.STRING:
        if not isinstance(raw, str):
            raise ValidationError(
                f"Invalid String parameter: {raw!r}",
                details={"value": repr(raw)},
            )
        return ContractParam(param_type, raw)
    if param_type is ParamType.HASH160:
        return ContractParam(param_type, _as_hash160(raw))
    if param_type is ParamType.HASH256:
        return ContractParam(param_type, validate_hash(raw, field_name="Hash256 parameter"))
    if param_type is ParamType.BYTE_ARRAY:
        return ContractParam(param_type, _as_byte_array(raw))
    if param_type is ParamType.PUBLIC_KEY:
        return ContractParam(param_type, _as_public_key(raw))

    if not isinstance(raw, (list, tuple)):
        raise ValidationError(f"Invalid Array parameter: {raw!r}", details={"value": repr(raw)})
    return ContractParam(ParamType.ARRAY, tuple(marshal_param(None, item) for item in raw))


def marshal_args(
    args: Sequence[Any],
    declared_types: Optional[Sequence[Union[str, ParamType]]] = None,
) -> List[ContractParam]:
    """
    Marshal a positional argument list.

    ``declared_types`` is matched by position; extra arguments are inferred.
    """
    declared: Tuple[Optional[Union[str, ParamType]], ...] = tuple(declared_types or ())
    params: List[ContractParam] = []
    for index, raw in enumerate(args):
        declared_type = declared[index] if index < len(declared) else None
        params.append(marshal_param(declared_type, raw))
    return params
