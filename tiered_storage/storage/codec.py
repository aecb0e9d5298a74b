# ==============================================
# Value Codec
# ==============================================
#
# PURPOSE:
#   Turn caller values into the opaque byte payloads the backends
#   store, and turn payloads back into values of the type the caller
#   asked for (taken from the default value passed to get()).
#
# WIRE FORMAT:
# ------------
#   UTF-8 JSON. Supported values:
#     - None, bool, int, float, str
#     - list / tuple / dict of the above (dict keys must be str)
#     - bytes                 → {"__bytes__": "<base64>"}
#     - datetime              → ISO-8601 string
#     - objects with to_dict() / from_dict()  (the metadata convention)
#     - dataclass instances   → field dict, fields encoded recursively;
#                               decoded back through the field type hints
#
# FUNCTIONS:
# ----------
# - encode_value(value) -> bytes
# - decode_value(data, default=None, value_type=None) -> Any
# - schema_name_of(value) -> str
#
# ==============================================

import base64
import dataclasses
import json
from datetime import datetime
from typing import Any, Optional, Union, get_args, get_origin, get_type_hints

from ..errors import DecodingFailedError, EncodingFailedError, UnsupportedTypeError

_BYTES_TAG = "__bytes__"
_PLAIN_TYPES = (type(None), bool, int, float, str, list, tuple, dict)


def schema_name_of(value: Any) -> str:
    """
    Name used by the sensitivity classifier for a value.

    Classes may override their schema name with a `__schema_name__`
    class attribute.
    """
    value_type = value if isinstance(value, type) else type(value)
    return getattr(value_type, "__schema_name__", value_type.__name__)


def _to_plain(value: Any, nested: bool = False) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return {_BYTES_TAG: base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return _to_plain(value.to_dict(), nested=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: _to_plain(getattr(value, field.name), nested=True)
            for field in dataclasses.fields(value)
        }
    if isinstance(value, (list, tuple)):
        return [_to_plain(item, nested=True) for item in value]
    if isinstance(value, dict):
        plain = {}
        for key, item in value.items():
            # JSON object keys are strings; anything else would not round-trip
            if not isinstance(key, str):
                raise UnsupportedTypeError(f"dict key of type {type(key).__name__}")
            plain[key] = _to_plain(item, nested=True)
        return plain
    if isinstance(value, _PLAIN_TYPES):
        return value
    if nested:
        raise EncodingFailedError(f"nested value of type {type(value).__name__} is not serializable")
    raise UnsupportedTypeError(type(value).__name__)


def encode_value(value: Any) -> bytes:
    """
    Serialize a value to bytes.

    Raises:
        UnsupportedTypeError: top-level value has no known encoding
        EncodingFailedError: JSON serialization failed (e.g. NaN,
            nested unsupported object)
    """
    plain = _to_plain(value)
    try:
        text = json.dumps(plain, allow_nan=False, ensure_ascii=False, separators=(",", ":"))
        return text.encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingFailedError(str(e)) from e


def _unwrap_bytes(obj: Any) -> bytes:
    if isinstance(obj, dict) and set(obj) == {_BYTES_TAG}:
        return base64.b64decode(obj[_BYTES_TAG])
    raise DecodingFailedError("payload is not a bytes value")


def decode_value(data: bytes, default: Any = None, value_type: Optional[type] = None) -> Any:
    """
    Deserialize bytes into a value.

    Args:
        data: Stored payload
        default: Value whose type is the decode target (ignored if None)
        value_type: Explicit decode target, overrides default's type

    Returns:
        The decoded value

    Raises:
        DecodingFailedError: payload is not valid JSON or does not match
            the target type
    """
    try:
        obj = json.loads(bytes(data).decode("utf-8"))
    except (UnicodeDecodeError, ValueError, TypeError) as e:
        raise DecodingFailedError(str(e)) from e

    target = value_type or (type(default) if default is not None else None)
    if target is None:
        if isinstance(obj, dict) and set(obj) == {_BYTES_TAG}:
            return _unwrap_bytes(obj)
        return obj

    try:
        return _coerce(obj, target)
    except DecodingFailedError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise DecodingFailedError(f"{target.__name__}: {e}") from e


def _coerce(obj: Any, target: type) -> Any:
    # bool is an int subclass; check it first
    if target is bool:
        if isinstance(obj, bool):
            return obj
    elif target is int:
        if isinstance(obj, int) and not isinstance(obj, bool):
            return obj
    elif target is float:
        if isinstance(obj, (int, float)) and not isinstance(obj, bool):
            return float(obj)
    elif target is str:
        if isinstance(obj, str):
            return obj
    elif target in (bytes, bytearray):
        return target(_unwrap_bytes(obj))
    elif target is datetime:
        if isinstance(obj, str):
            return datetime.fromisoformat(obj)
    elif target is tuple:
        if isinstance(obj, list):
            return tuple(obj)
    elif target in (list, dict):
        if isinstance(obj, target):
            return obj
    elif hasattr(target, "from_dict"):
        return target.from_dict(obj)
    elif dataclasses.is_dataclass(target):
        if isinstance(obj, dict):
            return _coerce_dataclass(obj, target)
    elif isinstance(obj, target):
        return obj
    raise DecodingFailedError(f"expected {target.__name__}, got {type(obj).__name__}")


def _field_type(hint: Any) -> Optional[type]:
    """Concrete class behind a field hint, unwrapping Optional[X]."""
    if hint is Any:
        return None
    if get_origin(hint) is Union:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) != 1:
            return None
        hint = args[0]
    if isinstance(hint, type) and get_origin(hint) is None:
        return hint
    return None


def _coerce_dataclass(obj: dict, target: type) -> Any:
    try:
        hints = get_type_hints(target)
    except NameError:
        hints = {}
    values = {}
    for field in dataclasses.fields(target):
        if not field.init or field.name not in obj:
            continue
        value = obj[field.name]
        field_type = _field_type(hints.get(field.name))
        if value is not None and field_type is not None:
            value = _coerce(value, field_type)
        values[field.name] = value
    unknown = set(obj) - {field.name for field in dataclasses.fields(target)}
    if unknown:
        raise DecodingFailedError(f"{target.__name__}: unknown fields {sorted(unknown)}")
    return target(**values)
