"""
Schema driven binary codec.

Objects are encoded field by field in ascending ``fieldNumber`` order. Each
field is prefixed by the varint key ``fieldNumber << 3 | wireType``:
integers and booleans use wire type 0, everything length-delimited
(bytes, strings, nested objects, packed integer arrays) uses wire type 2.
Empty arrays are omitted.
"""

from typing import Any, Dict, Tuple

from klayr_reg.errors.exceptions import CodecError

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2

_VARINT_TYPES = ("uint32", "uint64", "sint32", "sint64", "boolean")
_DELIMITED_TYPES = ("bytes", "string")

_RANGES = {
    "uint32": (0, 2 ** 32 - 1),
    "uint64": (0, 2 ** 64 - 1),
    "sint32": (-(2 ** 31), 2 ** 31 - 1),
    "sint64": (-(2 ** 63), 2 ** 63 - 1),
}


def write_varint(value: int) -> bytes:
    if value < 0:
        raise CodecError(f"Cannot varint-encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def read_varint(raw: bytes, offset: int) -> Tuple[int, int]:
    """Return (value, bytes consumed)."""
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(raw):
            raise CodecError("Truncated varint")
        byte = raw[pos]
        result |= (byte & 0x7F) << shift
        pos += 1
        if not byte & 0x80:
            return result, pos - offset
        shift += 7
        if shift > 70:
            raise CodecError("Varint too long")


def _zigzag(value: int) -> int:
    return value * 2 if value >= 0 else -value * 2 - 1


def _unzigzag(value: int) -> int:
    return value >> 1 if not value & 1 else -((value + 1) >> 1)


def _key(field_number: int, wire_type: int) -> bytes:
    return write_varint((field_number << 3) | wire_type)


def _is_object(prop: dict) -> bool:
    return prop.get("type") == "object"


def _is_array(prop: dict) -> bool:
    return prop.get("type") == "array"


def _check_length(name: str, prop: dict, length: int):
    if "minLength" in prop and length < prop["minLength"]:
        raise CodecError(f"Property '{name}' is shorter than {prop['minLength']}")
    if "maxLength" in prop and length > prop["maxLength"]:
        raise CodecError(f"Property '{name}' is longer than {prop['maxLength']}")


def _encode_scalar(name: str, data_type: str, prop: dict, value: Any) -> bytes:
    if data_type in _RANGES:
        if isinstance(value, bool) or not isinstance(value, int):
            raise CodecError(f"Property '{name}' must be an integer, got {type(value).__name__}")
        low, high = _RANGES[data_type]
        if not low <= value <= high:
            raise CodecError(f"Property '{name}' out of {data_type} range: {value}")
        return write_varint(_zigzag(value) if data_type.startswith("sint") else value)
    if data_type == "boolean":
        if not isinstance(value, bool):
            raise CodecError(f"Property '{name}' must be a boolean")
        return write_varint(1 if value else 0)
    if data_type == "bytes":
        if not isinstance(value, (bytes, bytearray)):
            raise CodecError(f"Property '{name}' must be bytes, got {type(value).__name__}")
        _check_length(name, prop, len(value))
        return write_varint(len(value)) + bytes(value)
    if data_type == "string":
        if not isinstance(value, str):
            raise CodecError(f"Property '{name}' must be a string")
        _check_length(name, prop, len(value))
        encoded = value.encode("utf-8")
        return write_varint(len(encoded)) + encoded
    raise CodecError(f"Unsupported dataType '{data_type}' for '{name}'")


def _encode_property(name: str, prop: dict, value: Any) -> bytes:
    field_number = prop["fieldNumber"]

    if _is_object(prop):
        nested = _encode_object(prop, value)
        return _key(field_number, WIRE_LENGTH_DELIMITED) + write_varint(len(nested)) + nested

    if _is_array(prop):
        if not isinstance(value, (list, tuple)):
            raise CodecError(f"Property '{name}' must be an array")
        if not value:
            return b""
        items = prop["items"]
        out = bytearray()
        if _is_object(items):
            for item in value:
                nested = _encode_object(items, item)
                out += _key(field_number, WIRE_LENGTH_DELIMITED) + write_varint(len(nested)) + nested
            return bytes(out)
        data_type = items["dataType"]
        if data_type in _DELIMITED_TYPES:
            for item in value:
                out += _key(field_number, WIRE_LENGTH_DELIMITED) + _encode_scalar(name, data_type, items, item)
            return bytes(out)
        # packed integers / booleans
        packed = b"".join(_encode_scalar(name, data_type, items, item) for item in value)
        return _key(field_number, WIRE_LENGTH_DELIMITED) + write_varint(len(packed)) + packed

    data_type = prop["dataType"]
    wire_type = WIRE_VARINT if data_type in _VARINT_TYPES else WIRE_LENGTH_DELIMITED
    return _key(field_number, wire_type) + _encode_scalar(name, data_type, prop, value)


def _sorted_properties(schema: dict):
    return sorted(schema["properties"].items(), key=lambda kv: kv[1]["fieldNumber"])


def _encode_object(schema: dict, obj: Dict[str, Any]) -> bytes:
    if not isinstance(obj, dict):
        raise CodecError("Expected an object")
    required = set(schema.get("required", []))
    out = bytearray()
    for name, prop in _sorted_properties(schema):
        value = obj.get(name)
        if value is None:
            if name in required:
                raise CodecError(f"Missing required property '{name}'")
            continue
        out += _encode_property(name, prop, value)
    return bytes(out)


def encode(schema: dict, obj: Dict[str, Any]) -> bytes:
    """Encode ``obj`` with ``schema``. Byte and integer fields must already be native."""
    return _encode_object(schema, obj)


def _decode_varint_scalar(data_type: str, raw: int):
    if data_type == "boolean":
        return raw != 0
    if data_type.startswith("sint"):
        return _unzigzag(raw)
    return raw


def _decode_object(schema: dict, data: bytes) -> Dict[str, Any]:
    by_number = {p["fieldNumber"]: (name, p) for name, p in schema["properties"].items()}
    result: Dict[str, Any] = {}
    offset = 0
    while offset < len(data):
        key, size = read_varint(data, offset)
        offset += size
        field_number, wire_type = key >> 3, key & 0x07
        if field_number not in by_number:
            raise CodecError(f"Unknown field number {field_number}")
        name, prop = by_number[field_number]

        if wire_type == WIRE_VARINT:
            raw, size = read_varint(data, offset)
            offset += size
            result[name] = _decode_varint_scalar(prop["dataType"], raw)
            continue
        if wire_type != WIRE_LENGTH_DELIMITED:
            raise CodecError(f"Unsupported wire type {wire_type}")

        length, size = read_varint(data, offset)
        offset += size
        if offset + length > len(data):
            raise CodecError(f"Truncated value for '{name}'")
        chunk = data[offset:offset + length]
        offset += length

        if _is_array(prop):
            items = prop["items"]
            values = result.setdefault(name, [])
            if _is_object(items):
                values.append(_decode_object(items, chunk))
            elif items["dataType"] == "bytes":
                values.append(bytes(chunk))
            elif items["dataType"] == "string":
                values.append(chunk.decode("utf-8"))
            else:
                pos = 0
                while pos < len(chunk):
                    raw, size = read_varint(chunk, pos)
                    pos += size
                    values.append(_decode_varint_scalar(items["dataType"], raw))
        elif _is_object(prop):
            result[name] = _decode_object(prop, chunk)
        elif prop["dataType"] == "string":
            result[name] = chunk.decode("utf-8")
        else:
            result[name] = bytes(chunk)

    for name, prop in schema["properties"].items():
        if _is_array(prop):
            result.setdefault(name, [])
    return result


def decode(schema: dict, data: bytes) -> Dict[str, Any]:
    return _decode_object(schema, bytes(data))


def _json_value(prop: dict, value: Any):
    if _is_object(prop):
        return to_json(prop, value)
    if _is_array(prop):
        return [_json_value(prop["items"], item) for item in value]
    data_type = prop["dataType"]
    if data_type == "bytes":
        return bytes(value).hex()
    if data_type in ("uint64", "sint64"):
        return str(value)
    return value


def to_json(schema: dict, obj: Dict[str, Any]) -> Dict[str, Any]:
    """Bytes to hex strings, 64-bit integers to decimal strings."""
    result = {}
    for name, prop in schema["properties"].items():
        if obj.get(name) is None:
            continue
        try:
            result[name] = _json_value(prop, obj[name])
        except (TypeError, ValueError) as e:
            raise CodecError(f"Invalid value for '{name}': {e}") from e
    return result
