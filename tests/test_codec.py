"""
Unit-tests for klayr_reg.blockchain.codec
"""

from __future__ import annotations

import pytest

from klayr_reg.blockchain import codec
from klayr_reg.errors.exceptions import CodecError

SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "name": {"dataType": "string", "fieldNumber": 2, "maxLength": 8},
        "id": {"dataType": "uint32", "fieldNumber": 1},
        "delta": {"dataType": "sint64", "fieldNumber": 3},
        "flag": {"dataType": "boolean", "fieldNumber": 4},
        "blob": {"dataType": "bytes", "fieldNumber": 5},
        "amounts": {"type": "array", "fieldNumber": 6, "items": {"dataType": "uint64"}},
        "items": {
            "type": "array",
            "fieldNumber": 7,
            "items": {
                "type": "object",
                "properties": {"key": {"dataType": "bytes", "fieldNumber": 1}},
            },
        },
    },
}


# ───────────────────────── varints ──────────────────────────
@pytest.mark.parametrize(
    "value,raw",
    [(0, b"\x00"), (1, b"\x01"), (127, b"\x7f"), (128, b"\x80\x01"), (300, b"\xac\x02")],
)
def test_varint(value, raw):
    assert codec.write_varint(value) == raw
    assert codec.read_varint(raw, 0) == (value, len(raw))


def test_truncated_varint_rejected():
    with pytest.raises(CodecError):
        codec.read_varint(b"\x80", 0)


# ───────────────────────── encode ───────────────────────────
def test_fields_encoded_in_field_number_order():
    raw = codec.encode(SCHEMA, {"name": "ab", "id": 5})
    # key(1, varint)=0x08 value 5, key(2, delimited)=0x12 len 2 "ab"
    assert raw == b"\x08\x05\x12\x02ab"


def test_sint_uses_zigzag_and_bool_is_varint():
    raw = codec.encode(SCHEMA, {"id": 1, "name": "a", "delta": -2, "flag": True})
    assert raw.endswith(b"\x18\x03\x20\x01")


def test_packed_integers_and_repeated_objects():
    raw = codec.encode(SCHEMA, {
        "id": 1,
        "name": "a",
        "amounts": [1, 300],
        "items": [{"key": b"\xaa"}, {"key": b"\xbb"}],
    })
    assert b"\x32\x03\x01\xac\x02" in raw
    assert raw.endswith(b"\x3a\x03\x0a\x01\xaa\x3a\x03\x0a\x01\xbb")


def test_empty_array_is_omitted():
    assert codec.encode(SCHEMA, {"id": 1, "name": "a", "amounts": []}) == b"\x08\x01\x12\x01a"


def test_missing_required_property():
    with pytest.raises(CodecError, match="name"):
        codec.encode(SCHEMA, {"id": 1})


def test_length_limits_enforced():
    with pytest.raises(CodecError, match="longer"):
        codec.encode(SCHEMA, {"id": 1, "name": "much-too-long"})


def test_hex_string_is_not_bytes():
    with pytest.raises(CodecError, match="bytes"):
        codec.encode(SCHEMA, {"id": 1, "name": "a", "blob": "aabb"})


def test_out_of_range_integer():
    with pytest.raises(CodecError, match="range"):
        codec.encode(SCHEMA, {"id": 2 ** 32, "name": "a"})


# ───────────────────────── decode / json ────────────────────
def test_decode_restores_values():
    obj = {
        "id": 9,
        "name": "node",
        "delta": -70,
        "flag": False,
        "blob": b"\x00\x01",
        "amounts": [5, 2 ** 40],
        "items": [{"key": b"\x01"}],
    }
    assert codec.decode(SCHEMA, codec.encode(SCHEMA, obj)) == obj


def test_decode_unknown_field_rejected():
    with pytest.raises(CodecError, match="Unknown field"):
        codec.decode(SCHEMA, b"\x48\x01")


def test_json_conversion():
    native = {"id": 3, "name": "x", "blob": b"\xbe\xef", "amounts": [10, 20], "items": [{"key": b"\x01"}]}
    assert codec.to_json(SCHEMA, native) == {
        "id": 3, "name": "x", "blob": "beef", "amounts": ["10", "20"], "items": [{"key": "01"}],
    }
    assert "name" not in codec.to_json(SCHEMA, {"id": 1, "name": None})
