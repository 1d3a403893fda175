"""
Relayer identity: Ed25519 key derivation from a passphrase and path,
transaction signing and klayr32 addresses.
"""

import hashlib
import hmac
import re
import unicodedata
from dataclasses import dataclass, field
from typing import List

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from klayr_reg.config.config import ADDRESS_PREFIX
from klayr_reg.errors.exceptions import ConfigurationError

_BIP39_ROUNDS = 2048
_SEED_LEN = 64
_HARDENED_OFFSET = 0x80000000
_MAX_SEGMENT = 0x7FFFFFFF
_ED25519_SEED_KEY = b"ed25519 seed"
_PATH_SEGMENT = re.compile(r"^(\d+)'$")

_ADDRESS_LEN = 20
_CHARSET = "zxvcpmbn3465o978uyrtkqew2adsgfhj"
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


def mnemonic_to_seed(phrase: str, password: str = "") -> bytes:
    """BIP-39 seed from a mnemonic phrase."""
    mnemonic = unicodedata.normalize("NFKD", phrase).encode("utf-8")
    salt = unicodedata.normalize("NFKD", "mnemonic" + password).encode("utf-8")
    return PBKDF2HMAC(
        algorithm=hashes.SHA512(), length=_SEED_LEN,
        salt=salt, iterations=_BIP39_ROUNDS
    ).derive(mnemonic)


def parse_key_derivation_path(path: str) -> List[int]:
    """Hardened SLIP-10 indexes for a path such as m/44'/134'/0'."""
    if not path or not path.startswith("m/"):
        raise ConfigurationError(f"Invalid key derivation path format: {path!r}")
    indexes = []
    for segment in path.split("/")[1:]:
        match = _PATH_SEGMENT.match(segment)
        if not match:
            raise ConfigurationError(f"Invalid path segment {segment!r}: only hardened segments are supported")
        value = int(match.group(1))
        if value > _MAX_SEGMENT:
            raise ConfigurationError(f"Path segment {segment!r} out of range")
        indexes.append(value + _HARDENED_OFFSET)
    return indexes


def _hmac_sha512(key: bytes, data: bytes):
    digest = hmac.new(key, data, hashlib.sha512).digest()
    return digest[:32], digest[32:]


def derive_private_key_from_seed(seed: bytes, path: str) -> bytes:
    """SLIP-10 Ed25519 derivation; every segment is hardened."""
    key, chain_code = _hmac_sha512(_ED25519_SEED_KEY, seed)
    for index in parse_key_derivation_path(path):
        key, chain_code = _hmac_sha512(chain_code, b"\x00" + key + index.to_bytes(4, "big"))
    return key


def get_private_key_from_phrase_and_path(phrase: str, path: str) -> bytes:
    """32-byte Ed25519 private key seed for ``phrase`` at ``path``."""
    if not phrase:
        raise ConfigurationError("Relayer passphrase is not set")
    return derive_private_key_from_seed(mnemonic_to_seed(phrase), path)


def _signing_key(private_key: bytes) -> Ed25519PrivateKey:
    # accepts both the bare seed and the 64-byte seed||public key layout
    return Ed25519PrivateKey.from_private_bytes(private_key[:32])


def get_public_key_from_private_key(private_key: bytes) -> bytes:
    return _signing_key(private_key).public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


def sign_data(tag: str, chain_id: bytes, data: bytes, private_key: bytes) -> bytes:
    return _signing_key(private_key).sign(tag.encode("utf-8") + chain_id + data)


def _polymod(values: List[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _convert_bits(data: bytes, from_bits: int, to_bits: int) -> List[int]:
    acc = 0
    bits = 0
    out = []
    maxv = (1 << to_bits) - 1
    for value in data:
        acc = (acc << from_bits) | value
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if bits:
        out.append((acc << (to_bits - bits)) & maxv)
    return out


def _checksum(values: List[int]) -> List[int]:
    mod = _polymod(values + [0] * 6) ^ 1
    return [(mod >> 5 * (5 - p)) & 31 for p in range(6)]


def get_address_from_public_key(public_key: bytes) -> bytes:
    return hashlib.sha256(public_key).digest()[:_ADDRESS_LEN]


def get_klayr32_address_from_address(address: bytes, prefix: str = ADDRESS_PREFIX) -> str:
    words = _convert_bits(address, 8, 5)
    return prefix + "".join(_CHARSET[w] for w in words + _checksum(words))


def get_klayr32_address_from_public_key(public_key: bytes, prefix: str = ADDRESS_PREFIX) -> str:
    return get_klayr32_address_from_address(get_address_from_public_key(public_key), prefix)


@dataclass(frozen=True)
class RelayerIdentity:
    """The account that signs and pays for a registration transaction"""
    private_key: bytes = field(repr=False)
    public_key: bytes
    address: str

    @classmethod
    def from_phrase(cls, phrase: str, path: str) -> "RelayerIdentity":
        private_key = get_private_key_from_phrase_and_path(phrase, path)
        public_key = get_public_key_from_private_key(private_key)
        return cls(
            private_key=private_key,
            public_key=public_key,
            address=get_klayr32_address_from_public_key(public_key),
        )
