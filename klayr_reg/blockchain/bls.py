"""
BLS12-381 signing and aggregation (proof-of-possession ciphersuite).
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from py_ecc.bls import G2ProofOfPossession as bls_pop

from klayr_reg.errors.exceptions import SigningError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignaturePair:
    public_key: bytes
    signature: bytes


@dataclass(frozen=True)
class AggregateSignature:
    aggregation_bits: bytes
    signature: bytes

    def is_set(self, index: int) -> bool:
        byte_index, bit_index = divmod(index, 8)
        if byte_index >= len(self.aggregation_bits):
            return False
        return bool(self.aggregation_bits[byte_index] & (1 << bit_index))

    def signer_count(self) -> int:
        return sum(bin(b).count("1") for b in self.aggregation_bits)


def tag_message(tag: str, chain_id: bytes, message: bytes) -> bytes:
    return tag.encode("utf-8") + chain_id + message


def get_public_key_from_private_key(private_key: bytes) -> bytes:
    return bls_pop.SkToPk(int.from_bytes(private_key, "big"))


def sign_data(tag: str, chain_id: bytes, message: bytes, private_key: bytes) -> bytes:
    """Sign ``message`` bound to a domain tag and chain ID; returns a 96-byte signature."""
    try:
        return bls_pop.Sign(int.from_bytes(private_key, "big"), tag_message(tag, chain_id, message))
    except Exception as e:
        logger.error(f"BLS signing failed: {e}")
        raise SigningError(f"Failed to sign registration message: {e}") from e


def create_bitmap(indexes: Sequence[int], length: int) -> bytes:
    """One bit per list position, least significant bit first within each byte."""
    bits = bytearray((length + 7) // 8)
    for index in indexes:
        if not 0 <= index < length:
            raise SigningError(f"Bit index {index} outside list of {length}")
        bits[index // 8] |= 1 << (index % 8)
    return bytes(bits)


def create_aggregate_signature(
    public_keys: Sequence[bytes],
    pairs: Sequence[SignaturePair],
) -> AggregateSignature:
    """
    Aggregate individual signatures into one.

    ``public_keys`` is the full ordered validator key list; the resulting
    bitmap has one bit per entry, set where that key contributed a signature.
    """
    if not pairs:
        raise SigningError("No signatures to aggregate")

    positions = {key: i for i, key in enumerate(public_keys)}
    indexes = []
    signatures = []
    for pair in sorted(pairs, key=lambda p: p.public_key):
        if pair.public_key not in positions:
            raise SigningError(f"Signer {pair.public_key.hex()} is not in the validator list")
        indexes.append(positions[pair.public_key])
        signatures.append(pair.signature)

    try:
        signature = bls_pop.Aggregate(signatures)
    except Exception as e:
        logger.error(f"BLS aggregation failed: {e}")
        raise SigningError(f"Failed to aggregate signatures: {e}") from e

    return AggregateSignature(
        aggregation_bits=create_bitmap(indexes, len(public_keys)),
        signature=signature,
    )


def verify_aggregate_signature(
    public_keys: Sequence[bytes],
    aggregate: AggregateSignature,
    tag: str,
    chain_id: bytes,
    message: bytes,
) -> bool:
    signers = [key for i, key in enumerate(public_keys) if aggregate.is_set(i)]
    if not signers:
        return False
    return bls_pop.FastAggregateVerify(signers, tag_message(tag, chain_id, message), aggregate.signature)
