"""
Transaction envelope, signing and minimum fee computation
"""

import hashlib
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple

from klayr_reg.blockchain.codec import decode, encode, to_json
from klayr_reg.blockchain.schemas import transaction_schema
from klayr_reg.config.config import SIGNATURE_LENGTH, TAG_TRANSACTION
from klayr_reg.wallet.relayer import sign_data


@dataclass(frozen=True)
class Transaction:
    module: str
    command: str
    nonce: int
    fee: int
    sender_public_key: bytes
    params: bytes
    signatures: Tuple[bytes, ...] = ()

    def _fields(self, signatures) -> Dict[str, Any]:
        return {
            "module": self.module,
            "command": self.command,
            "nonce": self.nonce,
            "fee": self.fee,
            "senderPublicKey": self.sender_public_key,
            "params": self.params,
            "signatures": list(signatures),
        }

    def _encoded(self, signatures) -> bytes:
        return encode(transaction_schema, self._fields(signatures))

    def signing_bytes(self) -> bytes:
        return self._encoded(())

    def get_bytes(self) -> bytes:
        return self._encoded(self.signatures)

    @property
    def id(self) -> bytes:
        return hashlib.sha256(self.get_bytes()).digest()

    def with_fee(self, fee: int) -> "Transaction":
        """Copy with a new fee and no signatures."""
        return replace(self, fee=fee, signatures=())

    def sign(self, chain_id: bytes, private_key: bytes) -> "Transaction":
        """Copy with one more signature over the signing bytes, bound to ``chain_id``."""
        signature = sign_data(TAG_TRANSACTION, chain_id, self.signing_bytes(), private_key)
        return replace(self, signatures=self.signatures + (signature,))

    def to_json(self) -> Dict[str, Any]:
        """JSON-friendly form as nodes return it, plus the hex id."""
        return {**to_json(transaction_schema, self._fields(self.signatures)), "id": self.id.hex()}

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Transaction":
        obj = decode(transaction_schema, raw)
        return cls(
            module=obj["module"],
            command=obj["command"],
            nonce=obj["nonce"],
            fee=obj["fee"],
            sender_public_key=obj["senderPublicKey"],
            params=obj["params"],
            signatures=tuple(obj["signatures"]),
        )


def compute_min_fee(
    tx: Transaction,
    min_fee_per_byte: int,
    base_fee: int = 0,
    number_of_signatures: int = 1,
) -> int:
    """
    Minimum fee for ``tx``: encoded size times ``min_fee_per_byte`` plus ``base_fee``.

    Size is measured with ``number_of_signatures`` zero-filled 64-byte
    signatures, and recomputed until the fee field's own width is included.
    """
    mock_signatures = tuple(bytes(SIGNATURE_LENGTH) for _ in range(max(1, number_of_signatures)))
    candidate = replace(tx, fee=0, signatures=mock_signatures)
    min_fee = len(candidate.get_bytes()) * min_fee_per_byte + base_fee
    while min_fee > candidate.fee:
        candidate = replace(candidate, fee=min_fee)
        min_fee = len(candidate.get_bytes()) * min_fee_per_byte + base_fee
    return candidate.fee
