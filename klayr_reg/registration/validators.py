"""
Validator set resolution.

All lists are ordered ascending by BLS public key bytes; that order fixes
both the encoded registration parameters and the aggregation bitmap
positions the target chain verifies against.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from klayr_reg.errors.exceptions import ValidatorResolutionError
from klayr_reg.log_utils import get_logger
from klayr_reg.models.chain import KeystoreEntry, Validator

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignerKey:
    public_key: bytes
    private_key: bytes = field(repr=False)


@dataclass(frozen=True)
class ResolvedValidatorSet:
    validators: Tuple[Validator, ...]
    signers: Tuple[SignerKey, ...]

    @property
    def public_keys(self) -> List[bytes]:
        return [v.bls_key for v in self.validators]


def sort_validators(validators: Iterable[Validator]) -> Tuple[Validator, ...]:
    return tuple(sorted(validators, key=lambda v: v.bls_key))


def resolve_mainchain_validators(active: Sequence[Validator]) -> Tuple[Validator, ...]:
    """Mainchain validators for the registration message; zero-weight validators are dropped."""
    weighted = sort_validators(v for v in active if v.bft_weight > 0)
    if not weighted:
        raise ValidatorResolutionError("Mainchain has no active validators with non-zero BFT weight")
    return weighted


def resolve_sidechain_validators(active: Sequence[Validator]) -> Tuple[Validator, ...]:
    if not active:
        raise ValidatorResolutionError("Sidechain has no active validators")
    return sort_validators(active)


def resolve_signers(active: Sequence[Validator], keystore: Sequence[KeystoreEntry]) -> ResolvedValidatorSet:
    """
    Pair every active validator with its keystore entry, matched on exact BLS key bytes.

    Validators without a keystore entry stay in the full list but do not sign.
    """
    validators = resolve_sidechain_validators(active)
    private_keys = {entry.bls_public_key: entry.bls_private_key for entry in keystore}
    signers = tuple(
        SignerKey(public_key=v.bls_key, private_key=private_keys[v.bls_key])
        for v in validators
        if v.bls_key in private_keys
    )
    logger.debug(
        f"Resolved {len(signers)} keystore-backed signers out of {len(validators)} active validators",
        extra={"validators": len(validators)}
    )
    if not signers:
        raise ValidatorResolutionError(
            f"None of the {len(validators)} active sidechain validators has a key in the keystore"
        )
    return ResolvedValidatorSet(validators=validators, signers=signers)
