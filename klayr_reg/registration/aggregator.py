from typing import List

from klayr_reg.blockchain.bls import (
    AggregateSignature,
    SignaturePair,
    create_aggregate_signature,
    sign_data,
)
from klayr_reg.config.config import MESSAGE_TAG_CHAIN_REG
from klayr_reg.errors.exceptions import SigningError
from klayr_reg.log_utils import get_logger
from klayr_reg.registration.validators import ResolvedValidatorSet

logger = get_logger(__name__)


def sign_registration_message(
    validator_set: ResolvedValidatorSet,
    message: bytes,
    chain_id: bytes,
) -> List[SignaturePair]:
    """One signature per keystore-backed validator, in ascending BLS key order."""
    pairs = []
    for signer in validator_set.signers:
        signature = sign_data(MESSAGE_TAG_CHAIN_REG, chain_id, message, signer.private_key)
        pairs.append(SignaturePair(public_key=signer.public_key, signature=signature))
    return pairs


def aggregate_registration_signatures(
    validator_set: ResolvedValidatorSet,
    message: bytes,
    chain_id: bytes,
) -> AggregateSignature:
    if not validator_set.signers:
        raise SigningError("No validator keys available to sign the registration message")
    pairs = sign_registration_message(validator_set, message, chain_id)
    aggregate = create_aggregate_signature(validator_set.public_keys, pairs)
    logger.debug(
        f"Aggregated {aggregate.signer_count()} of {len(validator_set.validators)} validator signatures",
        extra={"validators": len(validator_set.validators)}
    )
    return aggregate
