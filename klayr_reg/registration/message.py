"""
Registration parameters and the canonical signable message
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

from klayr_reg.blockchain import codec
from klayr_reg.blockchain.bls import AggregateSignature
from klayr_reg.blockchain.schemas import (
    mainchain_reg_params_schema,
    registration_signature_message_schema,
    sidechain_reg_params_schema,
)
from klayr_reg.errors.exceptions import ConfigurationError
from klayr_reg.models.chain import Validator


def _validator_objects(validators: Sequence[Validator]):
    return [{"blsKey": v.bls_key, "bftWeight": v.bft_weight} for v in validators]


def _require_name(name: str) -> str:
    if not name:
        raise ConfigurationError("Sidechain name is not set")
    return name


@dataclass(frozen=True)
class MainchainRegistrationParams:
    own_chain_id: bytes
    own_name: str
    mainchain_validators: Tuple[Validator, ...]
    mainchain_certificate_threshold: int

    def to_codec_object(self) -> Dict[str, Any]:
        return {
            "ownChainID": self.own_chain_id,
            "ownName": self.own_name,
            "mainchainValidators": _validator_objects(self.mainchain_validators),
            "mainchainCertificateThreshold": self.mainchain_certificate_threshold,
        }


@dataclass(frozen=True)
class RegistrationMessage:
    """Parameters plus the exact bytes every validator signs"""
    params: MainchainRegistrationParams
    message: bytes


def build_registration_message(
    own_chain_id: bytes,
    own_name: str,
    mainchain_validators: Sequence[Validator],
    mainchain_certificate_threshold: int,
) -> RegistrationMessage:
    """Encode the registerMainchain signature message once; the result is never re-encoded."""
    params = MainchainRegistrationParams(
        own_chain_id=own_chain_id,
        own_name=_require_name(own_name),
        mainchain_validators=tuple(mainchain_validators),
        mainchain_certificate_threshold=mainchain_certificate_threshold,
    )
    message = codec.encode(registration_signature_message_schema, params.to_codec_object())
    return RegistrationMessage(params=params, message=message)


def encode_mainchain_reg_params(message: RegistrationMessage, aggregate: AggregateSignature) -> bytes:
    """registerMainchain command params: the signed message fields plus the aggregate signature."""
    obj = message.params.to_codec_object()
    obj["signature"] = aggregate.signature
    obj["aggregationBits"] = aggregate.aggregation_bits
    return codec.encode(mainchain_reg_params_schema, obj)


@dataclass(frozen=True)
class SidechainRegistrationParams:
    chain_id: bytes
    name: str
    sidechain_validators: Tuple[Validator, ...]
    sidechain_certificate_threshold: int

    def to_codec_object(self) -> Dict[str, Any]:
        return {
            "chainID": self.chain_id,
            "name": self.name,
            "sidechainValidators": _validator_objects(self.sidechain_validators),
            "sidechainCertificateThreshold": self.sidechain_certificate_threshold,
        }

    def encode(self) -> bytes:
        return codec.encode(sidechain_reg_params_schema, self.to_codec_object())


def build_sidechain_registration_params(
    chain_id: bytes,
    name: str,
    sidechain_validators: Sequence[Validator],
    sidechain_certificate_threshold: int,
) -> SidechainRegistrationParams:
    return SidechainRegistrationParams(
        chain_id=chain_id,
        name=_require_name(name),
        sidechain_validators=tuple(sidechain_validators),
        sidechain_certificate_threshold=sidechain_certificate_threshold,
    )
