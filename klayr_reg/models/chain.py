"""
Pydantic models for node RPC responses
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _hex_to_bytes(v):
    if isinstance(v, str):
        try:
            return bytes.fromhex(v)
        except ValueError:
            raise ValueError('Must be a hex encoded string')
    return v


class _RPCModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class Genesis(_RPCModel):
    min_fee_per_byte: Optional[int] = Field(None, alias="minFeePerByte")


class NodeInfo(_RPCModel):
    chain_id: bytes = Field(..., alias="chainID")
    height: int = Field(..., ge=0)
    genesis: Optional[Genesis] = None

    @field_validator("chain_id", mode="before")
    @classmethod
    def parse_chain_id(cls, v):
        return _hex_to_bytes(v)


class Validator(_RPCModel):
    """A consensus participant as reported by the BFT parameters"""
    address: str = ""
    bls_key: bytes = Field(..., alias="blsKey")
    bft_weight: int = Field(..., alias="bftWeight", ge=0)

    @field_validator("bls_key", mode="before")
    @classmethod
    def parse_bls_key(cls, v):
        return _hex_to_bytes(v)


class BFTParameters(_RPCModel):
    validators: List[Validator]
    certificate_threshold: int = Field(..., alias="certificateThreshold", ge=0)


class AuthAccount(_RPCModel):
    nonce: int = Field(..., ge=0)


class ChainState(_RPCModel):
    """Consensus status of one chain at the moment of query"""
    chain_id: bytes
    height: int
    certificate_threshold: int


class KeystoreEntry(_RPCModel):
    bls_public_key: bytes = Field(..., alias="blsKey")
    bls_private_key: bytes = Field(..., alias="blsPrivateKey")

    @field_validator("bls_public_key", "bls_private_key", mode="before")
    @classmethod
    def parse_keys(cls, v):
        return _hex_to_bytes(v)
