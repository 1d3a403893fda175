"""
Tests for the two-phase fee negotiation
"""

from __future__ import annotations

import pytest
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from conftest import MAINCHAIN_ID, RELAYER_PHRASE
from klayr_reg.config.config import (
    COMMAND_REGISTER_MAINCHAIN,
    COMMAND_REGISTER_SIDECHAIN,
    DEFAULT_PHRASE_PATH,
    REGISTER_SIDECHAIN_FEE_BUFFER,
    REGISTER_SIDECHAIN_PROVISIONAL_FEE,
    TAG_TRANSACTION,
)
from klayr_reg.errors.exceptions import FeeNegotiationError, RPCError
from klayr_reg.registration.negotiator import NegotiationState, negotiate_transaction, resolve_fee
from klayr_reg.rpc.client import ChainClient
from klayr_reg.wallet.relayer import RelayerIdentity

CHAIN_ID = bytes.fromhex(MAINCHAIN_ID)
PARAMS = b"\x0a\x04\x04\x00\x00\x01"


class EstimatingClient(ChainClient):
    """Answers minimum fee queries with a fixed value."""

    def __init__(self, fee):
        super().__init__("test")
        self.fee = fee
        self.seen = []

    async def compute_min_fee(self, tx):
        self.seen.append(tx)
        if isinstance(self.fee, Exception):
            raise self.fee
        return self.fee


@pytest.fixture(scope="module")
def relayer():
    return RelayerIdentity.from_phrase(RELAYER_PHRASE, DEFAULT_PHRASE_PATH)


async def _negotiate(client, relayer, **kwargs):
    defaults = dict(
        command=COMMAND_REGISTER_SIDECHAIN,
        params=PARAMS,
        nonce=4,
        relayer=relayer,
        chain_id=CHAIN_ID,
        provisional_fee=REGISTER_SIDECHAIN_PROVISIONAL_FEE,
    )
    defaults.update(kwargs)
    return await negotiate_transaction(client, **defaults)


# ───────────────────────────── resolve_fee ──────────────────────────────────
def test_resolve_fee_adds_buffer():
    assert resolve_fee(500_000_000, None, REGISTER_SIDECHAIN_FEE_BUFFER) == 1_500_000_000
    assert resolve_fee(700_000_000, None) == 700_000_000


def test_resolve_fee_override_is_verbatim():
    assert resolve_fee(500_000_000, 42, REGISTER_SIDECHAIN_FEE_BUFFER) == 42
    assert resolve_fee(None, 0) == 0


def test_resolve_fee_without_inputs():
    with pytest.raises(FeeNegotiationError):
        resolve_fee(None, None)


# ─────────────────────────── negotiate_transaction ──────────────────────────
@pytest.mark.asyncio
async def test_sidechain_direction_applies_buffer(relayer):
    client = EstimatingClient(500_000_000)
    final = await _negotiate(client, relayer, fee_buffer=REGISTER_SIDECHAIN_FEE_BUFFER)

    assert final.fee == 1_500_000_000
    assert final.estimated_fee == 500_000_000
    # the estimate is taken on the signed provisional transaction
    provisional = client.seen[0]
    assert provisional.fee == REGISTER_SIDECHAIN_PROVISIONAL_FEE
    assert len(provisional.signatures) == 1


@pytest.mark.asyncio
async def test_mainchain_direction_has_no_buffer(relayer):
    final = await _negotiate(EstimatingClient(700_000_000), relayer, command=COMMAND_REGISTER_MAINCHAIN)
    assert final.fee == 700_000_000
    assert final.transaction.command == COMMAND_REGISTER_MAINCHAIN


@pytest.mark.asyncio
async def test_trace_order(relayer):
    final = await _negotiate(EstimatingClient(1), relayer)
    assert final.trace == (
        NegotiationState.BUILD_PROVISIONAL,
        NegotiationState.SIGN_PROVISIONAL,
        NegotiationState.ESTIMATE_FEE,
        NegotiationState.RESOLVE_FEE,
        NegotiationState.SIGN_FINAL,
        NegotiationState.READY,
    )


@pytest.mark.asyncio
async def test_override_skips_estimation(relayer):
    client = EstimatingClient(500_000_000)
    final = await _negotiate(client, relayer, fee_override=123, fee_buffer=REGISTER_SIDECHAIN_FEE_BUFFER)

    assert final.fee == 123
    assert final.estimated_fee is None
    assert client.seen == []
    assert NegotiationState.ESTIMATE_FEE not in final.trace


@pytest.mark.asyncio
async def test_final_signature_covers_final_fee(relayer):
    final = await _negotiate(EstimatingClient(900), relayer)
    tx = final.transaction

    assert len(tx.signatures) == 1
    assert tx.nonce == 4 and tx.params == PARAMS
    Ed25519PublicKey.from_public_bytes(relayer.public_key).verify(
        tx.signatures[0], TAG_TRANSACTION.encode() + CHAIN_ID + tx.signing_bytes()
    )


@pytest.mark.asyncio
async def test_negotiation_is_deterministic(relayer):
    first = await _negotiate(EstimatingClient(900), relayer)
    second = await _negotiate(EstimatingClient(900), relayer)
    assert first.transaction.get_bytes() == second.transaction.get_bytes()


@pytest.mark.asyncio
async def test_estimator_failure_is_fee_negotiation_error(relayer):
    client = EstimatingClient(RPCError("system_getNodeInfo", "node syncing"))
    with pytest.raises(FeeNegotiationError, match="node syncing"):
        await _negotiate(client, relayer)
