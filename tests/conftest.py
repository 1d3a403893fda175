# tests/conftest.py
"""
Shared fixtures for the test suite.

Key design points
─────────────────
1.  Make project-root importable so `from klayr_reg.registration import …`
    works no matter where pytest is launched.
2.  Provide an in-memory chain client that records every RPC call and
    answers with canned node responses, so no test touches the network.
3.  Let tests opt-in to fast BLS stubs via the `fast_bls` fixture; the BLS
    tests themselves use the real py_ecc implementation.
"""

from __future__ import annotations
import hashlib
import pathlib
import sys
from types import SimpleNamespace

import pytest

# ─────────────────────────────────────────────────────────────────────────────
#  Ensure the repo root is on sys.path
# ─────────────────────────────────────────────────────────────────────────────
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Only now import modules that live in the repo
from klayr_reg.config.settings import resolve_settings
from klayr_reg.rpc.client import ChainClient

RELAYER_PHRASE = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
MAINCHAIN_ID = "04000000"
SIDECHAIN_ID = "04000001"


def bls_key(byte: int) -> str:
    return bytes([byte]).hex() * 48


def validator(byte: int, weight: int, address: str = "") -> dict:
    return {"address": address or f"kly{byte:02x}", "blsKey": bls_key(byte), "bftWeight": str(weight)}


# ─────────────────────────── fake chain client ──────────────────────────────
class FakeChainClient(ChainClient):
    """ChainClient whose transport is a dict of canned responses."""

    def __init__(self, name, chain_id, validators, certificate_threshold=10,
                 height=100, nonce=0, min_fee_per_byte=1000):
        super().__init__(name)
        self.calls: list[tuple[str, dict | None]] = []
        self.closed = False
        self.responses = {
            "system_getNodeInfo": {
                "chainID": chain_id,
                "height": height,
                "genesis": {"minFeePerByte": min_fee_per_byte},
            },
            "consensus_getBFTParameters": {
                "validators": validators,
                "certificateThreshold": str(certificate_threshold),
            },
            "auth_getAuthAccount": {"nonce": str(nonce)},
            "txpool_postTransaction": {"transactionId": f"{name}-tx"},
            "chainConnector_authorize": {"result": "Successfully enabled the chain connector plugin."},
        }

    async def invoke(self, method, params=None):
        self.calls.append((method, params))
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self):
        self.closed = True

    def called(self, method):
        return [params for m, params in self.calls if m == method]


@pytest.fixture
def mainchain_client():
    return FakeChainClient(
        "mainchain", MAINCHAIN_ID,
        validators=[validator(0x30, 20), validator(0x10, 0), validator(0x20, 30)],
        certificate_threshold=35,
        nonce=7,
    )


@pytest.fixture
def sidechain_client():
    return FakeChainClient(
        "sidechain", SIDECHAIN_ID,
        validators=[validator(0xAA, 10), validator(0x01, 5)],
        certificate_threshold=10,
        nonce=3,
    )


@pytest.fixture
def settings():
    return resolve_settings([{
        "main_ws": "ws://127.0.0.1:7887/rpc-ws",
        "side_ws": "ws://127.0.0.1:7888/rpc-ws",
        "side_name": "sidechain_one",
        "keys": "keys.json",
        "relayer_phrase": RELAYER_PHRASE,
    }])


# ───────────────────────────── fast BLS stubs ───────────────────────────────
@pytest.fixture
def fast_bls(monkeypatch):
    """Replace py_ecc signing/aggregation with cheap deterministic stand-ins."""
    import klayr_reg.blockchain.bls as bls_mod

    def _sign(sk: int, message: bytes) -> bytes:
        return hashlib.sha384(sk.to_bytes(32, "big") + message).digest() * 2

    def _aggregate(signatures):
        return hashlib.sha384(b"".join(signatures)).digest() * 2

    stub = SimpleNamespace(Sign=_sign, Aggregate=_aggregate)
    monkeypatch.setattr(bls_mod, "bls_pop", stub)
    return stub
