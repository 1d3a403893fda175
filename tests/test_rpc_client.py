"""
Tests for the JSON-RPC client over a stubbed WebSocket and a local ZeroMQ socket
"""

from __future__ import annotations

import asyncio
import json
import os
from types import SimpleNamespace

import aiohttp
import pytest
import zmq
import zmq.asyncio

from conftest import MAINCHAIN_ID, validator
from klayr_reg.config.config import IPC_RPC_SOCKET_NAME
from klayr_reg.config.settings import ChainSettings
from klayr_reg.errors.exceptions import AuthorizationError, ConnectivityError, RPCError
from klayr_reg.rpc.client import IPCChainClient, WSChainClient, create_client, get_ipc_rpc_socket_path


class StubWebSocket:
    """Answers each request with the next scripted frame(s)."""

    def __init__(self, frames):
        self.frames = list(frames)
        self.sent = []
        self.closed = False

    async def send_json(self, data):
        self.sent.append(data)

    async def receive(self):
        frame = self.frames.pop(0)
        if isinstance(frame, dict):
            return SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=json.dumps(frame))
        if isinstance(frame, str):
            return SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=frame)
        return SimpleNamespace(type=frame, data=None)

    async def close(self):
        self.closed = True


class StubSession:
    closed = False

    async def close(self):
        self.closed = True


def _client(*frames):
    ws = StubWebSocket(frames)
    return WSChainClient("mainchain", StubSession(), ws), ws


@pytest.mark.asyncio
async def test_request_envelope_and_result():
    client, ws = _client({"jsonrpc": "2.0", "id": 1, "result": {"nonce": "5"}})

    account = await client.get_auth_account("klyabc")

    assert account.nonce == 5
    assert ws.sent == [{
        "jsonrpc": "2.0", "id": 1, "method": "auth_getAuthAccount", "params": {"address": "klyabc"}
    }]


@pytest.mark.asyncio
async def test_notifications_are_skipped():
    client, _ = _client(
        {"jsonrpc": "2.0", "method": "app_newBlock", "params": {}},
        {"jsonrpc": "2.0", "id": 1, "result": {
            "chainID": MAINCHAIN_ID, "height": 12, "genesis": {"minFeePerByte": 1000}
        }},
    )
    info = await client.get_node_info()
    assert info.chain_id == bytes.fromhex(MAINCHAIN_ID)
    assert info.height == 12


@pytest.mark.asyncio
async def test_error_object_raises_rpc_error():
    client, _ = _client({"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "boom"}})
    with pytest.raises(RPCError) as exc:
        await client.invoke("system_getNodeInfo")
    assert exc.value.reason == "boom"
    assert exc.value.rpc_code == -32603


@pytest.mark.asyncio
async def test_closed_socket_is_connectivity_error():
    client, _ = _client(aiohttp.WSMsgType.CLOSED)
    with pytest.raises(ConnectivityError):
        await client.invoke("system_getNodeInfo")


@pytest.mark.asyncio
@pytest.mark.parametrize("frame", ["[1, 2]", "null", "{broken"])
async def test_non_object_frame_is_rpc_error(frame):
    client, _ = _client(frame)
    with pytest.raises(RPCError):
        await client.get_node_info()


@pytest.mark.asyncio
async def test_malformed_response():
    client, _ = _client({"jsonrpc": "2.0", "id": 1, "result": {"validators": [validator(1, 1)]}})
    with pytest.raises(RPCError, match="Malformed response"):
        await client.get_bft_parameters(10)


@pytest.mark.asyncio
async def test_chain_state_combines_node_info_and_bft():
    client, ws = _client(
        {"jsonrpc": "2.0", "id": 1, "result": {"chainID": MAINCHAIN_ID, "height": 40}},
        {"jsonrpc": "2.0", "id": 2, "result": {
            "validators": [validator(1, 1)], "certificateThreshold": "1"
        }},
    )
    state, validators = await client.get_chain_state()

    assert state.height == 40
    assert state.certificate_threshold == 1
    assert len(validators) == 1
    assert ws.sent[1]["params"] == {"height": 40}


@pytest.mark.asyncio
async def test_authorize_error_is_authorization_error():
    client, _ = _client({"jsonrpc": "2.0", "id": 1, "error": {"message": "Invalid password"}})
    with pytest.raises(AuthorizationError, match="Invalid password"):
        await client.authorize_chain_connector(True, "bad")


@pytest.mark.asyncio
async def test_close_closes_socket_and_session():
    client, ws = _client()
    await client.close()
    assert ws.closed and client._session.closed


@pytest.mark.asyncio
async def test_no_endpoint_configured():
    with pytest.raises(ConnectivityError, match="sidechain"):
        await create_client("sidechain", ChainSettings())


@pytest.mark.asyncio
async def test_ipc_preferred_over_ws(monkeypatch):
    seen = []

    async def _connect(name, endpoint):
        seen.append(endpoint)
        return "client"

    monkeypatch.setattr(IPCChainClient, "connect", _connect)
    monkeypatch.setattr(WSChainClient, "connect", None)
    await create_client("mainchain", ChainSettings(ipc="~/.klayr/klayr-core", ws="ws://host/rpc-ws"))
    assert seen == ["~/.klayr/klayr-core"]


# IPC
class StubZmqSocket:
    def __init__(self, frames):
        self.frames = list(frames)
        self.sent = []

    async def send(self, data):
        self.sent.append(json.loads(data))

    async def recv(self):
        return self.frames.pop(0)


def test_ipc_socket_path_expands_home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/relayer")
    assert get_ipc_rpc_socket_path("~/.klayr/klayr-core") == os.path.join(
        "/home/relayer/.klayr/klayr-core", "tmp", "sockets", IPC_RPC_SOCKET_NAME
    )


@pytest.mark.asyncio
async def test_ipc_missing_socket_is_connectivity_error(tmp_path):
    with pytest.raises(ConnectivityError, match="no IPC socket"):
        await IPCChainClient.connect("sidechain", str(tmp_path))


@pytest.mark.asyncio
async def test_ipc_skips_stale_replies_and_rejects_non_objects():
    socket = StubZmqSocket([
        json.dumps({"jsonrpc": "2.0", "id": 99, "result": {}}).encode(),
        json.dumps({"jsonrpc": "2.0", "id": 1, "result": {"nonce": "4"}}).encode(),
        b"[1, 2]",
    ])
    client = IPCChainClient("sidechain", None, socket)

    account = await client.get_auth_account("klyabc")
    assert account.nonce == 4
    assert socket.sent[0]["method"] == "auth_getAuthAccount"

    with pytest.raises(RPCError, match="Unexpected response frame"):
        await client.invoke("system_getNodeInfo")


@pytest.mark.asyncio
async def test_ipc_round_trip_with_node_socket(tmp_path):
    sockets = tmp_path / "tmp" / "sockets"
    sockets.mkdir(parents=True)
    context = zmq.asyncio.Context()
    node = context.socket(zmq.ROUTER)
    node.setsockopt(zmq.LINGER, 0)
    node.bind(f"ipc://{sockets / IPC_RPC_SOCKET_NAME}")

    client = await IPCChainClient.connect("sidechain", str(tmp_path))
    try:
        pending = asyncio.ensure_future(client.get_auth_account("klyabc"))
        identity, frame = await asyncio.wait_for(node.recv_multipart(), timeout=5)
        request = json.loads(frame)
        reply = {"jsonrpc": "2.0", "id": request["id"], "result": {"nonce": "9"}}
        await node.send_multipart([identity, json.dumps(reply).encode()])
        account = await asyncio.wait_for(pending, timeout=5)
    finally:
        await client.close()
        node.close()
        context.term()

    assert request["method"] == "auth_getAuthAccount"
    assert request["params"] == {"address": "klyabc"}
    assert account.nonce == 9
