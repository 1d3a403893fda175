"""
JSON-RPC chain client.

``ChainClient`` holds the JSON-RPC 2.0 envelope handling and the
chain-specific convenience calls on top of a transport-specific ``invoke``.
``WSChainClient`` talks to a node's WebSocket endpoint; ``IPCChainClient``
talks to a local node through the ZeroMQ RPC socket under its data path.
"""

import itertools
import json
import os
from typing import Any, Dict, Optional, Tuple

import aiohttp
import zmq
import zmq.asyncio
from pydantic import ValidationError

from klayr_reg.blockchain.transaction import Transaction, compute_min_fee
from klayr_reg.config.config import DEFAULT_MIN_FEE_PER_BYTE, IPC_RPC_SOCKET_NAME, IPC_SOCKETS_DIR
from klayr_reg.config.settings import ChainSettings, Settings
from klayr_reg.errors.exceptions import AuthorizationError, ConnectivityError, RPCError, SubmissionError
from klayr_reg.log_utils import get_logger
from klayr_reg.models.chain import AuthAccount, BFTParameters, ChainState, NodeInfo

logger = get_logger(__name__)


class ChainClient:
    """Convenience calls shared by every transport"""

    def __init__(self, name: str):
        self.name = name
        self._node_info: Optional[NodeInfo] = None
        self._ids = itertools.count(1)

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        raise NotImplementedError

    async def close(self):
        pass

    def _request(self, method: str, params: Optional[Dict[str, Any]]) -> Tuple[int, Dict[str, Any]]:
        request_id = next(self._ids)
        return request_id, {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}}

    @staticmethod
    def _decode_frame(method: str, raw) -> Dict[str, Any]:
        try:
            response = json.loads(raw)
        except ValueError as e:
            raise RPCError(method, f"Invalid JSON response: {e}") from e
        if not isinstance(response, dict):
            raise RPCError(method, f"Unexpected response frame: {response!r}")
        return response

    @staticmethod
    def _result(method: str, response: Dict[str, Any]) -> Any:
        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(method, error.get("message", "unknown error"), error.get("code"))
            raise RPCError(method, str(error))
        return response.get("result")

    def _parse(self, method: str, model, data):
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise RPCError(method, f"Malformed response: {e}") from e

    async def get_node_info(self) -> NodeInfo:
        self._node_info = self._parse("system_getNodeInfo", NodeInfo, await self.invoke("system_getNodeInfo"))
        return self._node_info

    async def get_bft_parameters(self, height: int) -> BFTParameters:
        data = await self.invoke("consensus_getBFTParameters", {"height": height})
        return self._parse("consensus_getBFTParameters", BFTParameters, data)

    async def get_chain_state(self):
        """Fresh (ChainState, active validators) snapshot."""
        node_info = await self.get_node_info()
        bft = await self.get_bft_parameters(node_info.height)
        state = ChainState(
            chain_id=node_info.chain_id,
            height=node_info.height,
            certificate_threshold=bft.certificate_threshold,
        )
        return state, bft.validators

    async def get_auth_account(self, address: str) -> AuthAccount:
        data = await self.invoke("auth_getAuthAccount", {"address": address})
        return self._parse("auth_getAuthAccount", AuthAccount, data)

    async def compute_min_fee(self, tx: Transaction) -> int:
        """Minimum fee for a signed transaction, using the node's fee per byte."""
        node_info = self._node_info or await self.get_node_info()
        min_fee_per_byte = DEFAULT_MIN_FEE_PER_BYTE
        if node_info.genesis and node_info.genesis.min_fee_per_byte is not None:
            min_fee_per_byte = node_info.genesis.min_fee_per_byte
        return compute_min_fee(tx, min_fee_per_byte, number_of_signatures=len(tx.signatures))

    async def post_transaction(self, tx: Transaction) -> str:
        try:
            result = await self.invoke("txpool_postTransaction", {"transaction": tx.get_bytes().hex()})
        except RPCError as e:
            raise SubmissionError(e.reason) from e
        if not isinstance(result, dict) or "transactionId" not in result:
            raise SubmissionError(f"unexpected response {result!r}")
        return result["transactionId"]

    async def authorize_chain_connector(self, enable: bool, password: Optional[str]) -> Any:
        try:
            return await self.invoke("chainConnector_authorize", {"enable": enable, "password": password})
        except RPCError as e:
            raise AuthorizationError(f"{self.name} chain connector: {e.reason}") from e


class WSChainClient(ChainClient):
    """JSON-RPC 2.0 over a WebSocket"""

    def __init__(self, name: str, session: aiohttp.ClientSession, ws):
        super().__init__(name)
        self._session = session
        self._ws = ws

    @classmethod
    async def connect(cls, name: str, url: str) -> "WSChainClient":
        session = aiohttp.ClientSession()
        try:
            ws = await session.ws_connect(url)
        except (aiohttp.ClientError, OSError, ValueError) as e:
            await session.close()
            raise ConnectivityError(f"Cannot connect to {name} node at {url}: {e}") from e
        logger.debug(f"Connected to {name} node at {url}", extra={"chain": name})
        return cls(name, session, ws)

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        request_id, request = self._request(method, params)
        try:
            await self._ws.send_json(request)
            while True:
                msg = await self._ws.receive()
                if msg.type == aiohttp.WSMsgType.TEXT:
                    response = self._decode_frame(method, msg.data)
                    # skip event notifications and stale replies
                    if response.get("id") == request_id:
                        break
                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED,
                                  aiohttp.WSMsgType.CLOSING, aiohttp.WSMsgType.ERROR):
                    raise ConnectivityError(f"{self.name} node closed the connection during {method}")
        except (aiohttp.ClientError, ConnectionError) as e:
            raise ConnectivityError(f"{self.name} node unreachable during {method}: {e}") from e
        return self._result(method, response)

    async def close(self):
        await self._ws.close()
        await self._session.close()


def get_ipc_rpc_socket_path(data_path: str) -> str:
    """RPC socket of a node whose data directory is ``data_path`` (``~`` allowed)."""
    root = os.path.abspath(os.path.expanduser(data_path))
    return os.path.join(root, IPC_SOCKETS_DIR, IPC_RPC_SOCKET_NAME)


class IPCChainClient(ChainClient):
    """JSON-RPC 2.0 over the node's ZeroMQ RPC socket, one frame per message"""

    def __init__(self, name: str, context: zmq.asyncio.Context, socket):
        super().__init__(name)
        self._context = context
        self._socket = socket

    @classmethod
    async def connect(cls, name: str, data_path: str) -> "IPCChainClient":
        socket_path = get_ipc_rpc_socket_path(data_path)
        # zmq connects lazily and never reports a missing socket
        if not os.path.exists(socket_path):
            raise ConnectivityError(f"Cannot connect to {name} node: no IPC socket at {socket_path}")
        context = zmq.asyncio.Context()
        socket = context.socket(zmq.DEALER)
        socket.setsockopt(zmq.LINGER, 0)
        try:
            socket.connect(f"ipc://{socket_path}")
        except zmq.ZMQError as e:
            socket.close()
            context.term()
            raise ConnectivityError(f"Cannot connect to {name} node at {socket_path}: {e}") from e
        logger.debug(f"Connected to {name} node at {socket_path}", extra={"chain": name})
        return cls(name, context, socket)

    async def invoke(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        request_id, request = self._request(method, params)
        try:
            await self._socket.send(json.dumps(request).encode("utf-8"))
            while True:
                response = self._decode_frame(method, await self._socket.recv())
                if response.get("id") == request_id:
                    break
        except zmq.ZMQError as e:
            raise ConnectivityError(f"{self.name} node unreachable during {method}: {e}") from e
        return self._result(method, response)

    async def close(self):
        self._socket.close()
        self._context.term()


async def create_client(name: str, chain: ChainSettings) -> ChainClient:
    if chain.ipc:
        return await IPCChainClient.connect(name, chain.ipc)
    if chain.ws:
        return await WSChainClient.connect(name, chain.ws)
    raise ConnectivityError(f"Neither IPC path nor WS URL is configured for the {name}")


async def create_mainchain_client(settings: Settings) -> ChainClient:
    return await create_client("mainchain", settings.mainchain)


async def create_sidechain_client(settings: Settings) -> ChainClient:
    return await create_client("sidechain", settings.sidechain)
