from typing import Optional

from klayr_reg.log_utils import ContextualLogger
from klayr_reg.registration.negotiator import FinalTx
from klayr_reg.registration.result import Ok, StepResult, Warn
from klayr_reg.rpc.client import ChainClient


async def submit_transaction(client: ChainClient, final: FinalTx, log: ContextualLogger) -> str:
    """Post to the transaction pool. Acceptance does not mean inclusion; nothing waits for a block."""
    log.debug(
        f"Posting {final.transaction.command} transaction to the {client.name} pool",
        extra={"chain": client.name, "transaction": final.transaction.to_json()}
    )
    tx_id = await client.post_transaction(final.transaction)
    log.debug(
        f"Sent {final.transaction.command} transaction to the {client.name} pool. Tx ID: {tx_id}",
        extra={"tx_id": tx_id, "chain": client.name}
    )
    return tx_id


async def authorize_connector(
    client: ChainClient,
    password: Optional[str],
    log: ContextualLogger,
) -> StepResult:
    """Enable the chain connector plugin. Never fails the flow; problems come back as ``Warn``."""
    try:
        response = await client.authorize_chain_connector(True, password)
    except Exception as e:
        reason = f"Error at authorizing {client.name} chain connector plugin: {e}"
        log.warning(reason, extra={"chain": client.name})
        return Warn(reason)
    log.debug(f"Authorize {client.name} chain connector completed, response: {response}", extra={"chain": client.name})
    return Ok(response)
