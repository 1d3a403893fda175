"""
Two-phase transaction fee negotiation.

The minimum fee depends on the size of the signed transaction, so a
provisional transaction is signed first purely to measure it. The final
transaction is a fresh value carrying the resolved fee and a new signature;
the provisional one is discarded.

    BUILD_PROVISIONAL -> SIGN_PROVISIONAL -> ESTIMATE_FEE -> RESOLVE_FEE -> SIGN_FINAL -> READY
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from klayr_reg.blockchain.transaction import Transaction
from klayr_reg.config.config import MODULE_INTEROPERABILITY
from klayr_reg.errors.exceptions import FeeNegotiationError, RegistrationError, SigningError
from klayr_reg.log_utils import get_logger, log_step
from klayr_reg.rpc.client import ChainClient
from klayr_reg.wallet.relayer import RelayerIdentity

logger = get_logger(__name__)


class NegotiationState(Enum):
    BUILD_PROVISIONAL = "build_provisional"
    SIGN_PROVISIONAL = "sign_provisional"
    ESTIMATE_FEE = "estimate_fee"
    RESOLVE_FEE = "resolve_fee"
    SIGN_FINAL = "sign_final"
    READY = "ready"


@dataclass(frozen=True)
class ProvisionalTx:
    transaction: Transaction


@dataclass(frozen=True)
class FinalTx:
    transaction: Transaction
    estimated_fee: Optional[int]
    trace: Tuple[NegotiationState, ...]

    @property
    def fee(self) -> int:
        return self.transaction.fee


def build_provisional(
    command: str,
    params: bytes,
    nonce: int,
    sender_public_key: bytes,
    provisional_fee: int,
) -> Transaction:
    return Transaction(
        module=MODULE_INTEROPERABILITY,
        command=command,
        nonce=nonce,
        fee=provisional_fee,
        sender_public_key=sender_public_key,
        params=params,
        signatures=(),
    )


def _sign(tx: Transaction, chain_id: bytes, relayer: RelayerIdentity) -> Transaction:
    try:
        return tx.sign(chain_id, relayer.private_key)
    except RegistrationError:
        raise
    except Exception as e:
        raise SigningError(f"Failed to sign {tx.command} transaction: {e}") from e


def sign_provisional(tx: Transaction, chain_id: bytes, relayer: RelayerIdentity) -> ProvisionalTx:
    return ProvisionalTx(transaction=_sign(tx, chain_id, relayer))


@log_step(logger, "estimate_fee")
async def estimate_fee(client: ChainClient, provisional: ProvisionalTx) -> int:
    try:
        return await client.compute_min_fee(provisional.transaction)
    except RegistrationError as e:
        raise FeeNegotiationError(f"Minimum fee estimation failed: {e.message}") from e


def resolve_fee(estimated_fee: Optional[int], fee_override: Optional[int], fee_buffer: int = 0) -> int:
    """An explicit override wins verbatim; otherwise the estimate plus ``fee_buffer``."""
    if fee_override is not None:
        return fee_override
    if estimated_fee is None:
        raise FeeNegotiationError("No fee estimate and no fee override")
    return estimated_fee + fee_buffer


def sign_final(provisional: ProvisionalTx, fee: int, chain_id: bytes, relayer: RelayerIdentity) -> Transaction:
    return _sign(provisional.transaction.with_fee(fee), chain_id, relayer)


async def negotiate_transaction(
    client: ChainClient,
    *,
    command: str,
    params: bytes,
    nonce: int,
    relayer: RelayerIdentity,
    chain_id: bytes,
    provisional_fee: int,
    fee_override: Optional[int] = None,
    fee_buffer: int = 0,
) -> FinalTx:
    """Run the fee protocol against ``client``'s chain and return the transaction to submit."""
    trace = [NegotiationState.BUILD_PROVISIONAL]
    unsigned = build_provisional(command, params, nonce, relayer.public_key, provisional_fee)

    trace.append(NegotiationState.SIGN_PROVISIONAL)
    provisional = sign_provisional(unsigned, chain_id, relayer)

    estimated = None
    if fee_override is None:
        trace.append(NegotiationState.ESTIMATE_FEE)
        estimated = await estimate_fee(client, provisional)
        logger.debug(f"Estimated minimum fee for {command}: {estimated}", extra={"fee": estimated})

    trace.append(NegotiationState.RESOLVE_FEE)
    fee = resolve_fee(estimated, fee_override, fee_buffer)

    trace.append(NegotiationState.SIGN_FINAL)
    final = sign_final(provisional, fee, chain_id, relayer)

    trace.append(NegotiationState.READY)
    return FinalTx(transaction=final, estimated_fee=estimated, trace=tuple(trace))
