"""
Register the sidechain on the mainchain.

The sidechain's validator set and certificate threshold go into a
registerSidechain transaction that the relayer submits to the mainchain.
"""

from typing import List

from klayr_reg.config.config import (
    COMMAND_REGISTER_SIDECHAIN,
    REGISTER_SIDECHAIN_FEE_BUFFER,
    REGISTER_SIDECHAIN_PROVISIONAL_FEE,
)
from klayr_reg.config.settings import Settings
from klayr_reg.log_utils import ContextualLogger, get_logger
from klayr_reg.registration.flow import run_flow
from klayr_reg.registration.message import build_sidechain_registration_params
from klayr_reg.registration.negotiator import negotiate_transaction
from klayr_reg.registration.result import FlowResult, Warn
from klayr_reg.registration.submission import authorize_connector, submit_transaction
from klayr_reg.registration.validators import resolve_sidechain_validators
from klayr_reg.rpc.client import ChainClient
from klayr_reg.wallet.relayer import RelayerIdentity

DIRECTION = "register-sidechain"

logger = get_logger(__name__)


async def _register_sidechain(
    settings: Settings,
    mainchain_client: ChainClient,
    sidechain_client: ChainClient,
    log: ContextualLogger,
    warnings: List[Warn],
) -> str:
    sidechain_state, sidechain_validators = await sidechain_client.get_chain_state()
    mainchain_info = await mainchain_client.get_node_info()

    params = build_sidechain_registration_params(
        chain_id=sidechain_state.chain_id,
        name=settings.side_name,
        sidechain_validators=resolve_sidechain_validators(sidechain_validators),
        sidechain_certificate_threshold=sidechain_state.certificate_threshold,
    )

    relayer = RelayerIdentity.from_phrase(settings.mainchain.relayer_phrase, settings.mainchain.derivation_path)
    account = await mainchain_client.get_auth_account(relayer.address)

    # the mainchain charges a chain registration fee on top of the size-based minimum
    final = await negotiate_transaction(
        mainchain_client,
        command=COMMAND_REGISTER_SIDECHAIN,
        params=params.encode(),
        nonce=account.nonce,
        relayer=relayer,
        chain_id=mainchain_info.chain_id,
        provisional_fee=REGISTER_SIDECHAIN_PROVISIONAL_FEE,
        fee_override=settings.register_sidechain_fee,
        fee_buffer=REGISTER_SIDECHAIN_FEE_BUFFER,
    )
    log.debug(f"Sidechain registration transaction on mainchain fee: {final.fee}", extra={"fee": final.fee})

    tx_id = await submit_transaction(mainchain_client, final, log)

    if settings.authorize_cc:
        result = await authorize_connector(sidechain_client, settings.sidechain.cc_password, log)
        if isinstance(result, Warn):
            warnings.append(result)
    return tx_id


async def register_sidechain(
    settings: Settings,
    mainchain_client: ChainClient,
    sidechain_client: ChainClient,
) -> FlowResult:
    log = logger.with_context(direction=DIRECTION)

    async def handler(warnings):
        return await _register_sidechain(settings, mainchain_client, sidechain_client, log, warnings)

    return await run_flow(DIRECTION, "sidechain", handler, log)
