"""
Register the mainchain on the sidechain.

Sidechain validators sign a message describing the mainchain validator set;
the aggregate signature goes into a registerMainchain transaction that the
relayer submits to the sidechain.
"""

from typing import Callable, List, Optional, Sequence

from klayr_reg.config.config import (
    COMMAND_REGISTER_MAINCHAIN,
    REGISTER_MAINCHAIN_PROVISIONAL_FEE,
)
from klayr_reg.config.settings import Settings
from klayr_reg.log_utils import ContextualLogger, get_logger
from klayr_reg.models.chain import KeystoreEntry
from klayr_reg.registration.aggregator import aggregate_registration_signatures
from klayr_reg.registration.flow import run_flow
from klayr_reg.registration.message import build_registration_message, encode_mainchain_reg_params
from klayr_reg.registration.negotiator import negotiate_transaction
from klayr_reg.registration.result import FlowResult, Warn
from klayr_reg.registration.submission import authorize_connector, submit_transaction
from klayr_reg.registration.validators import resolve_mainchain_validators, resolve_signers
from klayr_reg.rpc.client import ChainClient
from klayr_reg.wallet.keystore import load_keystore
from klayr_reg.wallet.relayer import RelayerIdentity

DIRECTION = "register-mainchain"

logger = get_logger(__name__)

KeystoreLoader = Callable[[Optional[str]], Sequence[KeystoreEntry]]


async def _register_mainchain(
    settings: Settings,
    mainchain_client: ChainClient,
    sidechain_client: ChainClient,
    keystore_loader: KeystoreLoader,
    log: ContextualLogger,
    warnings: List[Warn],
) -> str:
    sidechain_state, sidechain_validators = await sidechain_client.get_chain_state()
    mainchain_state, mainchain_validators = await mainchain_client.get_chain_state()

    message = build_registration_message(
        own_chain_id=sidechain_state.chain_id,
        own_name=settings.side_name,
        mainchain_validators=resolve_mainchain_validators(mainchain_validators),
        mainchain_certificate_threshold=mainchain_state.certificate_threshold,
    )

    validator_set = resolve_signers(sidechain_validators, keystore_loader(settings.keys))
    log.debug(f"Total active sidechain validators with keys: {len(validator_set.signers)}")
    aggregate = aggregate_registration_signatures(validator_set, message.message, sidechain_state.chain_id)

    relayer = RelayerIdentity.from_phrase(settings.sidechain.relayer_phrase, settings.sidechain.derivation_path)
    account = await sidechain_client.get_auth_account(relayer.address)

    final = await negotiate_transaction(
        sidechain_client,
        command=COMMAND_REGISTER_MAINCHAIN,
        params=encode_mainchain_reg_params(message, aggregate),
        nonce=account.nonce,
        relayer=relayer,
        chain_id=sidechain_state.chain_id,
        provisional_fee=REGISTER_MAINCHAIN_PROVISIONAL_FEE,
        fee_override=settings.register_mainchain_fee,
    )
    log.debug(f"Mainchain registration transaction on sidechain fee: {final.fee}", extra={"fee": final.fee})

    tx_id = await submit_transaction(sidechain_client, final, log)

    if settings.authorize_cc:
        result = await authorize_connector(mainchain_client, settings.mainchain.cc_password, log)
        if isinstance(result, Warn):
            warnings.append(result)
    return tx_id


async def register_mainchain(
    settings: Settings,
    mainchain_client: ChainClient,
    sidechain_client: ChainClient,
    keystore_loader: KeystoreLoader = load_keystore,
) -> FlowResult:
    log = logger.with_context(direction=DIRECTION)

    async def handler(warnings):
        return await _register_mainchain(
            settings, mainchain_client, sidechain_client, keystore_loader, log, warnings
        )

    return await run_flow(DIRECTION, "mainchain", handler, log)
