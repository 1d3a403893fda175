"""
Runs sidechain registration, then mainchain registration.

The order is fixed. The first failed flow ends the run with exit status 1;
nothing is retried and the remaining flow is not started.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from klayr_reg.config.settings import Settings
from klayr_reg.errors.exceptions import RegistrationError
from klayr_reg.log_utils import get_logger
from klayr_reg.registration.mainchain import KeystoreLoader, register_mainchain
from klayr_reg.registration.result import FlowResult
from klayr_reg.registration.sidechain import register_sidechain
from klayr_reg.rpc.client import ChainClient, create_mainchain_client, create_sidechain_client
from klayr_reg.wallet.keystore import load_keystore

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

logger = get_logger(__name__)


@dataclass
class RunReport:
    results: List[FlowResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        if self.error or any(not r.succeeded for r in self.results):
            return EXIT_FAILURE
        return EXIT_SUCCESS


async def register_chains(
    settings: Settings,
    mainchain_client: ChainClient,
    sidechain_client: ChainClient,
    keystore_loader: KeystoreLoader = load_keystore,
) -> RunReport:
    report = RunReport()

    result = await register_sidechain(settings, mainchain_client, sidechain_client)
    report.results.append(result)
    if not result.succeeded:
        return report

    result = await register_mainchain(settings, mainchain_client, sidechain_client, keystore_loader)
    report.results.append(result)
    return report


async def run_registration(settings: Settings, keystore_loader: KeystoreLoader = load_keystore) -> RunReport:
    """Open both node connections, run both flows and close the connections."""
    mainchain_client = sidechain_client = None
    try:
        try:
            mainchain_client = await create_mainchain_client(settings)
            sidechain_client = await create_sidechain_client(settings)
        except RegistrationError as e:
            logger.error(f"Connection error: {e.message}", extra={"error_code": e.code})
            return RunReport(error=e.message)
        return await register_chains(settings, mainchain_client, sidechain_client, keystore_loader)
    finally:
        for client in (mainchain_client, sidechain_client):
            if client is not None:
                await client.close()
