from .mainchain import register_mainchain
from .orchestrator import RunReport, register_chains, run_registration
from .sidechain import register_sidechain

__all__ = [
    "RunReport",
    "register_chains",
    "register_mainchain",
    "register_sidechain",
    "run_registration",
]
