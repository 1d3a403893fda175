from typing import Awaitable, Callable, List

from klayr_reg.errors.exceptions import RegistrationError
from klayr_reg.log_utils import ContextualLogger
from klayr_reg.registration.result import Fatal, FlowResult, Ok, Warn


async def run_flow(
    direction: str,
    label: str,
    handler: Callable[[List[Warn]], Awaitable[str]],
    log: ContextualLogger,
) -> FlowResult:
    """
    Run one registration handler and convert its outcome into a ``FlowResult``.

    Every ``RegistrationError`` is caught here, once, and becomes ``Fatal``.
    """
    warnings: List[Warn] = []
    log.info(f"Registering {label}...")
    try:
        tx_id = await handler(warnings)
    except RegistrationError as e:
        log.error(f"Register {label} error: {e.message}", extra={"error_code": e.code})
        return FlowResult(direction, Fatal(e.message, e), warnings)
    except Exception as e:
        log.error(f"Register {label} error: {e}", exc_info=True)
        return FlowResult(direction, Fatal(str(e), e), warnings)
    log.info(f"{label.capitalize()} registration transaction accepted", extra={"tx_id": tx_id})
    return FlowResult(direction, Ok(tx_id), warnings)
