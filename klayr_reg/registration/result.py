"""
Tagged step results.

Flow steps report ``Ok`` on success, ``Fatal`` for errors that end the flow
and ``Warn`` for isolated failures that are logged but do not change the
flow's outcome.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Fatal:
    reason: str
    error: Optional[Exception] = None


@dataclass(frozen=True)
class Warn:
    reason: str


StepResult = Union[Ok, Fatal, Warn]


@dataclass
class FlowResult:
    """Terminal outcome of one registration flow"""
    direction: str
    outcome: Union[Ok, Fatal]
    warnings: List[Warn] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, Ok)

    @property
    def transaction_id(self) -> Optional[str]:
        return self.outcome.value if self.succeeded else None
