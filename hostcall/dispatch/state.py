"""
Dispatch lifecycle shared by `invoke` and `token create`.

    MARSHAL_ARGS -> RESOLVE_FOOTPRINT -> EXECUTE -> COMMIT -> DONE
    (any exception in any state)                 -> FAILED

Every transition is logged with the previous state. A failure moves the
tracker to FAILED and the exception propagates unchanged.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional

from ..logging import get_logger, trace_scope

log = get_logger(__name__)


class DispatchState(str, Enum):
    MARSHAL_ARGS = "MARSHAL_ARGS"
    RESOLVE_FOOTPRINT = "RESOLVE_FOOTPRINT"
    EXECUTE = "EXECUTE"
    COMMIT = "COMMIT"
    DONE = "DONE"
    FAILED = "FAILED"


_TERMINAL = (DispatchState.DONE, DispatchState.FAILED)


class DispatchTracker:
    def __init__(self, component: str, strategy: str) -> None:
        self.component = component
        self.strategy = strategy
        self.state: Optional[DispatchState] = None
        self.history: List[DispatchState] = []

    def enter(self, state: DispatchState) -> None:
        if self.state in _TERMINAL:
            raise RuntimeError(f"dispatch already finished in {self.state.value}")
        prev = self.state
        self.state = state
        self.history.append(state)
        extra = {"state": state.value, "previous": prev.value if prev else None}
        if state is DispatchState.FAILED:
            log.error("state transition", extra=extra)
        else:
            log.info("state transition", extra=extra)

    @contextmanager
    def running(self) -> Iterator["DispatchTracker"]:
        with trace_scope(component=self.component, strategy=self.strategy):
            try:
                yield self
            except BaseException:
                if self.state not in _TERMINAL:
                    self.enter(DispatchState.FAILED)
                raise
            self.enter(DispatchState.DONE)


__all__ = ["DispatchState", "DispatchTracker"]
