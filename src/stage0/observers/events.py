# src/stage0/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single stager invocation
    host: str         # hostname being staged

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(run_id: str, host: str) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "run_id": run_id,
        "host": host,
    }


# ---------------------------------------------------------------------
# Pipeline lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RunStarted(BaseEvent):
    server: str
    share: str
    force: bool

@dataclass(frozen=True)
class StateReached(BaseEvent):
    state: str
    detail: Optional[str] = None

@dataclass(frozen=True)
class FileStaged(BaseEvent):
    source: str
    destination: str
    copied: bool

@dataclass(frozen=True)
class RunFailed(BaseEvent):
    state: str        # last state reached before the failure
    step: str
    error: str

@dataclass(frozen=True)
class RunSummary(BaseEvent):
    status: str       # "DONE" | "ABORTED"
    copied: int
    skipped: int
    second_stage_exit_code: Optional[int] = None
