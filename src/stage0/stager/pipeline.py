# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/stager/pipeline.py

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from stage0.config.models import StageConfig, StageParameters
from stage0.errors import MetadataError, StageError
from stage0.host.interface import HostPlatform
from stage0.logging.log import attach_file_log
from stage0.observers.dispatcher import EventBus
from stage0.observers.events import (
    FileStaged,
    RunFailed,
    RunStarted,
    RunSummary,
    StateReached,
    new_ctx,
)
from stage0.observers.jsonfile import JsonFileObserver

from .capability import ensure_capability
from .guard import RunLock, check_completion_gate, preserve_previous_record, require_elevated
from .invoker import run_second_stage
from .layout import ensure_layout
from .mount import ensure_mounted, ensure_unmounted
from .record import CompletionRecord, EnvironmentSnapshot, build_record, write_marker, write_record
from .staging import StagedArtifacts, stage_artifacts

log = logging.getLogger("stage0")


class PipelineState(str, Enum):
    NOT_STARTED = "NotStarted"
    PRIVILEGE_CHECKED = "PrivilegeChecked"
    GATE_CHECKED = "GateChecked"
    CAPABILITY_ENSURED = "CapabilityEnsured"
    MOUNTED = "Mounted"
    LAYOUT_ENSURED = "LayoutEnsured"
    STAGED = "Staged"
    RECORD_WRITTEN = "RecordWritten"
    MARKER_WRITTEN = "MarkerWritten"
    INVOKED = "Invoked"
    UNMOUNTED = "Unmounted"
    DONE = "Done"
    ABORTED = "Aborted"


@dataclass
class PipelineResult:
    state: PipelineState = PipelineState.NOT_STARTED
    staged: Optional[StagedArtifacts] = None
    record: Optional[CompletionRecord] = None
    previous_record: Optional[Path] = None
    second_stage_exit_code: Optional[int] = None
    unmounted: bool = False
    log_path: Optional[Path] = None


class StagePipeline:
    """
    The Stage-0 run, strictly in order:

      privilege -> lock + completion gate -> NFS client -> mount -> layout
      -> stage artifacts -> record -> marker -> (second stage) -> (unmount)

    Any StageError aborts the run on the spot: later steps, including the
    unmount, are not attempted. Only the run lock is released.
    """

    def __init__(
        self,
        config: StageConfig,
        host: HostPlatform,
        *,
        bus: Optional[EventBus] = None,
        env: Optional[EnvironmentSnapshot] = None,
        run_id: Optional[str] = None,
        log_to_file: bool = True,
        invoke: Callable[[Path], Optional[int]] = run_second_stage,
    ):
        self.config = config
        self.host = host
        self.bus = bus or EventBus()
        self.env = env
        self.run_id = run_id or str(uuid.uuid4())
        self.log_to_file = log_to_file
        self.invoke = invoke
        self.result = PipelineResult()
        self._ctx: dict = {}

    # ------------------ helpers ------------------

    def _reach(self, state: PipelineState, detail: Optional[str] = None) -> None:
        self.result.state = state
        log.debug("[pipeline] -> %s%s", state.value, f" ({detail})" if detail else "")
        self.bus.emit(StateReached(**self._ctx, state=state.value, detail=detail))

    def _attach_run_logs(self) -> Optional[logging.FileHandler]:
        if not self.log_to_file:
            return None
        log_dir = self.config.log_dir
        try:
            events = JsonFileObserver(log_dir / f"events-{self.run_id}.jsonl")
            handler = attach_file_log(log, log_dir, self.run_id)
        except OSError as e:
            raise MetadataError(f"Cannot open the run log under {log_dir}: {e}") from e
        self.bus.add(events)
        self.result.log_path = Path(handler.baseFilename)
        return handler

    def _summary(self, status: str) -> None:
        staged = self.result.staged.files if self.result.staged else []
        copied = sum(1 for f in staged if f.copied)
        self.bus.emit(
            RunSummary(
                **self._ctx,
                status=status,
                copied=copied,
                skipped=len(staged) - copied,
                second_stage_exit_code=self.result.second_stage_exit_code,
            )
        )

    # ------------------ public API ------------------

    def run(self, params: StageParameters) -> PipelineResult:
        cfg = self.config
        env = self.env or EnvironmentSnapshot.capture()
        self.result = PipelineResult()
        self._ctx = new_ctx(self.run_id, env.host)
        self.bus.emit(
            RunStarted(**self._ctx, server=params.server, share=params.share, force=params.force)
        )

        lock: Optional[RunLock] = None
        file_log: Optional[logging.FileHandler] = None
        try:
            require_elevated(self.host)
            self._reach(PipelineState.PRIVILEGE_CHECKED)

            if cfg.use_lock:
                lock = RunLock(cfg.lock_path)
                lock.acquire()
            check_completion_gate(cfg, params.force)
            self._reach(PipelineState.GATE_CHECKED)

            installed = ensure_capability(self.host)
            self._reach(PipelineState.CAPABILITY_ENSURED, "installed" if installed else "present")

            ensure_mounted(self.host, params.export, cfg.mount_point)
            self._reach(PipelineState.MOUNTED, params.export)

            ensure_layout(cfg.layout_dirs)
            file_log = self._attach_run_logs()
            self._reach(PipelineState.LAYOUT_ENSURED, str(cfg.root))

            staged = stage_artifacts(cfg)
            self.result.staged = staged
            for f in staged.files:
                self.bus.emit(
                    FileStaged(
                        **self._ctx,
                        source=str(f.source),
                        destination=str(f.destination),
                        copied=f.copied,
                    )
                )
            self._reach(PipelineState.STAGED)

            record = build_record(cfg, params, staged, env)
            # a failed run before this point leaves the old record in place
            self.result.previous_record = preserve_previous_record(cfg)
            write_record(record, cfg.record_path)
            self.result.record = record
            self._reach(PipelineState.RECORD_WRITTEN)

            write_marker(cfg.marker_path)
            self._reach(PipelineState.MARKER_WRITTEN)

            if params.run_second_stage:
                code = self.invoke(staged.second_stage.destination)
                self.result.second_stage_exit_code = code
                self._reach(PipelineState.INVOKED, f"exit={code}")

            if not params.persist_mount:
                self.result.unmounted = ensure_unmounted(self.host, cfg.mount_point)
                self._reach(PipelineState.UNMOUNTED)
            else:
                log.info("[mount] Leaving %s attached (--persist-mount)", cfg.mount_point)

            self._reach(PipelineState.DONE)
            log.info("Stage-0 complete on %s", env.host)
            self._summary("DONE")
            return self.result

        except Exception as e:
            step = e.step if isinstance(e, StageError) else "unexpected"
            log.error("[%s] %s", step, e)
            self.bus.emit(
                RunFailed(**self._ctx, state=self.result.state.value, step=step, error=str(e))
            )
            self.result.state = PipelineState.ABORTED
            self._summary("ABORTED")
            raise

        finally:
            if lock is not None:
                lock.release()
            if file_log is not None:
                log.removeHandler(file_log)
                file_log.close()
