# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/stager/record.py

from __future__ import annotations

import getpass
import logging
import os
import socket
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, ValidationError

from stage0.config.models import SCHEMA_VERSION, STAGE_NAME, StageConfig, StageParameters
from stage0.errors import MetadataError

from .staging import StagedArtifacts

log = logging.getLogger("stage0")


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Who/where/when of a run, captured once and passed to the recorder."""

    timestamp: str
    host: str
    user: str
    pid: int

    @classmethod
    def capture(cls) -> "EnvironmentSnapshot":
        try:
            user = getpass.getuser()
        except (KeyError, OSError):
            user = "unknown"
        return cls(
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            host=socket.gethostname(),
            user=user,
            pid=os.getpid(),
        )


class Invocation(BaseModel):
    timestamp: str
    host: str
    user: str
    pid: int


class Source(BaseModel):
    server: str
    share: str
    mount_point: str


class Artifacts(BaseModel):
    second_stage: str
    keys: List[str]


class Intent(BaseModel):
    run_second_stage: bool
    persist_mount: bool
    force: bool


class CompletionRecord(BaseModel):
    schema_version: Literal[1] = SCHEMA_VERSION
    stage: str = STAGE_NAME
    invocation: Invocation
    source: Source
    artifacts: Artifacts
    intent: Intent


def build_record(
    config: StageConfig,
    params: StageParameters,
    staged: StagedArtifacts,
    env: EnvironmentSnapshot,
) -> CompletionRecord:
    return CompletionRecord(
        invocation=Invocation(
            timestamp=env.timestamp, host=env.host, user=env.user, pid=env.pid
        ),
        source=Source(
            server=params.server, share=params.share, mount_point=config.mount_point
        ),
        artifacts=Artifacts(
            second_stage=str(staged.second_stage.destination),
            keys=[str(k.destination) for k in staged.keys],
        ),
        intent=Intent(
            run_second_stage=params.run_second_stage,
            persist_mount=params.persist_mount,
            force=params.force,
        ),
    )


def _write_durably(path: Path, data: str) -> None:
    tmp = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise


def write_record(record: CompletionRecord, path: Path) -> Path:
    try:
        _write_durably(path, record.model_dump_json(indent=2) + "\n")
    except (OSError, ValueError) as e:
        raise MetadataError(f"Failed to write completion record {path}: {e}") from e
    log.info("[record] Wrote %s", path)
    return path


def write_marker(path: Path) -> Path:
    try:
        with open(path, "wb") as f:
            os.fsync(f.fileno())
    except OSError as e:
        raise MetadataError(f"Failed to write completion marker {path}: {e}") from e
    log.info("[record] Wrote marker %s", path)
    return path


def read_record(path: Path) -> CompletionRecord:
    try:
        return CompletionRecord.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        raise MetadataError(f"Cannot read completion record {path}: {e}") from e
