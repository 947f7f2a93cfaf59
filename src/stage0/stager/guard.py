# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/stager/guard.py

from __future__ import annotations

import logging
import os
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from stage0.config.models import StageConfig
from stage0.errors import AlreadyCompletedError, LockError, MetadataError, PrivilegeError
from stage0.host.interface import HostPlatform

log = logging.getLogger("stage0")


def require_elevated(host: HostPlatform) -> None:
    if not host.is_elevated():
        who = "an elevated Administrator shell" if host.name == "windows" else "root (sudo)"
        raise PrivilegeError(f"Stage-0 must be run from {who}.")


def check_completion_gate(config: StageConfig, force: bool) -> None:
    """
    Refuse to run again once the completion marker exists, unless forced.
    Nothing is touched on the refusal path.
    """
    marker = config.marker_path
    if not marker.exists():
        return
    if force:
        log.warning("[gate] %s exists; continuing because --force was given", marker)
        return
    raise AlreadyCompletedError(
        f"Stage-0 already completed on this host (marker: {marker}). "
        f"Re-run with --force to stage again; the current record will be kept as "
        f"{config.previous_record_path.name}."
    )


def preserve_previous_record(config: StageConfig) -> Optional[Path]:
    """Rename an existing record into the .previous slot. Never deletes it."""
    current = config.record_path
    if not current.exists():
        return None
    previous = config.previous_record_path
    try:
        os.replace(current, previous)
    except OSError as e:
        raise MetadataError(f"Could not preserve {current} as {previous}: {e}") from e
    log.info("[gate] Previous record kept at %s", previous)
    return previous


class RunLock:
    """
    Exclusive claim on the local root for one run.

    The lock file is created with O_CREAT|O_EXCL next to the root (the root
    itself may not exist yet) and holds the owner's pid, host and start time.
    A killed run leaves the file behind; the LockError message says so.
    """

    def __init__(self, path: Path):
        self.path = path
        self._held = False

    def acquire(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            owner = ""
            try:
                owner = self.path.read_text(encoding="utf-8").strip()
            except OSError:
                pass
            raise LockError(
                f"Another Stage-0 run holds {self.path} ({owner or 'owner unknown'}). "
                f"If no run is active, delete the lock file and retry."
            ) from None
        except OSError as e:
            raise LockError(f"Cannot create lock file {self.path}: {e}") from e
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
            f.write(f"pid={os.getpid()} host={socket.gethostname()} started={ts}\n")
        self._held = True
        log.debug("[lock] Acquired %s", self.path)

    def release(self) -> None:
        if not self._held:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            log.warning("[lock] %s was removed externally", self.path)
        self._held = False
        log.debug("[lock] Released %s", self.path)

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, *exc) -> None:
        self.release()
