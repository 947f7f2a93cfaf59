# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/errors.py
from __future__ import annotations

from typing import Optional


class StageError(RuntimeError):
    """Base class for Stage-0 failures. Every subclass aborts the run."""

    step: str = "stage0"

    def __init__(self, message: str, *, step: Optional[str] = None):
        super().__init__(message)
        if step:
            self.step = step


class PrivilegeError(StageError):
    """Raised when the process is not running as administrator/root."""

    step = "privilege"


class AlreadyCompletedError(StageError):
    """Raised when the completion marker exists and --force was not given."""

    step = "gate"


class LockError(StageError):
    """Raised when another run holds the run lock."""

    step = "lock"


class CapabilityError(StageError):
    """Raised when the NFS client capability cannot be queried or installed."""

    step = "capability"


class MountError(StageError):
    """Raised when the export cannot be attached or detached."""

    step = "mount"


class StagingError(StageError):
    """Raised when the layout cannot be created or an artifact cannot be copied."""

    step = "staging"


class MetadataError(StageError):
    """Raised when the completion record or marker cannot be written or read."""

    step = "metadata"
