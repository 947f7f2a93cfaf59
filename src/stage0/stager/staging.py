# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/stager/staging.py

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List

from stage0.config.models import StageConfig
from stage0.errors import StagingError

log = logging.getLogger("stage0")


@dataclass(frozen=True)
class StagedFile:
    source: Path
    destination: Path
    copied: bool          # False when the destination already existed


@dataclass(frozen=True)
class StagedArtifacts:
    second_stage: StagedFile
    keys: List[StagedFile]

    @property
    def files(self) -> List[StagedFile]:
        return [self.second_stage, *self.keys]


def stage_file(source: Path, destination: Path) -> StagedFile:
    """
    Copy *source* to *destination* unless the destination already exists.

    First write wins: an existing destination is never overwritten, even if
    the source has changed since. The copy lands in a temporary sibling and is
    renamed into place, so an interrupted copy never leaves a partial file
    that a later run would then keep.
    """
    if destination.exists():
        log.info("[stage] %s already present, skipping", destination)
        return StagedFile(source, destination, copied=False)

    if not source.is_file():
        raise StagingError(f"Source artifact not found on the export: {source}")

    tmp = destination.with_name(f".{destination.name}.stage0-tmp")
    try:
        shutil.copy2(source, tmp)
        os.replace(tmp, destination)
    except OSError as e:
        try:
            tmp.unlink()
        except FileNotFoundError:
            pass
        raise StagingError(f"Failed to copy {source} -> {destination}: {e}") from e

    log.info("[stage] Copied %s -> %s", source, destination)
    return StagedFile(source, destination, copied=True)


def stage_artifacts(config: StageConfig) -> StagedArtifacts:
    """Stage the fixed artifact set: second-stage script, then key files."""
    second = stage_file(
        config.source_for(config.second_stage),
        config.second_stage_destination(),
    )
    keys = [
        stage_file(config.source_for(rel), dest)
        for rel, dest in zip(config.key_files, config.key_destinations())
    ]
    return StagedArtifacts(second_stage=second, keys=keys)
