# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from stage0.config.models import StageConfig
from stage0.execution.runner import CommandRunner

from .interface import HostPlatform
from .linux import LinuxHost
from .windows import WindowsHost


def detect_host(config: StageConfig, runner: CommandRunner | None = None) -> HostPlatform:
    if config.platform == "windows":
        return WindowsHost(config, runner)
    return LinuxHost(config, runner)
