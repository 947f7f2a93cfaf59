# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/host/windows.py

from __future__ import annotations

import ctypes
import os
import subprocess

from stage0.config.models import StageConfig
from stage0.errors import CapabilityError, MountError
from stage0.execution.runner import CommandRunner


class WindowsHost:
    """
    Windows Server backend:
      - elevation via shell32.IsUserAnAdmin
      - NFS client via Get-WindowsFeature / Install-WindowsFeature
      - anonymous NFS mount on a drive letter via mount.exe / umount.exe
    """

    name = "windows"

    def __init__(self, config: StageConfig, runner: CommandRunner | None = None):
        self.config = config
        self.runner = runner or CommandRunner(label="windows")

    def _powershell(self, script: str) -> subprocess.CompletedProcess:
        return self.runner.run(
            ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script]
        )

    def is_elevated(self) -> bool:
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False

    def capability_installed(self) -> bool:
        feature = self.config.windows_feature
        cp = self._powershell(f"(Get-WindowsFeature -Name {feature}).Installed")
        if cp.returncode != 0:
            raise CapabilityError(
                f"Could not query Windows feature '{feature}': {cp.stderr.strip()}"
            )
        return cp.stdout.strip().lower() == "true"

    def install_capability(self) -> None:
        feature = self.config.windows_feature
        cp = self._powershell(
            f"Install-WindowsFeature -Name {feature} -ErrorAction Stop | Out-Null"
        )
        if cp.returncode != 0:
            raise CapabilityError(
                f"Failed to install Windows feature '{feature}': {cp.stderr.strip()}"
            )

    def is_mounted(self) -> bool:
        return os.path.exists(self.config.source_root)

    def mount(self, export: str) -> None:
        # The Windows NFS client has no read-only option; the export is read-only
        cp = self.runner.run(
            ["mount.exe", "-o", "anon,nolock", export, self.config.mount_point]
        )
        if cp.returncode != 0:
            raise MountError(
                f"Failed to mount {export} at {self.config.mount_point}: "
                f"{(cp.stderr or cp.stdout).strip()}"
            )

    def unmount(self) -> None:
        cp = self.runner.run(["umount.exe", "-f", self.config.mount_point])
        if cp.returncode != 0:
            raise MountError(
                f"Failed to unmount {self.config.mount_point}: "
                f"{(cp.stderr or cp.stdout).strip()}"
            )
