# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/host/linux.py

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from stage0.config.models import StageConfig
from stage0.errors import CapabilityError, MountError
from stage0.execution.runner import CommandRunner

log = logging.getLogger("stage0")

# mount helpers usually live in sbin, which is not always on PATH
_SBIN = ("/sbin", "/usr/sbin", "/usr/local/sbin")


def _search_path() -> str:
    return os.pathsep.join([os.environ.get("PATH", ""), *_SBIN])


class LinuxHost:
    """
    Linux backend:
      - elevation via euid 0
      - NFS client = presence of the mount.nfs helper, installed with the
        first package manager found (apt-get, dnf, yum)
      - read-only NFS mount on a directory
    """

    name = "linux"

    def __init__(self, config: StageConfig, runner: CommandRunner | None = None):
        self.config = config
        self.runner = runner or CommandRunner(label="linux")

    def is_elevated(self) -> bool:
        return os.geteuid() == 0

    def capability_installed(self) -> bool:
        return shutil.which("mount.nfs", path=_search_path()) is not None

    def install_capability(self) -> None:
        for manager, package in self.config.nfs_packages.items():
            if shutil.which(manager, path=_search_path()) is None:
                continue
            log.info("[capability] Installing %s with %s", package, manager)
            env = dict(os.environ, DEBIAN_FRONTEND="noninteractive")
            cp = self.runner.run([manager, "install", "-y", package], env=env)
            if cp.returncode != 0:
                raise CapabilityError(
                    f"{manager} failed to install {package} (exit {cp.returncode}): "
                    f"{cp.stderr.strip()}"
                )
            return
        raise CapabilityError(
            "No supported package manager found to install the NFS client "
            f"(tried: {', '.join(self.config.nfs_packages)})"
        )

    def is_mounted(self) -> bool:
        return os.path.ismount(self.config.mount_point)

    def mount(self, export: str) -> None:
        target = Path(self.config.mount_point)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MountError(f"Cannot create mount point {target}: {e}") from e
        cp = self.runner.run(
            ["mount", "-t", "nfs", "-o", "ro,nolock", export, str(target)]
        )
        if cp.returncode != 0:
            raise MountError(
                f"Failed to mount {export} at {target}: {cp.stderr.strip()}"
            )

    def unmount(self) -> None:
        cp = self.runner.run(["umount", self.config.mount_point])
        if cp.returncode != 0:
            raise MountError(
                f"Failed to unmount {self.config.mount_point}: {cp.stderr.strip()}"
            )
