# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

from stage0.errors import MountError
from stage0.host.interface import HostPlatform

log = logging.getLogger("stage0")


def ensure_mounted(host: HostPlatform, export: str, mount_point: str) -> bool:
    """
    Attach *export* at the fixed mount point unless something is already
    attached there. An existing mount is not checked against *export*.
    Returns True if this call mounted it.
    """
    if host.is_mounted():
        log.info("[mount] %s already attached, reusing it", mount_point)
        return False
    log.info("[mount] Attaching %s at %s (read-only, anonymous)", export, mount_point)
    try:
        host.mount(export)
    except OSError as e:
        raise MountError(f"Mount command could not run: {e}") from e
    return True


def ensure_unmounted(host: HostPlatform, mount_point: str) -> bool:
    """Detach the mount point if attached. Returns True if this call detached it."""
    if not host.is_mounted():
        log.info("[mount] %s not attached, nothing to detach", mount_point)
        return False
    log.info("[mount] Detaching %s", mount_point)
    try:
        host.unmount()
    except OSError as e:
        raise MountError(f"Unmount command could not run: {e}") from e
    return True
