# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

from stage0.errors import CapabilityError
from stage0.host.interface import HostPlatform

log = logging.getLogger("stage0")


def ensure_capability(host: HostPlatform) -> bool:
    """
    Make sure the NFS client is present. Returns True if it had to be installed.
    A reboot the platform may want afterwards is not handled here.
    """
    try:
        if host.capability_installed():
            log.info("[capability] NFS client already present")
            return False
        log.info("[capability] NFS client missing, installing...")
        host.install_capability()
    except OSError as e:
        raise CapabilityError(f"NFS client check/install could not run: {e}") from e

    if not host.capability_installed():
        raise CapabilityError("NFS client still missing after installation")
    log.info("[capability] NFS client installed")
    return True
