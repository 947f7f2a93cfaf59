# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Protocol


class HostPlatform(Protocol):
    """
    The OS-specific operations the stager drives as black boxes.

    Query methods return plain booleans; mutating methods raise
    CapabilityError / MountError on failure.
    """

    name: str

    def is_elevated(self) -> bool: ...

    def capability_installed(self) -> bool: ...

    def install_capability(self) -> None: ...

    def is_mounted(self) -> bool: ...

    def mount(self, export: str) -> None: ...

    def unmount(self) -> None: ...
