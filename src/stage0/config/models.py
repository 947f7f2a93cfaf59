# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/config/models.py

import re
import sys
from pathlib import Path
from typing import Dict, List, Literal

from pydantic import BaseModel, Field, field_validator

Platform = Literal["windows", "linux"]

STAGE_NAME = "stage0"
SCHEMA_VERSION = 1

_DRIVE_RE = re.compile(r"^[A-Za-z]:$")


def current_platform() -> Platform:
    return "windows" if sys.platform.startswith("win") else "linux"


class StageConfig(BaseModel):
    """
    Fixed local layout and remote-relative artifact paths for one host.

    Everything the stager touches is derived from ``root`` and
    ``mount_point`` so tests can point the whole run at a scratch directory.
    """

    platform: Platform
    root: Path
    mount_point: str                     # drive letter ("Z:") or directory

    # remote-relative artifact paths (relative to the export root)
    second_stage: str
    key_files: List[str] = Field(default_factory=lambda: ["ssh/authorized_keys.pub"])

    # NFS client capability
    windows_feature: str = "NFS-Client"
    nfs_packages: Dict[str, str] = Field(
        default_factory=lambda: {
            "apt-get": "nfs-common",
            "dnf": "nfs-utils",
            "yum": "nfs-utils",
        }
    )

    record_name: str = "stage0.json"
    marker_name: str = "stage0.complete"

    use_lock: bool = True
    propagate_second_stage_status: bool = False

    @field_validator("key_files")
    @classmethod
    def _at_least_one_key(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("at least one key file must be staged")
        names = [Path(k).name for k in v]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            # every key lands flat in ssh/, so names must be unique
            raise ValueError(f"key files share a file name: {', '.join(dupes)}")
        return v

    # Derived paths
    @property
    def ssh_dir(self) -> Path:
        return self.root / "ssh"

    @property
    def metadata_dir(self) -> Path:
        return self.root / "metadata"

    @property
    def log_dir(self) -> Path:
        return self.metadata_dir / "logs"

    @property
    def record_path(self) -> Path:
        return self.metadata_dir / self.record_name

    @property
    def previous_record_path(self) -> Path:
        return self.metadata_dir / f"{self.record_name}.previous"

    @property
    def marker_path(self) -> Path:
        return self.metadata_dir / self.marker_name

    @property
    def lock_path(self) -> Path:
        return self.root.parent / f"{self.root.name}.lock"

    @property
    def layout_dirs(self) -> List[Path]:
        return [self.root, self.ssh_dir, self.metadata_dir, self.log_dir]

    @property
    def source_root(self) -> Path:
        # "Z:" alone is drive-relative; the export root is "Z:\"
        if _DRIVE_RE.match(self.mount_point):
            return Path(self.mount_point + "\\")
        return Path(self.mount_point)

    def source_for(self, relative: str) -> Path:
        return self.source_root / relative

    def second_stage_destination(self) -> Path:
        return self.root / Path(self.second_stage).name

    def key_destinations(self) -> List[Path]:
        return [self.ssh_dir / Path(k).name for k in self.key_files]


def platform_defaults(platform: Platform) -> dict:
    """Built-in defaults, before any YAML overrides are merged in."""
    if platform == "windows":
        return {
            "platform": "windows",
            "root": r"C:\bootstrap",
            "mount_point": "Z:",
            "second_stage": "stage1.ps1",
        }
    return {
        "platform": "linux",
        "root": "/opt/bootstrap",
        "mount_point": "/mnt/stage0",
        "second_stage": "stage1.sh",
    }


class StageParameters(BaseModel):
    """Run-scoped invocation parameters supplied by the operator."""

    server: str
    share: str
    persist_mount: bool = False
    run_second_stage: bool = False
    force: bool = False

    @field_validator("server")
    @classmethod
    def _server_is_host(cls, v: str) -> str:
        v = v.strip()
        if not v or any(c.isspace() for c in v) or "/" in v or "\\" in v:
            raise ValueError(f"invalid server address: {v!r}")
        return v

    @field_validator("share")
    @classmethod
    def _share_is_absolute(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("/") or any(c.isspace() for c in v):
            raise ValueError(f"export path must be absolute with no whitespace: {v!r}")
        return v

    @property
    def export(self) -> str:
        return f"{self.server}:{self.share}"
