from __future__ import annotations

import types
from pathlib import Path

import pytest

from stage0.config.models import StageConfig
from stage0.errors import CapabilityError, MountError


class FakeHost:
    """
    Stands in for WindowsHost/LinuxHost. Records every call; the mount point
    is simulated with a flag while the export content sits in a plain dir.
    """

    name = "linux"

    def __init__(self, elevated=True, installed=True, mounted=False,
                 install_fails=False, mount_fails=False):
        self.elevated = elevated
        self.installed = installed
        self.mounted = mounted
        self.install_fails = install_fails
        self.mount_fails = mount_fails
        self.calls = []

    def is_elevated(self):
        self.calls.append("is_elevated")
        return self.elevated

    def capability_installed(self):
        self.calls.append("capability_installed")
        return self.installed

    def install_capability(self):
        self.calls.append("install_capability")
        if self.install_fails:
            raise CapabilityError("feature install failed")
        self.installed = True

    def is_mounted(self):
        self.calls.append("is_mounted")
        return self.mounted

    def mount(self, export):
        self.calls.append(("mount", export))
        if self.mount_fails:
            raise MountError(f"cannot reach {export}")
        self.mounted = True

    def unmount(self):
        self.calls.append("unmount")
        self.mounted = False


class FakeRunner:
    """Captures commands passed to CommandRunner.run and returns canned results."""

    def __init__(self, responses=None):
        self.cmds = []
        self.envs = []
        self._responses = responses or {}

    def run(self, cmd, **kw):
        cmd = [str(c) for c in cmd]
        self.cmds.append(cmd)
        self.envs.append(kw.get("env"))
        out, err, rc = self._responses.get(tuple(cmd), ("", "", 0))
        return types.SimpleNamespace(args=cmd, returncode=rc, stdout=out, stderr=err)


@pytest.fixture
def export_dir(tmp_path: Path) -> Path:
    export = tmp_path / "export"
    (export / "ssh").mkdir(parents=True)
    (export / "stage1.sh").write_text("#!/bin/sh\necho stage1\n")
    (export / "ssh" / "authorized_keys.pub").write_text(
        "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIFakeKey ops@bootstrap\n"
    )
    return export


@pytest.fixture
def config(tmp_path: Path, export_dir: Path) -> StageConfig:
    return StageConfig(
        platform="linux",
        root=tmp_path / "bootstrap",
        mount_point=str(export_dir),
        second_stage="stage1.sh",
        key_files=["ssh/authorized_keys.pub"],
    )


@pytest.fixture
def fake_host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def make_host():
    return FakeHost


@pytest.fixture
def make_runner():
    return FakeRunner
