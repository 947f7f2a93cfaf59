from pathlib import Path, PureWindowsPath

import pytest
from pydantic import ValidationError

from stage0.config.models import StageConfig, StageParameters


def test_parameters_export_and_defaults():
    p = StageParameters(server="nfs.example.net", share="/srv/bootstrap")
    assert p.export == "nfs.example.net:/srv/bootstrap"
    assert (p.persist_mount, p.run_second_stage, p.force) == (False, False, False)


@pytest.mark.parametrize("server", ["", "   ", "nfs host", "nfs/x", r"\\nfs"])
def test_parameters_reject_bad_server(server):
    with pytest.raises(ValidationError):
        StageParameters(server=server, share="/srv/bootstrap")


@pytest.mark.parametrize("share", ["", "srv/bootstrap", "/srv/boot strap"])
def test_parameters_reject_bad_share(share):
    with pytest.raises(ValidationError):
        StageParameters(server="10.0.0.5", share=share)


def test_layout_paths(tmp_path: Path):
    cfg = StageConfig(
        platform="linux",
        root=tmp_path / "bootstrap",
        mount_point="/mnt/stage0",
        second_stage="bin/stage1.sh",
    )
    assert cfg.layout_dirs == [
        tmp_path / "bootstrap",
        tmp_path / "bootstrap" / "ssh",
        tmp_path / "bootstrap" / "metadata",
        tmp_path / "bootstrap" / "metadata" / "logs",
    ]
    assert cfg.second_stage_destination() == tmp_path / "bootstrap" / "stage1.sh"
    assert cfg.previous_record_path.name == "stage0.json.previous"
    assert cfg.lock_path == tmp_path / "bootstrap.lock"
    assert cfg.source_for("bin/stage1.sh") == Path("/mnt/stage0/bin/stage1.sh")


def test_drive_letter_source_root_is_drive_root():
    cfg = StageConfig(
        platform="windows",
        root=r"C:\bootstrap",
        mount_point="Z:",
        second_stage="stage1.ps1",
    )
    assert PureWindowsPath(str(cfg.source_root)) == PureWindowsPath("Z:\\")


def test_key_files_must_have_distinct_names(tmp_path: Path):
    with pytest.raises(ValidationError) as exc:
        StageConfig(
            platform="linux",
            root=tmp_path / "bootstrap",
            mount_point="/mnt/stage0",
            second_stage="stage1.sh",
            key_files=["ssh/authorized_keys.pub", "ops/authorized_keys.pub"],
        )
    assert "authorized_keys.pub" in str(exc.value)


def test_distinct_key_files_get_distinct_destinations(tmp_path: Path):
    cfg = StageConfig(
        platform="linux",
        root=tmp_path / "bootstrap",
        mount_point="/mnt/stage0",
        second_stage="stage1.sh",
        key_files=["ssh/ops.pub", "ci/ci.pub"],
    )
    assert len(set(cfg.key_destinations())) == 2
