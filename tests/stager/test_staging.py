from pathlib import Path

import pytest

from stage0.errors import StagingError
from stage0.stager.layout import ensure_layout
from stage0.stager.staging import stage_artifacts, stage_file


def test_stage_file_copies_when_absent(tmp_path: Path):
    src = tmp_path / "src.txt"
    src.write_text("payload")
    dest = tmp_path / "out" / "dest.txt"
    dest.parent.mkdir()

    staged = stage_file(src, dest)

    assert staged.copied is True
    assert dest.read_text() == "payload"
    # no temp file left behind
    assert sorted(p.name for p in dest.parent.iterdir()) == ["dest.txt"]


def test_stage_file_never_overwrites(tmp_path: Path):
    src = tmp_path / "src.txt"
    src.write_text("new content on the export")
    dest = tmp_path / "dest.txt"
    dest.write_text("operator edit")

    staged = stage_file(src, dest)

    assert staged.copied is False
    assert dest.read_text() == "operator edit"


def test_existing_destination_wins_even_without_source(tmp_path: Path):
    dest = tmp_path / "dest.txt"
    dest.write_text("kept")
    staged = stage_file(tmp_path / "missing.txt", dest)
    assert staged.copied is False
    assert dest.read_text() == "kept"


def test_stage_file_missing_source_raises(tmp_path: Path):
    with pytest.raises(StagingError) as exc:
        stage_file(tmp_path / "missing.txt", tmp_path / "dest.txt")
    assert "missing.txt" in str(exc.value)
    assert not (tmp_path / "dest.txt").exists()


def test_ensure_layout_is_idempotent(config):
    created = ensure_layout(config.layout_dirs)
    assert created == config.layout_dirs
    assert all(d.is_dir() for d in config.layout_dirs)
    assert ensure_layout(config.layout_dirs) == []


def test_ensure_layout_order_independent(config):
    ensure_layout(reversed(config.layout_dirs))
    assert all(d.is_dir() for d in config.layout_dirs)


def test_stage_artifacts_fixed_set(config, export_dir: Path):
    ensure_layout(config.layout_dirs)

    staged = stage_artifacts(config)

    assert staged.second_stage.destination == config.root / "stage1.sh"
    assert [k.destination for k in staged.keys] == [config.ssh_dir / "authorized_keys.pub"]
    assert all(f.copied for f in staged.files)
    assert (config.ssh_dir / "authorized_keys.pub").read_text() == (
        export_dir / "ssh" / "authorized_keys.pub"
    ).read_text()

    # second pass: everything skipped
    again = stage_artifacts(config)
    assert not any(f.copied for f in again.files)
