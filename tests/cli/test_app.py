import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from stage0.cli import app as app_mod
from stage0.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger("stage0")
    handlers, propagate = list(logger.handlers), logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.propagate = propagate


@pytest.fixture
def cfg_file(tmp_path: Path, export_dir: Path) -> Path:
    f = tmp_path / "stage0.yaml"
    f.write_text(
        f"platform: linux\n"
        f"root: {tmp_path / 'bootstrap'}\n"
        f"mount_point: {export_dir}\n"
    )
    return f


@pytest.fixture
def host(monkeypatch, fake_host):
    monkeypatch.setattr(app_mod, "detect_host", lambda cfg, runner=None: fake_host)
    return fake_host


def _run(cfg_file, *extra):
    return runner.invoke(
        app,
        ["run", "--server", "nfs.example.net", "--share", "/srv/bootstrap", "--config", str(cfg_file), *extra],
    )


def test_run_then_refuse_then_force(cfg_file, host, tmp_path: Path):
    first = _run(cfg_file)
    assert first.exit_code == 0, first.output
    assert (tmp_path / "bootstrap" / "metadata" / "stage0.complete").exists()
    assert host.mounted is False

    second = _run(cfg_file)
    assert second.exit_code == 1
    assert "--force" in second.output

    third = _run(cfg_file, "--force", "--persist-mount")
    assert third.exit_code == 0, third.output
    assert (tmp_path / "bootstrap" / "metadata" / "stage0.json.previous").exists()
    assert host.mounted is True


def test_run_without_privilege(cfg_file, host, tmp_path: Path):
    host.elevated = False
    result = _run(cfg_file)
    assert result.exit_code == 1
    assert "privilege" in result.output
    assert not (tmp_path / "bootstrap").exists()


def test_run_rejects_relative_share(cfg_file, host):
    result = runner.invoke(
        app, ["run", "--server", "nfs.example.net", "--share", "srv", "--config", str(cfg_file)]
    )
    assert result.exit_code == 2
    assert host.calls == []


def test_run_rejects_bad_config(tmp_path: Path, host):
    bad = tmp_path / "bad.yaml"
    bad.write_text("platform: solaris\n")
    result = _run(bad)
    assert result.exit_code == 2
    assert host.calls == []


def test_second_stage_status_propagation(cfg_file, host, monkeypatch):
    cfg_file.write_text(cfg_file.read_text() + "propagate_second_stage_status: true\n")
    monkeypatch.setattr(app_mod, "StagePipeline", _pipeline_with(lambda script: 4))

    result = _run(cfg_file, "--run-second-stage")
    assert result.exit_code == 4


def test_second_stage_status_ignored_by_default(cfg_file, host, monkeypatch):
    monkeypatch.setattr(app_mod, "StagePipeline", _pipeline_with(lambda script: 4))
    result = _run(cfg_file, "--run-second-stage")
    assert result.exit_code == 0


def _pipeline_with(invoke):
    from stage0.stager.pipeline import StagePipeline

    def factory(*a, **kw):
        return StagePipeline(*a, invoke=invoke, **kw)
    return factory


def test_status(cfg_file, host):
    result = runner.invoke(app, ["status", "--config", str(cfg_file)])
    assert result.exit_code == 0
    assert "(absent)" in result.output

    assert _run(cfg_file).exit_code == 0
    result = runner.invoke(app, ["status", "--config", str(cfg_file)])
    assert result.exit_code == 0
    assert "(present)" in result.output
    doc = json.loads(result.output[result.output.index("{"):])
    assert doc["source"]["server"] == "nfs.example.net"
