# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/stage0/cli/app.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError

from stage0.config.loader import load_config
from stage0.config.models import StageConfig, StageParameters
from stage0.errors import MetadataError, StageError
from stage0.execution.runner import CommandRunner
from stage0.host.factory import detect_host
from stage0.logging.log import init_logging
from stage0.observers.dispatcher import EventBus
from stage0.observers.logger import LoggerObserver
from stage0.stager.pipeline import StagePipeline
from stage0.stager.record import read_record


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Stage-0 host bootstrap stager")


def _load(config: Optional[Path]) -> StageConfig:
    try:
        return load_config(config)
    except (OSError, yaml.YAMLError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        raise typer.BadParameter(f"Invalid config: {e}", param_hint="--config")


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def run(
    server: str = typer.Option(..., "--server", help="NFS server address"),
    share: str = typer.Option(..., "--share", help="Exported path on the server, e.g. /srv/bootstrap"),
    persist_mount: bool = typer.Option(False, "--persist-mount", help="Leave the export attached after the run"),
    run_second_stage: bool = typer.Option(False, "--run-second-stage", help="Run the staged second-stage script"),
    force: bool = typer.Option(False, "--force", help="Run even if Stage-0 already completed"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config overriding the built-in layout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output on the console"),
):
    """
    Stage the second-stage script and SSH public keys from the NFS export.
    """
    try:
        params = StageParameters(
            server=server,
            share=share,
            persist_mount=persist_mount,
            run_second_stage=run_second_stage,
            force=force,
        )
    except ValidationError as e:
        raise typer.BadParameter(str(e))

    cfg = _load(config)
    logger, run_id = init_logging(verbose=verbose)
    bus = EventBus(observers=[LoggerObserver(logger)])
    host = detect_host(cfg, CommandRunner(logger=logger, label=cfg.platform))

    pipeline = StagePipeline(cfg, host, bus=bus, run_id=run_id)
    try:
        result = pipeline.run(params)
    except StageError as e:
        typer.secho(f"Stage-0 failed [{e.step}]: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if cfg.propagate_second_stage_status and params.run_second_stage:
        code = result.second_stage_exit_code
        if code != 0:
            raise typer.Exit(code=1 if code is None else code)


@app.command()
def status(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config overriding the built-in layout"),
):
    """
    Show whether Stage-0 completed on this host and print its record.
    """
    cfg = _load(config)
    completed = cfg.marker_path.exists()
    typer.echo(f"marker: {cfg.marker_path} ({'present' if completed else 'absent'})")

    if not cfg.record_path.exists():
        typer.echo(f"record: {cfg.record_path} (absent)")
        return
    try:
        record = read_record(cfg.record_path)
    except MetadataError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    typer.echo(f"record: {cfg.record_path}")
    typer.echo(json.dumps(record.model_dump(), indent=2))


if __name__ == "__main__":
    app()
