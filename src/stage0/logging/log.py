# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/stage0/logging/log.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def init_logging(
    *,
    name: str = "stage0",
    verbose: bool = False,
) -> tuple[logging.Logger, str]:
    """
    Initializes the console logger and returns a run_id observers can reuse.

    No file is created here: the log file lives under the local root, which
    only exists once the privilege check has passed (see attach_file_log).
    """
    run_id = str(uuid.uuid4())

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    # Console = INFO by default, DEBUG when --verbose is passed
    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(ch)

    logger.info("=== Stage-0 run started ===")
    logger.info(f"run_id={run_id}")

    return logger, run_id


def attach_file_log(
    logger: logging.Logger,
    base_dir: Path,
    run_id: str,
) -> logging.FileHandler:
    """
    Add a full-trace file handler under *base_dir*. The caller removes and
    closes the returned handler when the run ends.
    """
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{logger.name}-{ts}-{run_id}.log"

    # File = FULL TRACE
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    logger.addHandler(fh)

    logger.info(f"log_file={log_path}")
    return fh
