# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

log = logging.getLogger("stage0")


def second_stage_command(script: Path) -> List[str]:
    suffix = script.suffix.lower()
    if suffix == ".ps1":
        return [
            "powershell.exe",
            "-NoProfile",
            "-ExecutionPolicy",
            "Bypass",
            "-File",
            str(script),
        ]
    if suffix == ".sh":
        return ["/bin/sh", str(script)]
    return [str(script)]


def run_second_stage(script: Path) -> Optional[int]:
    """
    Run the staged second stage with no arguments, inheriting this process's
    environment and privilege. Output goes straight to the console.

    Returns the child's exit status, or None if it could not be started.
    """
    cmd = second_stage_command(script)
    log.info("[invoke] $ %s", " ".join(cmd))
    try:
        cp = subprocess.run(cmd, check=False)
    except OSError as e:
        log.error("[invoke] Could not start %s: %s", script, e)
        return None
    level = logging.INFO if cp.returncode == 0 else logging.WARNING
    log.log(level, "[invoke] Second stage exited with status %d", cp.returncode)
    return cp.returncode
