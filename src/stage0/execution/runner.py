# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

Cmd = Sequence[Union[str, "os.PathLike[str]"]]


@dataclass
class CommandRunner:
    """Runs local commands, logging the command line, its output and exit code."""

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("stage0"))
    label: Optional[str] = None

    def run(
        self,
        cmd: Cmd,
        *,
        capture_output: bool = True,
        check: bool = False,
        text: bool = True,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> subprocess.CompletedProcess:
        label = self.label or "cmd"
        cmd_str = " ".join(map(str, cmd))

        # --- Log command ---
        self.logger.debug(f"[{label}] $ {cmd_str}")

        start = time.time()

        try:
            result = subprocess.run(
                [str(c) for c in cmd],
                capture_output=capture_output,
                check=check,
                text=text,
                cwd=cwd,
                env=env,
            )

        except subprocess.CalledProcessError as e:
            self.logger.debug(f"[{label}][exit {e.returncode}]")
            if e.stdout:
                self.logger.debug(f"[{label}][stdout]\n{e.stdout.rstrip()}")
            if e.stderr:
                self.logger.debug(f"[{label}][stderr]\n{e.stderr.rstrip()}")
            raise

        duration = time.time() - start

        # --- Log outputs ---
        if result.stdout:
            self.logger.debug(f"[{label}][stdout]\n{result.stdout.rstrip()}")
        if result.stderr:
            self.logger.debug(f"[{label}][stderr]\n{result.stderr.rstrip()}")
        self.logger.debug(f"[{label}][exit {result.returncode}] ({duration:.2f}s)")

        return result
