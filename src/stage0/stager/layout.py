# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from stage0.errors import StagingError

log = logging.getLogger("stage0")


def ensure_layout(dirs: Iterable[Path]) -> List[Path]:
    """Create each missing directory; returns the ones that were created."""
    created = []
    for d in dirs:
        if d.is_dir():
            continue
        try:
            d.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(f"Cannot create directory {d}: {e}", step="layout") from e
        log.info("[layout] Created %s", d)
        created.append(d)
    return created
