from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def pacstrap(target_root: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    """Materialize the base system into a mounted target root."""

    if not packages:
        raise ValueError("pacstrap needs at least one package")
    run_cmd(["pacstrap", "-K", target_root, *packages], dry_run=dry_run)
    logger.info("Base system installed at %s (%d packages)", target_root, len(packages))

