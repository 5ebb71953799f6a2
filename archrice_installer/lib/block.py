from __future__ import annotations

import logging
import os
from pathlib import Path

from .command import run_cmd
from .env import PATHS

logger = logging.getLogger(__name__)

SECTOR_BYTES = 512


def list_block_devices() -> str:
    """Device listing for diagnostics (best-effort)."""

    r = run_cmd(["lsblk"], check=False)
    return r.stdout or r.stderr or ""


def read_device_size(dev: str, *, sys_block: str = PATHS.sys_block) -> int:
    """Return the size of a whole-disk block device in bytes."""

    name = os.path.basename(os.path.realpath(dev))
    size_file = Path(sys_block) / name / "size"
    try:
        sectors = int(size_file.read_text(encoding="utf-8").strip())
        return sectors * SECTOR_BYTES
    except (OSError, ValueError):
        logger.debug("No usable %s; asking blockdev", str(size_file))

    r = run_cmd(["blockdev", "--getsize64", dev])
    return int(r.stdout.strip())

