from __future__ import annotations

import logging
import shutil
from typing import Iterable, Optional

from ..errors import MissingToolError

logger = logging.getLogger(__name__)

# Host-side tools the run invokes directly.
REQUIRED_TOOLS = (
    "parted",
    "partprobe",
    "udevadm",
    "mkfs.fat",
    "mkfs.ext4",
    "mkswap",
    "mount",
    "umount",
    "swapon",
    "swapoff",
    "lsblk",
    "blockdev",
    "timedatectl",
    "ping",
    "pacstrap",
    "genfstab",
    "arch-chroot",
)


def find_missing_tool(names: Iterable[str]) -> Optional[str]:
    """Return the first command that cannot be resolved on PATH, if any."""

    for name in names:
        if shutil.which(name) is None:
            return name
    return None


def require_tools(names: Iterable[str] = REQUIRED_TOOLS) -> None:
    missing = find_missing_tool(names)
    if missing is not None:
        raise MissingToolError(missing)
    logger.info("All required commands are available")
