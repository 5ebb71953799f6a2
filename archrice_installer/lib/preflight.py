from __future__ import annotations

import logging
import os
import stat

from ..errors import DeviceNotFoundError, InsufficientPrivilegeError
from .block import list_block_devices
from .command import CommandError, run_cmd

logger = logging.getLogger(__name__)


def check_privilege(*, dry_run: bool = False) -> None:
    euid = os.geteuid()
    if euid == 0:
        return
    if dry_run:
        logger.warning("Not running as root (euid=%s); continuing because of dry-run", euid)
        return
    raise InsufficientPrivilegeError(euid)


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def check_device_present(device: str) -> None:
    if is_block_device(device):
        return
    listing = list_block_devices()
    logger.error("Disk not found: %s\n%s", device, listing.rstrip())
    raise DeviceNotFoundError(device, listing)


def sync_clock() -> bool:
    """Enable NTP on the live system. Best-effort: failures are only logged."""

    try:
        run_cmd(["timedatectl", "set-ntp", "true"])
        return True
    except CommandError as e:
        logger.warning("Non-fatal: clock sync failed: %s", e)
        return False
