from __future__ import annotations

from pathlib import Path

from ..context import BootMode
from .env import PATHS


def detect_boot_mode(efivars: str = PATHS.efivars) -> BootMode:
    """Detect the firmware interface of the *currently running* environment.

    The installer targets the machine it boots on, so the live environment's
    firmware decides which bootloader path applies.
    """

    if Path(efivars).is_dir():
        return BootMode.UEFI
    return BootMode.BIOS
