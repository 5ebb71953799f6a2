from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/mnt"
    esp_mountpoint: str = "/boot/efi"
    efivars: str = "/sys/firmware/efi/efivars"
    sys_block: str = "/sys/class/block"
    log_default: str = "/var/log/archrice-installer.log"


PATHS = Paths()
