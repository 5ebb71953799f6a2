from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..context import BootMode
from .actions import RunCommand, TargetAction
from .chroot import chroot_cmd

logger = logging.getLogger(__name__)

GRUB_CFG = "/boot/grub/grub.cfg"


def grub_efi_install(efi_directory: str, bootloader_id: str) -> RunCommand:
    return RunCommand(
        (
            "grub-install",
            "--target=x86_64-efi",
            f"--efi-directory={efi_directory}",
            f"--bootloader-id={bootloader_id}",
        )
    )


def grub_mkconfig() -> RunCommand:
    return RunCommand(("grub-mkconfig", "-o", GRUB_CFG))


@dataclass(frozen=True)
class BiosBootloaderPostStep:
    """Legacy boot-sector install against the whole disk.

    Runs after the in-root sequence, driven from the host: the target is the
    raw device rather than a filesystem of the new root.
    """

    disk: str

    def describe(self) -> str:
        return f"GRUB to MBR on {self.disk} (BIOS mode)"

    def run(self, target_root: str, *, dry_run: bool = False) -> None:
        logger.info("Installing %s", self.describe())
        chroot_cmd(target_root, ["grub-install", "--target=i386-pc", self.disk], dry_run=dry_run)
        chroot_cmd(target_root, ["grub-mkconfig", "-o", GRUB_CFG], dry_run=dry_run)


@dataclass(frozen=True)
class BootloaderPlan:
    in_root: Tuple[TargetAction, ...]
    post_step: Optional[BiosBootloaderPostStep]


def plan_bootloader(
    mode: BootMode,
    *,
    disk: str,
    efi_directory: str = "/boot/efi",
    bootloader_id: str = "GRUB",
) -> BootloaderPlan:
    """Split bootloader work into the in-root part and the whole-disk post-step.

    UEFI installs entirely inside the new root. BIOS has nothing useful to do
    in-root; everything happens in the post-step.
    """

    if mode is BootMode.UEFI:
        return BootloaderPlan(
            in_root=(grub_efi_install(efi_directory, bootloader_id), grub_mkconfig()),
            post_step=None,
        )
    return BootloaderPlan(in_root=(), post_step=BiosBootloaderPostStep(disk=disk))
