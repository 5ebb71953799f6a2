"""Installation context shared by all steps.

One ``InstallationContext`` is built at startup and passed by reference to
each step. Steps extend it as they learn things (device size, boot mode,
partition devices, mount plan); nothing here outlives the process.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .lib.layout import MountPlan, PartitionPlan, PartitionRole, bytes_to_mib


class BootMode(enum.Enum):
    UEFI = "UEFI"
    BIOS = "BIOS"


class InstallPhase(enum.Enum):
    START = "start"
    VALIDATED = "validated"
    PLANNED = "planned"
    MOUNTED = "mounted"
    BASE_INSTALLED = "base_installed"
    CONFIGURED = "configured"
    SUCCESS = "success"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (InstallPhase.SUCCESS, InstallPhase.FAILED)


@dataclass(frozen=True)
class DiskSpec:
    device: str
    size_bytes: Optional[int] = None

    @property
    def size_mib(self) -> int:
        if self.size_bytes is None:
            raise RuntimeError(f"Size of {self.device} has not been read yet")
        return bytes_to_mib(self.size_bytes)


@dataclass(frozen=True)
class SizeBudget:
    efi_size_mib: int = 512
    swap_size_mib: int = 4096
    root_fs: str = "ext4"


@dataclass
class ExecutionState:
    phase: InstallPhase = InstallPhase.START
    current_step: Optional[str] = None
    completed_steps: List[str] = field(default_factory=list)
    destructive_started: bool = False
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def advance(self, phase: InstallPhase) -> None:
        if self.phase.terminal:
            raise RuntimeError(f"Run already finished ({self.phase.value})")
        self.phase = phase


@dataclass
class InstallationContext:
    disk: DiskSpec
    sizes: SizeBudget
    target_root: str
    hostname: str
    username: str
    password: str = field(repr=False)
    packages: Tuple[str, ...]
    extra_packages: Tuple[str, ...] = ()
    timezone: str = "UTC"
    locales: Tuple[str, ...] = ("en_US.UTF-8",)
    lang: str = "en_US.UTF-8"
    keymap: str = "us"
    services: Tuple[str, ...] = ("NetworkManager",)
    timers: Tuple[str, ...] = ()
    bootloader_id: str = "GRUB"
    probe_host: str = "archlinux.org"
    settle_timeout_s: float = 10.0
    dry_run: bool = False

    boot_mode: Optional[BootMode] = None
    partition_plan: Optional[PartitionPlan] = None
    partitions: Dict[PartitionRole, str] = field(default_factory=dict)
    mount_plan: Optional[MountPlan] = None
    decisions: Dict[str, Any] = field(default_factory=dict)
    execution: ExecutionState = field(default_factory=ExecutionState)

    def record_boot_mode(self, mode: BootMode) -> None:
        """Cache the detected boot mode. Later steps must only read it."""

        if self.boot_mode is not None:
            raise RuntimeError(f"Boot mode already recorded as {self.boot_mode.value}")
        self.boot_mode = mode
        self.decisions["boot_mode"] = mode.value

    def require_boot_mode(self) -> BootMode:
        if self.boot_mode is None:
            raise RuntimeError("Boot mode has not been detected; run preflight first")
        return self.boot_mode

    def require_partition(self, role: PartitionRole) -> str:
        try:
            return self.partitions[role]
        except KeyError:
            raise RuntimeError(f"No {role.value} partition resolved; run partition step first") from None
