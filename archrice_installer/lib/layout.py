from __future__ import annotations

import enum
import posixpath
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from ..errors import InsufficientSpaceError, PlanningError

# Offsets are whole MiB; the first MiB stays free so the ESP starts aligned.
BLOCK_SIZE_BYTES = 1024 * 1024
ALIGNMENT_GAP_MIB = 1


class PartitionRole(enum.Enum):
    ESP = "esp"
    SWAP = "swap"
    ROOT = "root"


@dataclass(frozen=True)
class PartitionEntry:
    number: int
    role: PartitionRole
    name: str
    start_mib: int
    end_mib: int
    filesystem: str  # parted fs-type hint: fat32|linux-swap|ext4
    flags: Tuple[str, ...] = ()
    to_end: bool = False

    @property
    def size_mib(self) -> int:
        return self.end_mib - self.start_mib


@dataclass(frozen=True)
class PartitionPlan:
    device_size_mib: int
    entries: Tuple[PartitionEntry, ...]

    def entry(self, role: PartitionRole) -> PartitionEntry:
        for e in self.entries:
            if e.role is role:
                return e
        raise KeyError(role)

    def __iter__(self):
        return iter(self.entries)


@dataclass(frozen=True)
class MountEntry:
    device: str
    mountpoint: str
    fstype: str


@dataclass(frozen=True)
class MountPlan:
    """Mounts in the order they must happen (parents first)."""

    entries: Tuple[MountEntry, ...]

    def __iter__(self):
        return iter(self.entries)


def bytes_to_mib(size_bytes: int) -> int:
    return size_bytes // BLOCK_SIZE_BYTES


def plan_layout(
    device_size_mib: int,
    efi_size_mib: int,
    swap_size_mib: int,
    root_fs: str = "ext4",
) -> PartitionPlan:
    """Compute the ESP, swap, root layout for a whole disk.

    ESP starts after the alignment gap, swap follows it, root takes the
    remainder of the device. Pure: identical inputs give identical plans.
    """

    if device_size_mib <= 0:
        raise PlanningError(f"Device size must be positive, got {device_size_mib} MiB")
    if efi_size_mib <= 0 or swap_size_mib <= 0:
        raise PlanningError(
            f"EFI and swap sizes must be positive, got efi={efi_size_mib} swap={swap_size_mib}"
        )

    usable = device_size_mib - ALIGNMENT_GAP_MIB
    if efi_size_mib + swap_size_mib >= usable:
        raise InsufficientSpaceError(
            device_size_mib, ALIGNMENT_GAP_MIB + efi_size_mib + swap_size_mib + 1
        )

    esp_start = ALIGNMENT_GAP_MIB
    esp_end = esp_start + efi_size_mib
    swap_end = esp_end + swap_size_mib

    entries = (
        PartitionEntry(1, PartitionRole.ESP, "ESP", esp_start, esp_end, "fat32", flags=("esp",)),
        PartitionEntry(2, PartitionRole.SWAP, "swap", esp_end, swap_end, "linux-swap"),
        PartitionEntry(3, PartitionRole.ROOT, "root", swap_end, device_size_mib, root_fs, to_end=True),
    )
    return PartitionPlan(device_size_mib=device_size_mib, entries=entries)


def mount_plan(
    plan: PartitionPlan,
    partitions: Mapping[PartitionRole, str],
    target_root: str,
    *,
    esp_mountpoint: str = "/boot/efi",
) -> MountPlan:
    """Derive the mounts for a plan: root first, then the ESP beneath it."""

    root = plan.entry(PartitionRole.ROOT)
    esp_dir = posixpath.join(target_root, esp_mountpoint.lstrip("/"))
    return MountPlan(
        entries=(
            MountEntry(partitions[PartitionRole.ROOT], target_root, root.filesystem),
            MountEntry(partitions[PartitionRole.ESP], esp_dir, "vfat"),
        )
    )


def partition_device(disk: str, number: int) -> str:
    # nvme/mmcblk devices use p suffix
    if disk.endswith(tuple("0123456789")):
        return f"{disk}p{number}"
    return f"{disk}{number}"


def resolve_partitions(disk: str, plan: PartitionPlan) -> dict[PartitionRole, str]:
    return {e.role: partition_device(disk, e.number) for e in plan}


def describe(plan: Optional[PartitionPlan]) -> str:
    if plan is None:
        return "<no plan>"
    return ", ".join(
        f"{e.name}={e.start_mib}-{'end' if e.to_end else e.end_mib}MiB({e.size_mib}MiB)" for e in plan
    )
