from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional

from ..errors import FormatError, MountError, PartitionError
from .command import CommandError, run_cmd
from .layout import MountPlan, PartitionPlan, PartitionRole

logger = logging.getLogger(__name__)

MKFS_BY_FS = {
    "ext4": ["mkfs.ext4", "-F"],
}


def preclean(target_root: str, *, dry_run: bool = False) -> None:
    """Release leftovers from an earlier attempt; nothing mounted is fine."""

    run_cmd(["umount", "-R", target_root], check=False, dry_run=dry_run)
    run_cmd(["swapoff", "-a"], check=False, dry_run=dry_run)


def write_partition_table(disk: str, *, dry_run: bool = False) -> None:
    try:
        run_cmd(["parted", "-s", disk, "mklabel", "gpt"], dry_run=dry_run)
    except CommandError as e:
        raise PartitionError(f"Could not write GPT to {disk}: {e}", device=disk) from e


def create_partitions(disk: str, plan: PartitionPlan, *, dry_run: bool = False) -> None:
    for entry in plan:
        end = "100%" if entry.to_end else f"{entry.end_mib}MiB"
        argv = ["parted", "-s", disk, "mkpart", entry.name, entry.filesystem, f"{entry.start_mib}MiB", end]
        try:
            run_cmd(argv, dry_run=dry_run)
            for flag in entry.flags:
                run_cmd(["parted", "-s", disk, "set", str(entry.number), flag, "on"], dry_run=dry_run)
        except CommandError as e:
            raise PartitionError(f"Could not create {entry.name} partition on {disk}: {e}", device=disk) from e


def _node_exists(path: str) -> bool:
    return os.path.exists(path)


def settle_partitions(
    disk: str,
    devices: Iterable[str],
    *,
    timeout_s: float = 10.0,
    poll_s: float = 0.25,
    exists: Optional[Callable[[str], bool]] = None,
    dry_run: bool = False,
) -> None:
    """Make the kernel re-read the table and wait for the partition nodes.

    partprobe/udevadm failures are tolerated; missing nodes after
    ``timeout_s`` are not.
    """

    run_cmd(["partprobe", disk], check=False, dry_run=dry_run)
    run_cmd(["udevadm", "settle", f"--timeout={int(timeout_s)}"], check=False, dry_run=dry_run)
    if dry_run:
        return

    exists = exists or _node_exists
    pending = list(devices)
    deadline = time.monotonic() + timeout_s
    while True:
        pending = [d for d in pending if not exists(d)]
        if not pending:
            return
        if time.monotonic() >= deadline:
            raise PartitionError(
                f"Partition device nodes did not appear within {timeout_s:g}s: {', '.join(pending)}",
                device=disk,
            )
        time.sleep(poll_s)


def format_partitions(
    plan: PartitionPlan,
    partitions: Mapping[PartitionRole, str],
    *,
    dry_run: bool = False,
) -> None:
    for entry in plan:
        dev = partitions[entry.role]
        if entry.role is PartitionRole.ESP:
            argv = ["mkfs.fat", "-F32", dev]
        elif entry.role is PartitionRole.SWAP:
            argv = ["mkswap", dev]
        else:
            mkfs = MKFS_BY_FS.get(entry.filesystem)
            if mkfs is None:
                raise FormatError(f"Unsupported root filesystem: {entry.filesystem}", device=dev)
            argv = [*mkfs, dev]
        try:
            run_cmd(argv, dry_run=dry_run)
        except CommandError as e:
            raise FormatError(f"Formatting {entry.name} ({dev}) failed: {e}", device=dev) from e


def activate_and_mount(mounts: MountPlan, swap_device: str, *, dry_run: bool = False) -> None:
    try:
        run_cmd(["swapon", swap_device], dry_run=dry_run)
    except CommandError as e:
        raise MountError(f"Could not activate swap on {swap_device}: {e}", device=swap_device) from e

    for m in mounts:
        # Created after the parent mount so it lands on the new filesystem.
        if dry_run:
            logger.info("Would create %s", m.mountpoint)
        else:
            try:
                Path(m.mountpoint).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MountError(f"Could not create mount point {m.mountpoint}: {e}", device=m.device) from e
        try:
            run_cmd(["mount", m.device, m.mountpoint], dry_run=dry_run)
        except CommandError as e:
            raise MountError(f"Could not mount {m.device} at {m.mountpoint}: {e}", device=m.device) from e


def partition_format_mount(
    *,
    disk: str,
    plan: PartitionPlan,
    partitions: Mapping[PartitionRole, str],
    mounts: MountPlan,
    target_root: str,
    settle_timeout_s: float = 10.0,
    dry_run: bool = False,
) -> None:
    """Apply a plan to the disk: table, partitions, settle, format, mount.

    The order is fixed; each stage assumes the previous one completed.
    """

    logger.info("Cleaning old mounts (if they exist) under %s", target_root)
    preclean(target_root, dry_run=dry_run)

    logger.info("Wiping and recreating GPT on %s", disk)
    write_partition_table(disk, dry_run=dry_run)
    create_partitions(disk, plan, dry_run=dry_run)

    settle_partitions(disk, [partitions[e.role] for e in plan], timeout_s=settle_timeout_s, dry_run=dry_run)

    logger.info("Formatting partitions")
    format_partitions(plan, partitions, dry_run=dry_run)

    logger.info("Mounting")
    activate_and_mount(mounts, partitions[PartitionRole.SWAP], dry_run=dry_run)
