from __future__ import annotations

import logging

from ..context import InstallationContext, InstallPhase
from ..lib.env import PATHS
from ..lib.layout import mount_plan, resolve_partitions
from ..lib.storage import partition_format_mount

logger = logging.getLogger(__name__)


class PartitionFilesystemStep:
    step_id = "30_partition_fs"
    reaches = InstallPhase.MOUNTED

    def run(self, ctx: InstallationContext) -> InstallationContext:
        plan = ctx.partition_plan
        if plan is None:
            raise RuntimeError("No partition plan; run plan step first")

        disk = ctx.disk.device
        partitions = resolve_partitions(disk, plan)
        mounts = mount_plan(plan, partitions, ctx.target_root, esp_mountpoint=PATHS.esp_mountpoint)

        ctx.partitions = partitions
        ctx.mount_plan = mounts

        # From here on the device is being changed; cleanup has work to do.
        ctx.execution.destructive_started = True
        partition_format_mount(
            disk=disk,
            plan=plan,
            partitions=partitions,
            mounts=mounts,
            target_root=ctx.target_root,
            settle_timeout_s=ctx.settle_timeout_s,
            dry_run=ctx.dry_run,
        )

        ctx.decisions["partitions"] = {role.value: dev for role, dev in partitions.items()}
        logger.info("Done: %s", ", ".join(f"{m.device} ({m.mountpoint})" for m in mounts))
        return ctx
