from __future__ import annotations

import dataclasses
import logging

from ..context import InstallationContext, InstallPhase
from ..errors import DeviceSizeError
from ..lib.block import read_device_size
from ..lib.command import CommandError
from ..lib.firmware import detect_boot_mode
from ..lib.net import check_network
from ..lib.preflight import check_device_present, check_privilege, sync_clock
from ..lib.probe import REQUIRED_TOOLS, require_tools

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"
    reaches = InstallPhase.VALIDATED

    def run(self, ctx: InstallationContext) -> InstallationContext:
        logger.info("Running pre-checks")

        # Tools first: nothing else is worth checking without them.
        require_tools(REQUIRED_TOOLS)
        check_privilege(dry_run=ctx.dry_run)

        device = ctx.disk.device
        check_device_present(device)
        try:
            size_bytes = read_device_size(device)
        except (CommandError, ValueError) as e:
            raise DeviceSizeError(device, str(e)) from e
        ctx.disk = dataclasses.replace(ctx.disk, size_bytes=size_bytes)
        logger.info("Disk %s: %d MiB", device, ctx.disk.size_mib)

        ctx.record_boot_mode(detect_boot_mode())
        logger.info("Boot mode: %s", ctx.boot_mode.value)

        check_network(ctx.probe_host)
        ctx.decisions["clock_synced"] = sync_clock()
        return ctx
