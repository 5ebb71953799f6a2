from __future__ import annotations

import logging

from ..context import InstallationContext, InstallPhase
from ..lib.layout import describe, plan_layout

logger = logging.getLogger(__name__)


class PlanLayoutStep:
    step_id = "20_plan_layout"
    reaches = InstallPhase.PLANNED

    def run(self, ctx: InstallationContext) -> InstallationContext:
        sizes = ctx.sizes
        plan = plan_layout(
            ctx.disk.size_mib,
            sizes.efi_size_mib,
            sizes.swap_size_mib,
            root_fs=sizes.root_fs,
        )
        ctx.partition_plan = plan
        ctx.decisions["layout"] = describe(plan)
        logger.info("Partition plan: %s", describe(plan))
        return ctx
