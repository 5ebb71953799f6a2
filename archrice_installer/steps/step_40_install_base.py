from __future__ import annotations

import logging

from ..context import InstallationContext, InstallPhase
from ..errors import InstallError
from ..lib.command import CommandError
from ..lib.fstab import write_fstab
from ..lib.pkg import pacstrap

logger = logging.getLogger(__name__)


class InstallBaseStep:
    step_id = "40_install_base"
    reaches = InstallPhase.BASE_INSTALLED

    def run(self, ctx: InstallationContext) -> InstallationContext:
        if ctx.mount_plan is None:
            raise RuntimeError("No mount plan; run partition step first")

        try:
            pacstrap(ctx.target_root, ctx.packages, dry_run=ctx.dry_run)
        except CommandError as e:
            raise InstallError(f"pacstrap failed: {e}") from e

        try:
            write_fstab(ctx.target_root, ctx.mount_plan, dry_run=ctx.dry_run)
        except (CommandError, OSError, RuntimeError) as e:
            raise InstallError(f"Generating fstab failed: {e}") from e

        logger.info("Pacstrap done and fstab generated")
        return ctx
