from __future__ import annotations

import logging
from typing import List

from ..context import InstallationContext, InstallPhase
from ..errors import ConfigError
from ..lib.actions import (
    CreateUser,
    EnableLocales,
    EnableService,
    GrantSudo,
    InstallPackages,
    SetHostname,
    SetPassword,
    SetTimezone,
    TargetAction,
    apply_actions,
)
from ..lib.bootloader import BootloaderPlan, plan_bootloader
from ..lib.chroot import ChrootRunner
from ..lib.command import CommandError
from ..lib.env import PATHS

logger = logging.getLogger(__name__)

SUDO_GROUP = "wheel"


def build_target_actions(ctx: InstallationContext) -> List[TargetAction]:
    actions: List[TargetAction] = [
        SetTimezone(ctx.timezone),
        EnableLocales(tuple(ctx.locales), ctx.lang, ctx.keymap),
        SetHostname(ctx.hostname),
        SetPassword("root", ctx.password),
        CreateUser(ctx.username, groups=(SUDO_GROUP,)),
        SetPassword(ctx.username, ctx.password),
        GrantSudo(SUDO_GROUP),
    ]
    actions.extend(EnableService(unit) for unit in ctx.services)
    return actions


def build_optional_actions(ctx: InstallationContext) -> List[TargetAction]:
    """Quality-of-life extras; failures never abort the run."""

    actions: List[TargetAction] = []
    if ctx.extra_packages:
        actions.append(InstallPackages(tuple(ctx.extra_packages), fatal=False))
    actions.extend(EnableService(unit, fatal=False) for unit in ctx.timers)
    return actions


def bootloader_plan(ctx: InstallationContext) -> BootloaderPlan:
    return plan_bootloader(
        ctx.require_boot_mode(),
        disk=ctx.disk.device,
        efi_directory=PATHS.esp_mountpoint,
        bootloader_id=ctx.bootloader_id,
    )


class ConfigureTargetStep:
    step_id = "50_configure_target"
    reaches = InstallPhase.CONFIGURED

    def run(self, ctx: InstallationContext) -> InstallationContext:
        logger.info("Configuring %s from inside the new root", ctx.target_root)

        boot = bootloader_plan(ctx)
        target = ChrootRunner(ctx.target_root, dry_run=ctx.dry_run)

        apply_actions(target, [*build_target_actions(ctx), *boot.in_root])
        skipped = apply_actions(target, build_optional_actions(ctx))

        if boot.post_step is not None:
            try:
                boot.post_step.run(ctx.target_root, dry_run=ctx.dry_run)
            except CommandError as e:
                label = boot.post_step.describe()
                raise ConfigError(f"{label} failed: {e}", action=label) from e

        ctx.decisions["bootloader"] = {
            "boot_mode": ctx.require_boot_mode().value,
            "post_step": boot.post_step is not None,
        }
        if skipped:
            ctx.decisions["skipped_optional"] = skipped
        logger.info("Target configuration done")
        return ctx
