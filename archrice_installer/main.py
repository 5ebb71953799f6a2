from __future__ import annotations

import argparse
import logging
from typing import Optional

from .config import InstallConfig, build_context, load_install_config
from .context import InstallationContext
from .errors import InstallInterrupted
from .lib.env import PATHS
from .logging_utils import configure_logging
from .pipeline import PipelineResult, run_pipeline
from .steps import (
    ConfigureTargetStep,
    InstallBaseStep,
    PartitionFilesystemStep,
    PlanLayoutStep,
    PreflightStep,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_steps():
    return [
        PreflightStep(),
        PlanLayoutStep(),
        PartitionFilesystemStep(),
        InstallBaseStep(),
        ConfigureTargetStep(),
    ]


def run(
    cfg: InstallConfig,
    *,
    ctx: Optional[InstallationContext] = None,
    log_path: Optional[str] = None,
) -> PipelineResult:
    """Provision ``cfg.disk`` end to end. Cleanup has run when this returns."""

    ctx = ctx if ctx is not None else build_context(cfg)
    if log_path is not None:
        ctx.decisions["log_path"] = log_path
    logger.info("Installing to %s (target root %s, dry_run=%s)", ctx.disk.device, ctx.target_root, ctx.dry_run)

    result = run_pipeline(ctx=ctx, steps=build_steps())

    logger.info("Decisions: %s", ctx.decisions)
    return result


def exit_code(result: PipelineResult) -> int:
    if result.ok:
        return EXIT_OK
    if isinstance(result.error, InstallInterrupted):
        return EXIT_INTERRUPTED
    return EXIT_FAILED


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="archrice-installer")
    p.add_argument("--config", default=None, help="YAML file overriding the built-in install config")
    p.add_argument("--log", default=PATHS.log_default, help="Path to installer log")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running destructive ones")

    args = p.parse_args(argv)

    log_path = configure_logging(log_path=args.log)
    try:
        cfg = load_install_config(args.config, dry_run=True if args.dry_run else None)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Invalid install config: %s", e)
        return EXIT_USAGE

    result = run(cfg, log_path=log_path)
    code = exit_code(result)
    if result.ok:
        logger.info("Installation finished. Reboot when ready. Log: %s", log_path)
    else:
        logger.error("Installation failed in step %s: %s (log: %s)", result.failed_step, result.error, log_path)
    return code


if __name__ == "__main__":
    raise SystemExit(main())
