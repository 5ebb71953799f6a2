from __future__ import annotations

import logging
import posixpath
from pathlib import Path

from .command import run_cmd
from .layout import MountPlan

logger = logging.getLogger(__name__)


def _fstab_mountpoint(target_root: str, mountpoint: str) -> str:
    rel = posixpath.relpath(mountpoint, target_root)
    return "/" if rel == "." else "/" + rel


def missing_mounts(fstab_text: str, mounts: MountPlan, target_root: str) -> list[str]:
    """Mount points of the plan that have no entry in ``fstab_text``."""

    present = set()
    for line in fstab_text.splitlines():
        fields = line.split()
        if len(fields) >= 2 and not fields[0].startswith("#"):
            present.add(fields[1])
    wanted = [_fstab_mountpoint(target_root, m.mountpoint) for m in mounts]
    return [mp for mp in wanted if mp not in present]


def write_fstab(target_root: str, mounts: MountPlan, *, dry_run: bool = False) -> str:
    """Generate the table from what is mounted now and append it to etc/fstab.

    Returns the generated text.
    """

    r = run_cmd(["genfstab", "-U", target_root], dry_run=dry_run)
    generated = r.stdout
    fstab_path = Path(target_root) / "etc/fstab"

    if dry_run:
        logger.info("Would append generated table to %s", str(fstab_path))
        return generated

    missing = missing_mounts(generated, mounts, target_root)
    if missing:
        raise RuntimeError(f"genfstab output lacks entries for: {', '.join(missing)}")

    fstab_path.parent.mkdir(parents=True, exist_ok=True)
    with fstab_path.open("a", encoding="utf-8") as f:
        f.write(generated if generated.endswith("\n") else generated + "\n")
    logger.info("Wrote %s", str(fstab_path))
    return generated
