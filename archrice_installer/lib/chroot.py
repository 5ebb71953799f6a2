from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def chroot_cmd(
    target_root: str,
    argv: Sequence[str],
    *,
    check: bool = True,
    input_text: Optional[str] = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command inside target root.

    arch-chroot sets up /dev, /proc, /sys and resolv.conf for the duration
    of the command.
    """

    return run_cmd(["arch-chroot", target_root, *argv], check=check, input_text=input_text, dry_run=dry_run)


class ChrootRunner:
    """Execution context of the new root: commands and files inside it."""

    def __init__(self, target_root: str, *, dry_run: bool = False):
        self.target_root = target_root
        self.dry_run = dry_run

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        input_text: Optional[str] = None,
    ) -> CmdResult:
        return chroot_cmd(self.target_root, argv, check=check, input_text=input_text, dry_run=self.dry_run)

    def path(self, rel: str) -> Path:
        return Path(self.target_root) / rel.lstrip("/")

    def write_file(self, rel: str, contents: str) -> None:
        p = self.path(rel)
        if self.dry_run:
            logger.info("Would write %s", str(p))
            return
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(contents, encoding="utf-8")

    def edit_file(self, rel: str, transform: Callable[[str], str]) -> bool:
        """Rewrite a file in place; returns True if its contents changed."""

        p = self.path(rel)
        if self.dry_run:
            logger.info("Would edit %s", str(p))
            return False
        before = p.read_text(encoding="utf-8")
        after = transform(before)
        if after == before:
            return False
        p.write_text(after, encoding="utf-8")
        return True
