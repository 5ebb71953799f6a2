from __future__ import annotations

import logging
import signal
from typing import Any, Dict, Optional

from .context import InstallationContext
from .errors import InstallInterrupted
from .lib.command import run_cmd

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM, signal.SIGHUP)


def _raise_interrupted(signum, frame):
    raise InstallInterrupted(signum)


class CleanupGuard:
    """Release target mounts and swap on every way out of the run.

    Used as a context manager around the pipeline. While active, the
    handled signals raise ``InstallInterrupted`` so interruption unwinds
    through the same exit path as a failure. ``run()`` acts at most once.
    """

    def __init__(self, ctx: InstallationContext, *, handle_signals: bool = True):
        self.ctx = ctx
        self.handle_signals = handle_signals
        self.ran = False
        self._previous: Dict[int, Any] = {}

    def __enter__(self) -> "CleanupGuard":
        if self.handle_signals:
            for sig in HANDLED_SIGNALS:
                self._previous[sig] = signal.signal(sig, _raise_interrupted)
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        # A second Ctrl-C must not cut the cleanup short.
        for sig in self._previous:
            signal.signal(sig, signal.SIG_IGN)
        try:
            self.run()
        finally:
            self._restore_signals()
        return None

    def _restore_signals(self) -> None:
        while self._previous:
            sig, handler = self._previous.popitem()
            signal.signal(sig, handler)

    def run(self) -> bool:
        """Unmount the target tree and disable swap. Never raises.

        Returns True if this call did the cleanup, False if it already ran.
        """

        if self.ran:
            return False
        self.ran = True

        if not self.ctx.execution.destructive_started:
            logger.info("Cleanup: nothing was mounted, nothing to do")
            return True

        target_root = self.ctx.target_root
        dry_run = self.ctx.dry_run
        logger.info("Cleanup: unmounting %s and disabling swap", target_root)
        for argv in (["umount", "-R", target_root], ["swapoff", "-a"]):
            try:
                r = run_cmd(argv, check=False, dry_run=dry_run)
                if r.returncode != 0:
                    logger.info("Cleanup: %s exited %s (nothing to release?)", argv[0], r.returncode)
            except Exception:
                logger.exception("Cleanup: %s failed", argv[0])
        return True
