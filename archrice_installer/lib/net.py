from __future__ import annotations

import logging

from ..errors import NetworkUnavailableError
from .command import run_cmd

logger = logging.getLogger(__name__)


def is_online(host: str) -> bool:
    """One bounded reachability probe (single ping, 2s reply timeout)."""

    r = run_cmd(["ping", "-c", "1", "-W", "2", host], check=False)
    return r.returncode == 0


def check_network(host: str) -> None:
    if not is_online(host):
        raise NetworkUnavailableError(host)
    logger.info("Network reachable (%s)", host)
