"""
Pytest configuration and shared fixtures for archrice-installer tests.

No test touches a real disk: every external command goes through a fake
``subprocess.run`` that records argv and answers from canned results.
"""

import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest

from archrice_installer.config import InstallConfig, build_context
from archrice_installer.context import BootMode

GIB = 1024 * 1024 * 1024

LOCALE_GEN = """# Configuration file for locale-gen
#en_US.UTF-8 UTF-8
#en_US ISO-8859-1
#pt_BR.UTF-8 UTF-8
#pt_BR ISO-8859-1
"""

SUDOERS = """## User privilege specification
root ALL=(ALL:ALL) ALL

## Uncomment to allow members of group wheel to execute any command
# %wheel ALL=(ALL:ALL) ALL
"""


class FakeCommands:
    """Stand-in for ``subprocess.run`` used by ``lib.command.run_cmd``."""

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[str]] = []
        self._rules: List[Tuple[Tuple[str, ...], int, str, str]] = []

    def respond(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        """Answer commands starting with ``prefix``. Later rules win."""
        self._rules.insert(0, (tuple(prefix), returncode, stdout, stderr))

    def fail(self, *prefix: str, returncode: int = 1, stderr: str = "boom") -> None:
        self.respond(*prefix, returncode=returncode, stderr=stderr)

    def __call__(self, argv, input=None, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        self.inputs.append(input)
        for prefix, rc, out, err in self._rules:
            if tuple(argv[: len(prefix)]) == prefix:
                return subprocess.CompletedProcess(argv, rc, out, err)
        return subprocess.CompletedProcess(argv, 0, "", "")

    def ran(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]

    def index(self, *prefix: str) -> int:
        for i, c in enumerate(self.calls):
            if tuple(c[: len(prefix)]) == prefix:
                return i
        raise AssertionError(f"{' '.join(prefix)} was never run")


@pytest.fixture
def fake_commands(monkeypatch) -> FakeCommands:
    fake = FakeCommands()
    fake.respond(
        "genfstab",
        stdout="UUID=aaaa / ext4 rw,relatime 0 1\nUUID=bbbb /boot/efi vfat rw,relatime 0 2\nUUID=cccc none swap defaults 0 0\n",
    )
    monkeypatch.setattr("archrice_installer.lib.command.subprocess.run", fake)
    return fake


@pytest.fixture
def target_root(tmp_path) -> Path:
    """A target root as pacstrap leaves it: etc/ with the files we edit."""
    root = tmp_path / "mnt"
    (root / "etc").mkdir(parents=True)
    (root / "etc/locale.gen").write_text(LOCALE_GEN, encoding="utf-8")
    (root / "etc/sudoers").write_text(SUDOERS, encoding="utf-8")
    return root


@pytest.fixture
def install_config(target_root) -> InstallConfig:
    return InstallConfig(disk="/dev/nvme0n1", target_root=str(target_root), settle_timeout_s=0.1)


@pytest.fixture
def ctx(install_config):
    return build_context(install_config)


@pytest.fixture
def host(monkeypatch):
    """A live environment where every precondition holds.

    Returns the mocks so tests can change answers (boot mode, disk size, ...).
    """
    mocks: Dict[str, Mock] = {
        "which": Mock(side_effect=lambda name: f"/usr/bin/{name}"),
        "geteuid": Mock(return_value=0),
        "is_block_device": Mock(return_value=True),
        "read_device_size": Mock(return_value=100 * GIB),
        "detect_boot_mode": Mock(return_value=BootMode.UEFI),
        "node_exists": Mock(return_value=True),
    }
    monkeypatch.setattr("archrice_installer.lib.probe.shutil.which", mocks["which"])
    monkeypatch.setattr("archrice_installer.lib.preflight.os.geteuid", mocks["geteuid"])
    monkeypatch.setattr("archrice_installer.lib.preflight.is_block_device", mocks["is_block_device"])
    monkeypatch.setattr("archrice_installer.steps.step_10_preflight.read_device_size", mocks["read_device_size"])
    monkeypatch.setattr("archrice_installer.steps.step_10_preflight.detect_boot_mode", mocks["detect_boot_mode"])
    monkeypatch.setattr("archrice_installer.lib.storage._node_exists", mocks["node_exists"])
    return mocks
