"""Installer error kinds.

Every kind is fatal for the run. Steps translate low-level failures
(``CommandError``, ``OSError``) into the error of their phase so the
diagnostic names what was being attempted.

    InstallerError
        ├── PreflightError
        │   ├── MissingToolError
        │   ├── InsufficientPrivilegeError
        │   ├── DeviceNotFoundError
        │   ├── DeviceSizeError
        │   └── NetworkUnavailableError
        ├── PlanningError
        │   └── InsufficientSpaceError
        ├── StorageError
        │   ├── PartitionError
        │   ├── FormatError
        │   └── MountError
        ├── InstallError
        ├── ConfigError
        └── InstallInterrupted
"""

from __future__ import annotations

from typing import Optional


class InstallerError(Exception):
    """Base exception for all installer failures."""


class PreflightError(InstallerError):
    """A precondition for installing does not hold."""


class MissingToolError(PreflightError):
    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Missing command: {tool}")


class InsufficientPrivilegeError(PreflightError, PermissionError):
    def __init__(self, euid: int):
        self.euid = euid
        super().__init__(f"Run the installer as root (effective uid is {euid})")


class DeviceNotFoundError(PreflightError):
    def __init__(self, device: str, listing: str = ""):
        self.device = device
        self.listing = listing
        super().__init__(f"Disk not found or not a block device: {device}")


class DeviceSizeError(PreflightError):
    def __init__(self, device: str, reason: str = ""):
        self.device = device
        super().__init__(f"Cannot determine the size of {device}" + (f": {reason}" if reason else ""))


class NetworkUnavailableError(PreflightError):
    def __init__(self, host: str):
        self.host = host
        super().__init__(f"No internet connectivity (could not reach {host})")


class PlanningError(InstallerError):
    """The partition layout cannot be computed."""


class InsufficientSpaceError(PlanningError):
    def __init__(self, device_size_mib: int, required_mib: int):
        self.device_size_mib = device_size_mib
        self.required_mib = required_mib
        super().__init__(
            f"Device has {device_size_mib} MiB but ESP, swap and alignment need "
            f"{required_mib} MiB, leaving no room for the root filesystem"
        )


class StorageError(InstallerError):
    """Base exception for partition, format and mount failures."""

    def __init__(self, message: str, device: Optional[str] = None):
        self.device = device
        super().__init__(message)


class PartitionError(StorageError):
    pass


class FormatError(StorageError):
    pass


class MountError(StorageError):
    pass


class InstallError(InstallerError):
    """The base system could not be materialized into the target root."""


class ConfigError(InstallerError):
    """A configuration action inside the target root failed."""

    def __init__(self, message: str, action: Optional[str] = None):
        self.action = action
        super().__init__(message)


class InstallInterrupted(InstallerError):
    """The run received a termination signal."""

    def __init__(self, signum: int):
        self.signum = signum
        super().__init__(f"Interrupted by signal {signum}")
