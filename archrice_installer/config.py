from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .context import DiskSpec, InstallationContext, SizeBudget
from .lib.env import PATHS

BASE_PACKAGES: Tuple[str, ...] = (
    "base",
    "linux",
    "linux-firmware",
    "git",
    "nano",
    "networkmanager",
    "intel-ucode",
    "sudo",
)

# Needed by the bootloader step in either boot mode.
BOOT_PACKAGES: Tuple[str, ...] = ("grub", "efibootmgr", "mtools", "dosfstools")


@dataclass(frozen=True)
class InstallConfig:
    """Everything the run needs to know up front.

    The defaults are the compiled-in configuration used when no config file
    is given.
    """

    disk: str = "/dev/nvme0n1"
    efi_size_mib: int = 512
    swap_size_mib: int = 4096
    root_fs: str = "ext4"
    target_root: str = PATHS.target_root

    hostname: str = "ArchRice"
    username: str = "Archnight"
    password: str = dataclasses.field(default="12345abcde", repr=False)

    packages: Tuple[str, ...] = BASE_PACKAGES
    extra_packages: Tuple[str, ...] = ("bash-completion", "reflector")
    timezone: str = "America/Fortaleza"
    locales: Tuple[str, ...] = ("en_US.UTF-8", "pt_BR.UTF-8")
    lang: str = "pt_BR.UTF-8"
    keymap: str = "br-abnt2"
    services: Tuple[str, ...] = ("NetworkManager",)
    timers: Tuple[str, ...] = ("reflector.timer",)
    bootloader_id: str = "GRUB"

    probe_host: str = "archlinux.org"
    settle_timeout_s: float = 10.0
    dry_run: bool = False


DEFAULTS = InstallConfig()

_TUPLE_FIELDS = {"packages", "extra_packages", "locales", "services", "timers"}


def load_install_config(path: Optional[str] = None, **overrides: Any) -> InstallConfig:
    """Return the compiled-in config, optionally overlaid by a YAML file.

    File keys must match ``InstallConfig`` field names; keyword overrides
    (e.g. ``dry_run=True`` from the CLI) win over the file.
    """

    raw: Dict[str, Any] = {}
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("install config must be YAML")

        try:
            import yaml  # type: ignore
        except Exception as e:
            raise RuntimeError("PyYAML is required to read the install config") from e

        try:
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"install config is not valid YAML: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError("install config must contain a mapping/object")

    raw.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in dataclasses.fields(InstallConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown install config keys: {', '.join(unknown)}")

    for key in _TUPLE_FIELDS & set(raw):
        value = raw[key]
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ValueError(f"install config key {key!r} must be a list of strings")
        raw[key] = tuple(str(v) for v in value)

    return dataclasses.replace(DEFAULTS, **raw)


def build_context(cfg: InstallConfig) -> InstallationContext:
    packages = tuple(cfg.packages) + tuple(p for p in BOOT_PACKAGES if p not in cfg.packages)
    return InstallationContext(
        disk=DiskSpec(device=cfg.disk),
        sizes=SizeBudget(
            efi_size_mib=cfg.efi_size_mib,
            swap_size_mib=cfg.swap_size_mib,
            root_fs=cfg.root_fs,
        ),
        target_root=cfg.target_root,
        hostname=cfg.hostname,
        username=cfg.username,
        password=cfg.password,
        packages=packages,
        extra_packages=cfg.extra_packages,
        timezone=cfg.timezone,
        locales=cfg.locales,
        lang=cfg.lang,
        keymap=cfg.keymap,
        services=cfg.services,
        timers=cfg.timers,
        bootloader_id=cfg.bootloader_id,
        probe_host=cfg.probe_host,
        settle_timeout_s=cfg.settle_timeout_s,
        dry_run=cfg.dry_run,
    )
