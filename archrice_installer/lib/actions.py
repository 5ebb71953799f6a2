"""Configuration actions applied inside the target root.

Each action is a small value object carrying its parameters and knows how
to apply itself through a ``ChrootRunner``. Values travel as argv entries,
file contents or stdin, never as shell text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Protocol, Tuple

from ..errors import ConfigError
from .chroot import ChrootRunner
from .command import CommandError

logger = logging.getLogger(__name__)


class TargetAction(Protocol):
    fatal: bool

    def describe(self) -> str:
        ...

    def apply(self, target: ChrootRunner) -> None:
        ...


@dataclass(frozen=True)
class SetTimezone:
    zone: str
    fatal: bool = True

    def describe(self) -> str:
        return f"timezone {self.zone}"

    def apply(self, target: ChrootRunner) -> None:
        target.run(["ln", "-sf", f"/usr/share/zoneinfo/{self.zone}", "/etc/localtime"])
        target.run(["hwclock", "--systohc"])


def _charset(locale: str) -> str:
    return locale.split(".", 1)[1] if "." in locale else "ISO-8859-1"


def uncomment_locales(text: str, locales: Iterable[str]) -> str:
    """Enable ``locales`` in a locale.gen body, appending any that are absent."""

    lines = text.splitlines()
    for locale in locales:
        commented = re.compile(r"^#\s*" + re.escape(locale) + r"(\s|$)")
        active = re.compile(r"^" + re.escape(locale) + r"(\s|$)")
        if any(active.match(ln) for ln in lines):
            continue
        for i, ln in enumerate(lines):
            if commented.match(ln):
                lines[i] = ln.lstrip("#").lstrip()
                break
        else:
            lines.append(f"{locale} {_charset(locale)}")
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class EnableLocales:
    locales: Tuple[str, ...]
    lang: str
    keymap: str
    fatal: bool = True

    def describe(self) -> str:
        return f"locales {', '.join(self.locales)} (LANG={self.lang}, KEYMAP={self.keymap})"

    def apply(self, target: ChrootRunner) -> None:
        target.edit_file("/etc/locale.gen", lambda text: uncomment_locales(text, self.locales))
        target.run(["locale-gen"])
        target.write_file("/etc/locale.conf", f"LANG={self.lang}\n")
        target.write_file("/etc/vconsole.conf", f"KEYMAP={self.keymap}\n")


def render_hosts(hostname: str) -> str:
    return "\n".join(
        [
            "127.0.0.1\tlocalhost",
            "::1\t\tlocalhost",
            f"127.0.1.1\t{hostname}.localdomain {hostname}",
            "",
        ]
    )


@dataclass(frozen=True)
class SetHostname:
    hostname: str
    fatal: bool = True

    def describe(self) -> str:
        return f"hostname {self.hostname}"

    def apply(self, target: ChrootRunner) -> None:
        target.write_file("/etc/hostname", self.hostname + "\n")
        target.write_file("/etc/hosts", render_hosts(self.hostname))


@dataclass(frozen=True)
class CreateUser:
    username: str
    groups: Tuple[str, ...] = ("wheel",)
    shell: str = "/bin/bash"
    fatal: bool = True

    def describe(self) -> str:
        return f"user {self.username}"

    def apply(self, target: ChrootRunner) -> None:
        if not target.dry_run and target.run(["id", "-u", self.username], check=False).returncode == 0:
            logger.info("User %s already exists", self.username)
            return
        argv = ["useradd", "-m", "-s", self.shell]
        if self.groups:
            argv += ["-G", ",".join(self.groups)]
        target.run([*argv, self.username])


@dataclass(frozen=True)
class SetPassword:
    username: str
    password: str = field(repr=False)
    fatal: bool = True

    def describe(self) -> str:
        return f"password for {self.username}"

    def apply(self, target: ChrootRunner) -> None:
        target.run(["chpasswd"], input_text=f"{self.username}:{self.password}\n")


_SUDO_RULE = re.compile(r"^#\s*(%(?P<group>\S+)\s+ALL=\(ALL(:ALL)?\)\s+ALL)\s*$")


def enable_group_sudo(text: str, group: str) -> str:
    """Uncomment the ``%group ALL=(ALL:ALL) ALL`` rule, or append one."""

    lines = text.splitlines()
    active = re.compile(r"^%" + re.escape(group) + r"\s+ALL=")
    if any(active.match(ln) for ln in lines):
        return text
    for i, ln in enumerate(lines):
        m = _SUDO_RULE.match(ln)
        if m and m.group("group") == group:
            lines[i] = m.group(1)
            break
    else:
        lines.append(f"%{group} ALL=(ALL:ALL) ALL")
    return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class GrantSudo:
    group: str = "wheel"
    fatal: bool = True

    def describe(self) -> str:
        return f"sudo for %{self.group}"

    def apply(self, target: ChrootRunner) -> None:
        target.edit_file("/etc/sudoers", lambda text: enable_group_sudo(text, self.group))


@dataclass(frozen=True)
class EnableService:
    unit: str
    fatal: bool = True

    def describe(self) -> str:
        return f"enable {self.unit}"

    def apply(self, target: ChrootRunner) -> None:
        target.run(["systemctl", "enable", self.unit])


@dataclass(frozen=True)
class InstallPackages:
    packages: Tuple[str, ...]
    fatal: bool = True

    def describe(self) -> str:
        return f"install {' '.join(self.packages)}"

    def apply(self, target: ChrootRunner) -> None:
        target.run(["pacman", "-S", "--noconfirm", "--needed", *self.packages])


@dataclass(frozen=True)
class RunCommand:
    argv: Tuple[str, ...]
    fatal: bool = True

    def describe(self) -> str:
        return " ".join(self.argv)

    def apply(self, target: ChrootRunner) -> None:
        target.run(list(self.argv))


def apply_actions(target: ChrootRunner, actions: Iterable[TargetAction]) -> list[str]:
    """Apply actions in order. Fatal failures raise ``ConfigError``.

    Returns the descriptions of best-effort actions that failed.
    """

    skipped: list[str] = []
    for action in actions:
        label = action.describe()
        logger.info("Configuring: %s", label)
        try:
            action.apply(target)
        except (CommandError, OSError) as e:
            if action.fatal:
                raise ConfigError(f"{label} failed: {e}", action=label) from e
            logger.warning("Non-fatal: %s failed: %s", label, e)
            skipped.append(label)
    return skipped
