"""ArchRice installer: provision a whole disk into a bootable Arch Linux system.

Phases run strictly in order:
- Preflight (tools, privilege, disk, boot mode, network, clock)
- Layout planning (pure)
- Partition, format, mount
- Base system (pacstrap + fstab)
- Configuration inside the new root, bootloader last

Mounts and swap are always released on the way out.
"""

__version__ = "0.1.0"

__all__ = []
