"""Tests for lib/layout.py - partition plan and mount plan computation."""

import pytest

from archrice_installer.errors import InsufficientSpaceError, PlanningError
from archrice_installer.lib.layout import (
    ALIGNMENT_GAP_MIB,
    PartitionRole,
    bytes_to_mib,
    mount_plan,
    partition_device,
    plan_layout,
    resolve_partitions,
)

GIB_MIB = 1024


class TestPlanLayout:
    def test_happy_path_sizes(self):
        """100 GiB disk, 512 MiB ESP, 4096 MiB swap."""
        plan = plan_layout(100 * GIB_MIB, 512, 4096)

        esp = plan.entry(PartitionRole.ESP)
        swap = plan.entry(PartitionRole.SWAP)
        root = plan.entry(PartitionRole.ROOT)

        assert (esp.start_mib, esp.size_mib) == (1, 512)
        assert (swap.start_mib, swap.size_mib) == (513, 4096)
        assert root.start_mib == 4609
        assert root.end_mib == 102400
        assert root.size_mib == 102400 - ALIGNMENT_GAP_MIB - 512 - 4096
        assert root.to_end is True

    def test_order_and_roles(self):
        plan = plan_layout(20 * GIB_MIB, 300, 1024)

        assert [e.role for e in plan] == [PartitionRole.ESP, PartitionRole.SWAP, PartitionRole.ROOT]
        assert [e.number for e in plan] == [1, 2, 3]
        assert plan.entry(PartitionRole.ESP).flags == ("esp",)
        assert plan.entry(PartitionRole.SWAP).filesystem == "linux-swap"

    @pytest.mark.parametrize(
        "device,efi,swap",
        [(102400, 512, 4096), (8192, 1, 1), (4615, 512, 4096), (64 * GIB_MIB, 1024, 16384)],
    )
    def test_entries_contiguous_and_cover_device(self, device, efi, swap):
        plan = plan_layout(device, efi, swap)
        entries = list(plan)

        assert entries[0].start_mib == ALIGNMENT_GAP_MIB
        for prev, nxt in zip(entries, entries[1:]):
            assert prev.end_mib == nxt.start_mib
        assert entries[-1].end_mib == device
        assert sum(e.size_mib for e in entries) == device - ALIGNMENT_GAP_MIB
        assert all(e.size_mib > 0 for e in entries)

    def test_is_deterministic(self):
        assert plan_layout(102400, 512, 4096) == plan_layout(102400, 512, 4096)

    def test_root_fs_is_carried(self):
        plan = plan_layout(102400, 512, 4096, root_fs="ext4")
        assert plan.entry(PartitionRole.ROOT).filesystem == "ext4"

    def test_device_too_small(self):
        """1 GiB disk cannot hold 512 MiB ESP + 4 GiB swap."""
        with pytest.raises(InsufficientSpaceError) as exc:
            plan_layout(1 * GIB_MIB, 512, 4096)
        assert exc.value.device_size_mib == 1024

    def test_exactly_full_leaves_no_root(self):
        with pytest.raises(InsufficientSpaceError):
            plan_layout(ALIGNMENT_GAP_MIB + 512 + 4096, 512, 4096)

    def test_one_mib_of_root_is_enough(self):
        plan = plan_layout(ALIGNMENT_GAP_MIB + 512 + 4096 + 1, 512, 4096)
        assert plan.entry(PartitionRole.ROOT).size_mib == 1

    def test_insufficient_space_is_planning_error(self):
        with pytest.raises(PlanningError):
            plan_layout(100, 512, 4096)

    @pytest.mark.parametrize("device,efi,swap", [(0, 512, 4096), (102400, 0, 4096), (102400, 512, -1)])
    def test_rejects_non_positive_sizes(self, device, efi, swap):
        with pytest.raises(PlanningError):
            plan_layout(device, efi, swap)


class TestDeviceNames:
    @pytest.mark.parametrize(
        "disk,expected",
        [("/dev/nvme0n1", "/dev/nvme0n1p2"), ("/dev/mmcblk0", "/dev/mmcblk0p2"), ("/dev/sda", "/dev/sda2")],
    )
    def test_partition_device(self, disk, expected):
        assert partition_device(disk, 2) == expected

    def test_resolve_partitions(self):
        plan = plan_layout(102400, 512, 4096)
        assert resolve_partitions("/dev/sda", plan) == {
            PartitionRole.ESP: "/dev/sda1",
            PartitionRole.SWAP: "/dev/sda2",
            PartitionRole.ROOT: "/dev/sda3",
        }

    def test_bytes_to_mib_floors(self):
        assert bytes_to_mib(1024 * 1024 * 3 + 5) == 3


class TestMountPlan:
    def test_root_precedes_esp(self):
        plan = plan_layout(102400, 512, 4096)
        mounts = mount_plan(plan, resolve_partitions("/dev/sda", plan), "/mnt")

        assert [(m.device, m.mountpoint) for m in mounts] == [
            ("/dev/sda3", "/mnt"),
            ("/dev/sda1", "/mnt/boot/efi"),
        ]

    def test_swap_is_not_mounted(self):
        plan = plan_layout(102400, 512, 4096)
        mounts = mount_plan(plan, resolve_partitions("/dev/sda", plan), "/mnt")
        assert "/dev/sda2" not in [m.device for m in mounts]
