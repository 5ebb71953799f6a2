from .step_10_preflight import PreflightStep
from .step_20_plan_layout import PlanLayoutStep
from .step_30_partition_fs import PartitionFilesystemStep
from .step_40_install_base import InstallBaseStep
from .step_50_configure_target import ConfigureTargetStep

__all__ = [
    "PreflightStep",
    "PlanLayoutStep",
    "PartitionFilesystemStep",
    "InstallBaseStep",
    "ConfigureTargetStep",
]
