from .step_10_preflight import PreflightStep
from .step_20_partition import PartitionStep
from .step_30_provision_zfs import ProvisionZfsStep
from .step_40_mount import MountStep
from .step_50_materialize_config import MaterializeConfigStep
from .step_60_install import InstallStep

__all__ = [
    "PreflightStep",
    "PartitionStep",
    "ProvisionZfsStep",
    "MountStep",
    "MaterializeConfigStep",
    "InstallStep",
]
