from .errors import (
    ProcessToolError,
    InvalidArgumentError,
    ProcessNotFoundError,
    PermissionDeniedError,
    SignalDeliveryError,
    InternalToolError,
)
from .snapshot import ProcessRecord, take_snapshot, terminate_pid, validate_pid, bytes_to_mb
from .listing import ListQuery, ListResult, list_processes
from .killing import KillQuery, KillResult, kill_process
from .settings import ProcessToolSettings

__all__ = [
    "ProcessToolError",
    "InvalidArgumentError",
    "ProcessNotFoundError",
    "PermissionDeniedError",
    "SignalDeliveryError",
    "InternalToolError",
    "ProcessRecord",
    "take_snapshot",
    "terminate_pid",
    "validate_pid",
    "bytes_to_mb",
    "ListQuery",
    "ListResult",
    "list_processes",
    "KillQuery",
    "KillResult",
    "kill_process",
    "ProcessToolSettings",
]
