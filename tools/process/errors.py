"""
Error types for the process tools.

Every failure a tool can report is one of these. The server turns them into
JSON error payloads; nothing here is retried.
"""

from typing import Optional


class ProcessToolError(Exception):
    """Base class for all process tool failures"""

    kind = "internal"

    def __init__(self, message: str, pid: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.pid = pid

    def to_dict(self) -> dict:
        payload = {"success": False, "error": self.kind}
        if self.pid is not None:
            payload["pid"] = self.pid
        payload["message"] = self.message
        return payload


class InvalidArgumentError(ProcessToolError):
    """Input rejected before any OS call was made"""

    kind = "invalid_argument"


class ProcessNotFoundError(ProcessToolError):
    """No running process has the requested PID"""

    kind = "not_found"


class PermissionDeniedError(ProcessToolError):
    """The OS refused the signal (other owner, protected process)"""

    kind = "permission_denied"


class SignalDeliveryError(ProcessToolError):
    """The kill signal could not be delivered at all"""

    kind = "signal_failed"


class InternalToolError(ProcessToolError):
    """The worker thread or the process table read itself failed"""

    kind = "internal"


__all__ = [
    "ProcessToolError",
    "InvalidArgumentError",
    "ProcessNotFoundError",
    "PermissionDeniedError",
    "SignalDeliveryError",
    "InternalToolError",
]
