"""
kill_process: validate, locate, SIGKILL, report.

Not idempotent. A second kill of the same PID fails with not_found once the
first one has taken effect.
"""

import logging
from dataclasses import dataclass

from tools.process.blocking import run_blocking
from tools.process.errors import ProcessToolError
from tools.process.snapshot import terminate_pid, validate_pid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KillQuery:
    pid: int

    def __post_init__(self):
        validate_pid(self.pid)


@dataclass(frozen=True)
class KillResult:
    """Outcome of a successful kill. process_name may be empty."""

    pid: int
    process_name: str
    success: bool = True

    @property
    def message(self) -> str:
        if self.process_name:
            return f"Successfully terminated process {self.pid} ({self.process_name})"
        return f"Successfully terminated process {self.pid}"

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "pid": self.pid,
            "process_name": self.process_name,
            "message": self.message,
        }


async def kill_process(pid: int) -> KillResult:
    """
    Force-kill a process by PID.

    PID 0 and out-of-range values are rejected before anything touches the OS.

    Args:
        pid: Process ID to terminate

    Returns:
        KillResult with the name the process had when it was found

    Raises:
        InvalidArgumentError: Bad PID
        ProcessNotFoundError: No such process
        PermissionDeniedError: Not allowed to signal it
        SignalDeliveryError: Signal could not be sent
        InternalToolError: The worker failed
    """
    query = KillQuery(pid=pid)

    try:
        name = await run_blocking(
            terminate_pid,
            query.pid,
            error_message=f"Failed to kill process {query.pid}",
            pid=query.pid,
        )
    except ProcessToolError as e:
        logger.warning(f"🚫 kill_process({query.pid}) failed [{e.kind}]: {e.message}")
        raise

    result = KillResult(pid=query.pid, process_name=name)
    logger.info(f"💀 {result.message}")
    return result
