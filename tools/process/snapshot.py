"""
Process table access.

Everything in this module blocks on the OS (psutil walks /proc, sysctl or the
Win32 process APIs) and must only be called from a worker thread, see
tools.process.blocking.
"""

import struct
import time
import logging
from dataclasses import dataclass, asdict
from typing import List

import psutil

from tools.process.errors import (
    InvalidArgumentError,
    PermissionDeniedError,
    ProcessNotFoundError,
    SignalDeliveryError,
)

logger = logging.getLogger(__name__)

# PIDs cross the wire as unsigned 32-bit integers. They must fit the native
# word without truncation, so narrower platforms are refused at import.
POINTER_BITS = struct.calcsize("P") * 8
if POINTER_BITS < 32:
    raise ImportError(
        f"Process tools require a 32-bit or 64-bit platform (native width is {POINTER_BITS} bits)"
    )

MAX_PID = 2 ** 32 - 1
MAX_MEMORY_BYTES = 2 ** 64 - 1
BYTES_PER_MB = 1024 * 1024

# How long a kill waits for the target to actually die
KILL_WAIT_TIMEOUT = 5.0
KILL_POLL_INTERVAL = 0.01


@dataclass(frozen=True)
class ProcessRecord:
    """One row of a process table snapshot."""

    pid: int
    name: str
    cpu_percent: float  # 100.0 per fully used core
    memory_mb: float  # resident set size

    def to_dict(self) -> dict:
        return asdict(self)


def validate_pid(pid) -> int:
    """
    Check that pid is a usable process identifier.

    Args:
        pid: Candidate PID (must be an int in 1..2**32-1)

    Returns:
        The PID as an int

    Raises:
        InvalidArgumentError: For 0, negatives, out-of-range values and non-integers
    """
    if isinstance(pid, bool) or not isinstance(pid, int):
        raise InvalidArgumentError(f"Invalid PID {pid!r}: PID must be an integer")
    if pid == 0:
        raise InvalidArgumentError("Invalid PID 0: cannot kill process with ID 0", pid=0)
    if pid < 0 or pid > MAX_PID:
        raise InvalidArgumentError(
            f"Invalid PID {pid}: must be between 1 and {MAX_PID}", pid=pid
        )
    return pid


def bytes_to_mb(num_bytes) -> float:
    """Convert a byte count to MiB, clamping into [0, MAX_MEMORY_BYTES] first."""
    if not num_bytes:
        return 0.0
    clamped = min(max(int(num_bytes), 0), MAX_MEMORY_BYTES)
    return clamped / BYTES_PER_MB


def display_name(name) -> str:
    """Coerce a raw process name into printable text without ever failing."""
    if name is None:
        return ""
    if isinstance(name, bytes):
        return name.decode("utf-8", errors="replace")
    # psutil keeps undecodable bytes as lone surrogates on POSIX
    text = str(name)
    try:
        raw = text.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        raw = text.encode("utf-8", errors="replace")
    return raw.decode("utf-8", errors="replace")


def _read_record(proc: psutil.Process) -> ProcessRecord:
    """Read one process. Raises psutil.NoSuchProcess if it exited meanwhile."""
    with proc.oneshot():
        try:
            if proc.status() == psutil.STATUS_ZOMBIE:
                raise psutil.ZombieProcess(proc.pid)
        except psutil.AccessDenied:
            pass

        try:
            name = proc.name()
        except psutil.AccessDenied:
            name = ""

        try:
            cpu = proc.cpu_percent(interval=None)
        except psutil.AccessDenied:
            cpu = 0.0

        try:
            rss = proc.memory_info().rss
        except psutil.AccessDenied:
            rss = 0

    return ProcessRecord(
        pid=proc.pid,
        name=display_name(name),
        cpu_percent=float(cpu or 0.0),
        memory_mb=bytes_to_mb(rss),
    )


def take_snapshot(cpu_sample_interval: float = 0.0) -> List[ProcessRecord]:
    """
    Read the whole process table.

    CPU usage is a rate, so every process is sampled twice: once to prime its
    counter and again after cpu_sample_interval seconds. With an interval of
    0 the second read happens immediately and psutil reports the usage since
    the previous call (0.0 on the very first one).

    Processes that exit while the table is being read are dropped, and so are
    zombies (exited but not yet reaped by their parent). Fields the
    caller lacks privileges for fall back to empty values.

    Args:
        cpu_sample_interval: Seconds to wait between the two CPU readings

    Returns:
        Records in OS enumeration order
    """
    started = time.monotonic()
    candidates: List[psutil.Process] = []

    for proc in psutil.process_iter():
        try:
            proc.cpu_percent(interval=None)
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied:
            pass
        candidates.append(proc)

    if cpu_sample_interval > 0:
        time.sleep(cpu_sample_interval)

    records: List[ProcessRecord] = []
    for proc in candidates:
        try:
            record = _read_record(proc)
        except psutil.NoSuchProcess:
            # Exited mid-snapshot (ZombieProcess is a subclass)
            continue
        if record.pid == 0:
            # Reserved; some platforms list the idle/swapper task as pid 0
            continue
        records.append(record)

    logger.debug(
        f"Snapshot of {len(records)} processes taken in {time.monotonic() - started:.3f}s"
    )
    return records


def _wait_until_dead(proc: psutil.Process, timeout: float) -> bool:
    """Poll until proc is gone or a zombie. Returns False if it outlived timeout."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            if proc.status() == psutil.STATUS_ZOMBIE:
                return True
        except psutil.NoSuchProcess:
            return True
        except psutil.AccessDenied:
            if not proc.is_running():
                return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(KILL_POLL_INTERVAL)


def terminate_pid(pid: int, wait_timeout: float = KILL_WAIT_TIMEOUT) -> str:
    """
    Locate a process and force-kill it in one go.

    Sends SIGKILL on POSIX and calls TerminateProcess on Windows. The target
    gets no chance to clean up. The process can still exit between the lookup
    and the signal; that case is reported as not found.

    Signal delivery is asynchronous, so after a successful kill the target is
    polled until it has exited (gone or a zombie). Only then does a second
    kill of the same pid see it as not found. A target that outlives
    wait_timeout (e.g. stuck in uninterruptible sleep) is logged and still
    reported as killed, since the signal was delivered.

    Args:
        pid: Process to kill
        wait_timeout: Seconds to wait for the target to die after the signal

    Returns:
        The process name seen during the lookup ("" if it could not be read)

    Raises:
        InvalidArgumentError: pid is 0 or out of range
        ProcessNotFoundError: No such process (or it is a zombie)
        PermissionDeniedError: The OS refused the signal
        SignalDeliveryError: The signal could not be sent
    """
    pid = validate_pid(pid)

    try:
        proc = psutil.Process(pid)
    except (psutil.NoSuchProcess, ValueError, OverflowError):
        raise ProcessNotFoundError(f"Failed to kill process {pid}: Process not found", pid=pid)
    except psutil.AccessDenied:
        raise PermissionDeniedError(
            f"Failed to kill process {pid}: Permission denied or process protected", pid=pid
        )

    try:
        if proc.status() == psutil.STATUS_ZOMBIE:
            raise ProcessNotFoundError(
                f"Failed to kill process {pid}: Process not found (already exited)", pid=pid
            )
    except psutil.NoSuchProcess:
        raise ProcessNotFoundError(f"Failed to kill process {pid}: Process not found", pid=pid)
    except psutil.AccessDenied:
        # Status unreadable; the kill below decides
        pass

    try:
        name = display_name(proc.name())
    except psutil.NoSuchProcess:
        raise ProcessNotFoundError(f"Failed to kill process {pid}: Process not found", pid=pid)
    except psutil.AccessDenied:
        name = ""

    try:
        proc.kill()
    except psutil.NoSuchProcess:
        raise ProcessNotFoundError(f"Failed to kill process {pid}: Process not found", pid=pid)
    except psutil.AccessDenied:
        raise PermissionDeniedError(
            f"Failed to kill process {pid}: Permission denied or process protected", pid=pid
        )
    except OSError as e:
        raise SignalDeliveryError(
            f"Failed to kill process {pid}: Failed to send kill signal ({e})", pid=pid
        ) from e

    if not _wait_until_dead(proc, wait_timeout):
        logger.warning(f"Process {pid} still running {wait_timeout}s after SIGKILL")

    return name
