"""
Worker pool for blocking process table calls.

psutil calls are synchronous syscalls. Running them on the event loop would
stall every other request the server is handling, so they are submitted to a
dedicated thread pool and awaited.

If the awaiting task is cancelled the worker keeps running until the OS call
returns; its result is then dropped.
"""

import asyncio
import functools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

from tools.process.errors import InternalToolError, ProcessToolError
from tools.process.settings import ProcessToolSettings

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor(max_workers: Optional[int] = None) -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            if max_workers is None:
                max_workers = ProcessToolSettings.from_env().worker_threads
            _executor = ThreadPoolExecutor(
                max_workers=max_workers,
                thread_name_prefix="process-tools",
            )
            logger.info(f"🧵 Started process tool worker pool ({max_workers} threads)")
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    """Stop the worker pool. A later call to get_executor() starts a new one."""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None
            logger.info("🧵 Process tool worker pool stopped")


async def run_blocking(
    func: Callable[..., Any],
    *args: Any,
    error_message: str = "Blocking call failed",
    pid: Optional[int] = None,
) -> Any:
    """
    Run func(*args) on the worker pool and await its result.

    ProcessToolError raised by func passes through unchanged. Anything else
    means the worker itself failed and is wrapped as InternalToolError.

    Args:
        func: Blocking callable
        *args: Positional arguments for func
        error_message: Prefix for the internal error message
        pid: PID to attach to an internal error, if any

    Returns:
        Whatever func returns
    """
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(get_executor(), functools.partial(func, *args))
    except ProcessToolError:
        raise
    except Exception as e:
        logger.exception(f"❌ {error_message}")
        raise InternalToolError(f"{error_message}: {e}", pid=pid) from e
