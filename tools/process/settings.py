import os
import math
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4
DEFAULT_CPU_SAMPLE_INTERVAL = 0.1


def _read_number(environ: Mapping[str, str], key: str, default, cast, minimum):
    raw = environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"⚠️  Ignoring {key}={raw!r}: not a valid number, using {default}")
        return default
    if not math.isfinite(value) or value < minimum:
        logger.warning(f"⚠️  Ignoring {key}={raw!r}: must be >= {minimum}, using {default}")
        return default
    return value


@dataclass(frozen=True)
class ProcessToolSettings:
    """Runtime knobs for the process tools, read from the environment."""

    worker_threads: int = DEFAULT_WORKERS
    cpu_sample_interval: float = DEFAULT_CPU_SAMPLE_INTERVAL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProcessToolSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Recognised variables:
            PROCESS_TOOLS_WORKERS: worker threads for blocking OS calls (>= 1)
            PROCESS_TOOLS_CPU_SAMPLE_INTERVAL: seconds between CPU readings (>= 0)
        """
        environ = os.environ if environ is None else environ
        return cls(
            worker_threads=_read_number(environ, "PROCESS_TOOLS_WORKERS", DEFAULT_WORKERS, int, 1),
            cpu_sample_interval=_read_number(
                environ,
                "PROCESS_TOOLS_CPU_SAMPLE_INTERVAL",
                DEFAULT_CPU_SAMPLE_INTERVAL,
                float,
                0.0,
            ),
        )
