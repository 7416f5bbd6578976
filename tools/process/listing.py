"""
list_processes: snapshot, filter, sort by CPU, limit.
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Iterable, List, Optional

from tools.process.blocking import run_blocking
from tools.process.errors import InvalidArgumentError
from tools.process.settings import ProcessToolSettings
from tools.process.snapshot import ProcessRecord, take_snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListQuery:
    """Arguments of one list_processes call. limit=0 means no cap."""

    filter: Optional[str] = None
    limit: int = 0

    def __post_init__(self):
        if isinstance(self.limit, bool) or not isinstance(self.limit, int):
            raise InvalidArgumentError(f"Invalid limit {self.limit!r}: must be an integer")
        if self.limit < 0:
            raise InvalidArgumentError(f"Invalid limit {self.limit}: must be 0 or greater")
        if self.filter is not None and not isinstance(self.filter, str):
            raise InvalidArgumentError(f"Invalid filter {self.filter!r}: must be a string")


@dataclass
class ListResult:
    processes: List[ProcessRecord] = field(default_factory=list)
    total_count: int = 0
    snapshot_count: int = 0
    limited: bool = False
    filter: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.processes)

    def to_dict(self) -> dict:
        return {
            "success": True,
            "count": self.count,
            "total_count": self.total_count,
            "snapshot_count": self.snapshot_count,
            "limited": self.limited,
            "filter": self.filter,
            "processes": [p.to_dict() for p in self.processes],
        }


def filter_records(records: Iterable[ProcessRecord], name_filter: Optional[str]) -> List[ProcessRecord]:
    """Keep records whose name contains name_filter, ignoring case. Empty keeps all."""
    if not name_filter:
        return list(records)
    needle = name_filter.lower()
    return [r for r in records if needle in r.name.lower()]


def _compare_cpu_desc(a: ProcessRecord, b: ProcessRecord) -> int:
    # NaN compares false both ways and so counts as a tie
    if a.cpu_percent > b.cpu_percent:
        return -1
    if a.cpu_percent < b.cpu_percent:
        return 1
    return 0


def sort_by_cpu(records: Iterable[ProcessRecord]) -> List[ProcessRecord]:
    """Highest CPU first. Stable: ties keep their snapshot order."""
    return sorted(records, key=cmp_to_key(_compare_cpu_desc))


def apply_list_query(records: List[ProcessRecord], query: ListQuery) -> ListResult:
    """
    Run the filter / sort / limit pipeline over a snapshot.

    total_count is the number of matches before the limit is applied, and
    limited tells the caller that more matches may exist beyond the cap.
    """
    matched = sort_by_cpu(filter_records(records, query.filter))
    total = len(matched)

    if query.limit > 0:
        matched = matched[: query.limit]

    return ListResult(
        processes=matched,
        total_count=total,
        snapshot_count=len(records),
        limited=query.limit > 0 and total >= query.limit,
        filter=query.filter,
    )


def collect_process_list(query: ListQuery, cpu_sample_interval: float = 0.0) -> ListResult:
    """Blocking: snapshot the process table and apply query to it."""
    return apply_list_query(take_snapshot(cpu_sample_interval), query)


async def list_processes(
    filter: Optional[str] = None,
    limit: int = 0,
    settings: Optional[ProcessToolSettings] = None,
) -> ListResult:
    """
    List running processes, highest CPU first.

    Args:
        filter: Case-insensitive substring to match against process names
        limit: Maximum number of processes to return (0 = all)
        settings: Overrides for the environment-derived settings

    Returns:
        ListResult

    Raises:
        InvalidArgumentError: limit is negative or not an integer
        InternalToolError: The process table could not be read
    """
    query = ListQuery(filter=filter, limit=limit)
    settings = settings or ProcessToolSettings.from_env()

    result = await run_blocking(
        collect_process_list,
        query,
        settings.cpu_sample_interval,
        error_message="Failed to list processes",
    )
    logger.info(
        f"📋 Listed {result.count} of {result.total_count} matching processes "
        f"(snapshot: {result.snapshot_count}, filter: {query.filter or 'none'}, limit: {query.limit})"
    )
    return result
