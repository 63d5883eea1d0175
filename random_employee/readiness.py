"""Readiness marker file for external orchestration.

Once the listener is accepting connections the service writes a
`service-ready` file containing a JSON snapshot of the process' resource
usage. Orchestration polls for the file's presence; its content is only
guaranteed to be valid JSON.

Usage:
    from random_employee.readiness import write_readiness

    snapshot = write_readiness(settings.readiness_file)
"""

import json
import os
import resource
import tempfile
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from random_employee.errors import PersistenceError
from random_employee.observability.logging import get_logger

logger = get_logger(__name__)


def _seconds_to_micros(value: float) -> int:
    return int(round(value * 1_000_000))


@dataclass(frozen=True)
class ResourceSnapshot:
    """Point-in-time resource usage of the current process.

    Attributes:
        user_cpu_time_us: User CPU time in microseconds
        system_cpu_time_us: System CPU time in microseconds
        max_rss_kb: Peak resident set size (kilobytes on Linux)
        shared_memory_size: Integral shared memory size
        unshared_data_size: Integral unshared data size
        unshared_stack_size: Integral unshared stack size
        minor_page_faults: Page faults serviced without I/O
        major_page_faults: Page faults requiring I/O
        swapped_out: Number of swaps
        fs_read: Block input operations
        fs_write: Block output operations
        ipc_sent: IPC messages sent
        ipc_received: IPC messages received
        signals_count: Signals received
        voluntary_context_switches: Voluntary context switches
        involuntary_context_switches: Involuntary context switches
        pid: Process id
        captured_at: ISO8601 timestamp of the capture (UTC)
    """

    user_cpu_time_us: int
    system_cpu_time_us: int
    max_rss_kb: int
    shared_memory_size: int
    unshared_data_size: int
    unshared_stack_size: int
    minor_page_faults: int
    major_page_faults: int
    swapped_out: int
    fs_read: int
    fs_write: int
    ipc_sent: int
    ipc_received: int
    signals_count: int
    voluntary_context_switches: int
    involuntary_context_switches: int
    pid: int = field(default_factory=os.getpid)
    captured_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def capture_snapshot() -> ResourceSnapshot:
    """Capture resource usage of the current process."""
    usage = resource.getrusage(resource.RUSAGE_SELF)
    return ResourceSnapshot(
        user_cpu_time_us=_seconds_to_micros(usage.ru_utime),
        system_cpu_time_us=_seconds_to_micros(usage.ru_stime),
        max_rss_kb=usage.ru_maxrss,
        shared_memory_size=usage.ru_ixrss,
        unshared_data_size=usage.ru_idrss,
        unshared_stack_size=usage.ru_isrss,
        minor_page_faults=usage.ru_minflt,
        major_page_faults=usage.ru_majflt,
        swapped_out=usage.ru_nswap,
        fs_read=usage.ru_inblock,
        fs_write=usage.ru_oublock,
        ipc_sent=usage.ru_msgsnd,
        ipc_received=usage.ru_msgrcv,
        signals_count=usage.ru_nsignals,
        voluntary_context_switches=usage.ru_nvcsw,
        involuntary_context_switches=usage.ru_nivcsw,
    )


def clear_readiness(path: Path) -> None:
    """Remove a readiness file left behind by an earlier run.

    Raises:
        PersistenceError: if an existing file cannot be removed
    """
    path = Path(path)
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.error("readiness_clear_failed", path=str(path), error=str(exc))
        raise PersistenceError(
            message=f"Failed to remove stale readiness file {path}",
            path=path,
            error_details=str(exc),
        ) from exc


def write_readiness(path: Path) -> ResourceSnapshot:
    """Write a fresh resource snapshot to `path` atomically.

    The JSON document is written to a temporary file in the target
    directory and then renamed over `path`, so readers never observe a
    partially written file. The parent directory must already exist.

    Args:
        path: Readiness file location

    Returns:
        The snapshot that was written

    Raises:
        PersistenceError: if the file cannot be written
    """
    path = Path(path)
    snapshot = capture_snapshot()
    payload = json.dumps(snapshot.to_dict())

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_name = fh.name
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        logger.error("readiness_write_failed", path=str(path), error=str(exc))
        raise PersistenceError(
            message=f"Failed to write readiness file {path}",
            path=path,
            error_details=str(exc),
        ) from exc

    logger.info(
        "readiness_written",
        path=str(path),
        max_rss_kb=snapshot.max_rss_kb,
        user_cpu_time_us=snapshot.user_cpu_time_us,
    )
    return snapshot


__all__ = ["ResourceSnapshot", "capture_snapshot", "clear_readiness", "write_readiness"]
