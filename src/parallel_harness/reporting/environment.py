"""Description of the machine a comparison ran on."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import multiprocessing
import platform

import psutil

import parallel_harness


@dataclass(frozen=True)
class EnvironmentInfo:
    """Information about the benchmark environment.

    Attributes:
        timestamp: When the comparison was run.
        platform: Operating system info.
        python_version: Python version.
        cpu_info: CPU information.
        cpu_count: Number of logical CPU cores.
        memory_gb: Total memory in GB.
        start_methods: Process start methods the platform supports.
        harness_version: parallel-harness version.
    """

    timestamp: str
    platform: str
    python_version: str
    cpu_info: str
    cpu_count: int
    memory_gb: float
    start_methods: tuple[str, ...]
    harness_version: str


def get_environment_info() -> EnvironmentInfo:
    """Collect information about the benchmark environment.

    Returns:
        EnvironmentInfo with system details.
    """
    return EnvironmentInfo(
        timestamp=datetime.now().isoformat(timespec='seconds'),
        platform=f'{platform.system()} {platform.release()}',
        python_version=platform.python_version(),
        cpu_info=platform.processor() or platform.machine(),
        cpu_count=psutil.cpu_count(logical=True) or 1,
        memory_gb=round(psutil.virtual_memory().total / (1024**3), 1),
        start_methods=tuple(multiprocessing.get_all_start_methods()),
        harness_version=parallel_harness.__version__,
    )
