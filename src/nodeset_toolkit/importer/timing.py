"""
Module: importer.timing

Purpose:
    Timing instrumentation for the import pipeline, to spot slow files
    and slow phases (validation, checksum, parsing).

Key Classes:
    - TimingLog: Collects per-file phase durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Used By:
    - importer.pipeline: Main import orchestrator
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Tuple


@dataclass
class TimingLog:
    """
    Timing metrics for one import batch.

    Attributes:
        file_timings: Dict of file_name -> {phase_name -> duration_seconds}

    Example:
        >>> log = TimingLog()
        >>> log.log_file("Boiler.NodeSet2.xml", "parse", 0.042)
        >>> log.get_file_total("Boiler.NodeSet2.xml")
        0.042
    """
    file_timings: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def log_file(self, file_name: str, phase: str, duration: float) -> None:
        """Log a file-level timing metric."""
        self.file_timings.setdefault(file_name, {})[phase] = duration

    def get_file_total(self, file_name: str) -> float:
        """Get total time spent on a file."""
        return sum(self.file_timings.get(file_name, {}).values())

    def get_slowest_files(self, n: int = 3) -> List[Tuple[str, float]]:
        """Get the N slowest files with their total time."""
        totals = [(name, sum(phases.values())) for name, phases in self.file_timings.items()]
        totals.sort(key=lambda x: x[1], reverse=True)
        return totals[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Import Timing Summary ==="]
        for name, phases in self.file_timings.items():
            lines.append(f"{name}:")
            for phase, duration in phases.items():
                lines.append(f"  {phase:25s} {duration:.3f}s")
        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_timings": self.file_timings,
            "slowest_files": [
                {"file": name, "total": total} for name, total in self.get_slowest_files(5)
            ],
        }


@contextmanager
def timed_phase(log: TimingLog, phase: str, file_name: str) -> Generator[None, None, None]:
    """
    Time a block and record it against ``file_name``.

    The duration is recorded even when the block raises.

    Example:
        >>> with timed_phase(log, "validate", "a.xml"):
        ...     validate_xml(text)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        log.log_file(file_name, phase, time.perf_counter() - start)
