"""
Stage Timing

Wall time per pipeline stage, shared by the renderer and the GPU blur
context. Renders may run on several threads against one collector.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class StageStat:
    seconds: float = 0.0
    count: int = 0

    def as_row(self) -> Dict[str, float]:
        return {
            'total_ms': self.seconds * 1000,
            'avg_ms': self.seconds * 1000 / self.count if self.count else 0.0,
            'count': self.count,
        }


class StageTimings:
    """Thread-safe accumulator of seconds and call counts keyed by stage"""

    def __init__(self):
        self._stats: Dict[str, StageStat] = defaultdict(StageStat)
        self._lock = threading.Lock()

    def add(self, stage: str, seconds: float) -> None:
        with self._lock:
            stat = self._stats[stage]
            stat.seconds += seconds
            stat.count += 1

    def summary(self) -> Dict[str, Dict[str, float]]:
        """Rows of total_ms, avg_ms and count per stage"""
        with self._lock:
            return {stage: stat.as_row() for stage, stat in self._stats.items()}

    def clear(self) -> None:
        with self._lock:
            self._stats.clear()


@contextmanager
def time_stage(timings: Optional[StageTimings], stage: str):
    """Add the wall time of the block to `timings`, even if it raises

    A None collector makes this a no-op so callers need not branch.
    """
    if timings is None:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        timings.add(stage, time.perf_counter() - start)


def format_timing_summary(summary: Dict[str, Dict[str, float]], title: str = "Render Timing Summary") -> str:
    """Format a timing summary as a fixed-width table, slowest stage first"""
    if not summary:
        return f"{title}: No timing data collected"

    lines = [
        '=' * 70,
        title,
        '=' * 70,
        f"{'Stage':<35} {'Total (ms)':>12} {'Avg (ms)':>12} {'Count':>8}",
        '-' * 70,
    ]
    for stage, row in sorted(summary.items(), key=lambda item: item[1]['total_ms'], reverse=True):
        lines.append(f"{stage:<35} {row['total_ms']:>12.3f} {row['avg_ms']:>12.4f} {row['count']:>8}")
    lines.append('=' * 70)
    return '\n'.join(lines)
