"""Sampling of CPU, memory and disk usage and a combined load rate."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

import psutil

from matrixkit import logx

COLLECT_FREQ = 5.0
MAX_DISK_USAGE = 95
_SATURATED = 98
_FULL_LOAD = 100.0


@dataclass(frozen=True)
class SystemMetrics:
    """One sample of usage percentages."""

    cpu_usage: float
    memory_usage: float
    disk_usage: float


@dataclass
class LoadCalculator:
    """Keeps the most recent ``sample_size`` samples and derives a load rate.

    A sample size of 0 or less keeps nothing.
    """

    sample_size: int
    metrics: list[SystemMetrics] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    def collect_metrics(self) -> None:
        """Take one sample, measuring CPU over COLLECT_FREQ seconds.

        Failures to read any figure are reported and the sample is dropped.
        """
        try:
            cpu_usage = float(psutil.cpu_percent(interval=COLLECT_FREQ, percpu=False))
        except (OSError, psutil.Error) as exc:
            logx.error("Error collecting CPU usage:", exc)
            return
        try:
            memory_usage = float(psutil.virtual_memory().percent)
        except (OSError, psutil.Error) as exc:
            logx.error("Error collecting memory usage:", exc)
            return
        try:
            disk_usage = float(psutil.disk_usage("/").percent)
        except (OSError, psutil.Error) as exc:
            logx.error("Error collecting disk usage:", exc)
            return
        sample = SystemMetrics(cpu_usage, memory_usage, disk_usage)
        with self._lock:
            if self.sample_size > 1:
                if len(self.metrics) >= self.sample_size:
                    self.metrics = self.metrics[1:]
            elif self.sample_size == 1:
                self.metrics = []
            else:
                return
            self.metrics.append(sample)

    def calculate_load_rate(self) -> float:
        """Average of mean CPU and mean memory usage, in percent.

        Returns 0 with no samples, and 100 when mean CPU or memory usage
        reaches 98% or the latest disk usage reaches MAX_DISK_USAGE.
        """
        with self._lock:
            samples = list(self.metrics)
        if not samples:
            return 0.0
        count = len(samples)
        total_cpu = sum(sample.cpu_usage for sample in samples)
        total_memory = sum(sample.memory_usage for sample in samples)
        if total_cpu / count >= _SATURATED or total_memory / count >= _SATURATED:
            return _FULL_LOAD
        if samples[-1].disk_usage >= MAX_DISK_USAGE:
            return _FULL_LOAD
        return ((total_cpu + total_memory) / 2) / count

    def _run(self) -> None:
        stopped = threading.Event()
        while True:
            self.collect_metrics()
            stopped.wait(COLLECT_FREQ)

    def start(self) -> None:
        """Start sampling in a background daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._run, name="load-calculator", daemon=True)
        self._thread.start()


_calculator: LoadCalculator | None = None
_init_lock = threading.Lock()


def init(sample_size: int) -> LoadCalculator:
    """Create and start the shared calculator once; later calls return it unchanged."""
    global _calculator
    with _init_lock:
        if _calculator is None:
            _calculator = LoadCalculator(sample_size)
            _calculator.start()
        return _calculator


def get_load_rate() -> float:
    """Load rate of the shared calculator; 0 before :func:`init`."""
    if _calculator is None:
        return 0.0
    return _calculator.calculate_load_rate()