"""Console logging utilities for running CHIP-8 programs.

Provides a small levelled console logger, a run logger that reports ROM
loading, throughput and faults, and real-time tqdm progress bars for jitted
``jax.lax.scan`` loops using ``io_callback``.
"""

import time
import sys
from typing import Any, Callable, Dict, Optional, Tuple

import jax
from jax.experimental import io_callback

from tqdm import tqdm


class ConsoleLogger:
    """Console logger with levels, colours and elapsed-time stamps."""

    LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    def __init__(
        self,
        name: str = "chipcore",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in self.LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(self.LEVELS)}")
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = {
            "DEBUG": "\033[36m",
            "INFO": "\033[32m",
            "WARNING": "\033[33m",
            "ERROR": "\033[31m",
            "CRITICAL": "\033[35m",
            "RESET": "\033[0m",
        }
        self.level_order = {level: rank for rank, level in enumerate(self.LEVELS)}

    def _should_log(self, level: str) -> bool:
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            level_str = f"{self.colors.get(level.upper(), '')}{level_str}{self.colors['RESET']}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class RunLogger(ConsoleLogger):
    """Logger for an emulation run: ROM loading, throughput and faults."""

    def __init__(self, name: str = "Run", report_interval: float = 5.0, **kwargs):
        super().__init__(name, **kwargs)
        self.report_interval = report_interval
        self.total_steps = 0
        self._last_report_time = self.start_time
        self._last_report_steps = 0

    def log_rom_loaded(self, path: str, size: int):
        self.info(f"Loaded {path} ({size} bytes)")

    def log_run_start(self, config: Dict[str, Any]):
        """Log run configuration."""
        self.info("=" * 60)
        self.info("Starting run with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)
        self.start_time = time.time()
        self._last_report_time = self.start_time

    def log_steps(self, steps: int):
        """Account for executed steps, reporting throughput every ``report_interval`` seconds."""
        self.total_steps += steps
        now = time.time()
        elapsed = now - self._last_report_time
        if elapsed > 0 and elapsed >= self.report_interval:
            rate = (self.total_steps - self._last_report_steps) / elapsed
            self.info(f"{self.total_steps:,} steps | {rate:,.0f} steps/s")
            self._last_report_time = now
            self._last_report_steps = self.total_steps

    def log_fault(self, error: Exception):
        self.critical(f"Machine halted: {error}")

    def log_run_end(self):
        elapsed = time.time() - self.start_time
        rate = self.total_steps / elapsed if elapsed > 0 else 0.0
        self.info(f"Run finished after {self.total_steps:,} steps in {elapsed:.1f}s ({rate:,.0f} steps/s)")


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: Optional[str] = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar callbacks for a jitted loop of ``n`` iterations."""
    if desc is None:
        desc = f"Running ({n:,} steps)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    remainder = n % print_rate
    # Iteration at which the last partial chunk is reported
    last_chunk_start = n - remainder if remainder else n - print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="step", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_update_tqdm, None, n - last_chunk_start, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: Optional[str] = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator adding a real-time progress bar to a ``jax.lax.scan`` body.

    The scanned ``xs`` must be the iteration counter (or a tuple starting with it).
    """
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
