"""Console logging utilities for chip8vm.

A small leveled console logger used by the driver and the CLI, plus real-time
tqdm progress bars for compiled ``jax.lax.scan`` runs through ``io_callback``.
"""

import time
import sys
from typing import Callable, Optional

import jax
from jax.experimental import io_callback

from tqdm import tqdm


class ConsoleLogger:
    """Leveled console logger with optional colors and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.stream = stream if stream is not None else sys.stdout
        self.use_colors = (
            use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m"
            }
            if self.use_colors
            else {
                k: ""
                for k in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "RESET"]
            }
        )

        self.level_order = {
            "DEBUG": 0,
            "INFO": 1,
            "WARNING": 2,
            "ERROR": 3,
            "CRITICAL": 4,
        }
        if self.log_level not in self.level_order:
            raise ValueError(
                f"Unknown log level '{log_level}'. Available: {list(self.level_order.keys())}"
            )

    def is_enabled_for(self, level: str) -> bool:
        """Check if message should be logged based on current log level."""
        return self.level_order.get(level.upper(), 1) >= self.level_order[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        """Format log message with timestamp, level, and colors."""
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        name_str = f"[{self.name}]"

        if self.use_colors:
            color = self.colors.get(level.upper(), "")
            reset = self.colors["RESET"]
            level_str = f"{color}{level_str}{reset}"

        return f"{timestamp}{level_str}{name_str} {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self.is_enabled_for(level):
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


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Callable:
    """Build a traceable ``report(iter_num)`` driving a host-side tqdm bar.

    The bar opens on iteration 0, catches up every ``print_rate`` iterations
    and closes after iteration ``n - 1``. Other iterations never leave the
    device.
    """
    if desc is None:
        desc = f"Running ({n:,} steps)"
    for reserved in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(reserved, None)
    if print_rate is None:
        print_rate = min(n // 20, 50)
    print_rate = max(1, min(print_rate, n))

    bars = {}

    def _host_report(iter_num):
        done = int(iter_num) + 1
        if "bar" not in bars:
            bars["bar"] = tqdm(total=n, desc=desc, unit="step", **kwargs)
        bar = bars["bar"]
        bar.update(done - bar.n)
        if done >= n:
            bars.pop("bar").close()

    def report(iter_num):
        due = (iter_num == 0) | ((iter_num + 1) % print_rate == 0) | (iter_num == n - 1)
        jax.lax.cond(
            due,
            lambda i: io_callback(_host_report, None, i, ordered=True),
            lambda i: None,
            iter_num,
        )

    return report


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Wrap a ``jax.lax.scan`` body so each iteration reports to a tqdm bar.

    The scanned ``xs`` must carry the iteration number, either directly
    (``jnp.arange(n)``) or as the first element of a tuple.
    """
    report = build_tqdm_progress_bar(n, print_rate, desc, **tqdm_kwargs)

    def decorator(body):
        def body_with_progress(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x
            result = body(carry, x)
            report(iter_num)
            return result

        return body_with_progress

    return decorator
