"""Timing utilities for performance monitoring."""
import time
from airport_lookup.utils.logging import log_structured


class Timer:
    """Context manager for timing code blocks.

    Extra fields set via ``fields`` (e.g. the tier that answered) are
    included in the completion log line.
    """

    def __init__(self, operation: str, level: str = "info", **fields):
        """
        Initialize timer.

        Args:
            operation: Name of the operation being timed
            level: Log level for the completion line
            **fields: Structured fields logged on exit
        """
        self.operation = operation
        self.level = level
        self.fields = dict(fields)
        self.start = None
        self.elapsed_ms = None

    def __enter__(self):
        self.start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.elapsed_ms = (time.perf_counter() - self.start) * 1000
        log_structured(
            self.level,
            f"Operation {self.operation} completed",
            operation=self.operation,
            elapsed_ms=round(self.elapsed_ms, 2),
            failed=exc_type is not None,
            **self.fields
        )
        return False
