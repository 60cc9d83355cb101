"""
Performance Monitor

Reports memory usage of the current process so large exports
(high scale factors, tall documents) show up in the log.
"""

from typing import Optional

import psutil


class PerformanceMonitor:
    """Monitors RAM usage of the current process."""

    def __init__(self):
        """Initialize performance monitor."""
        try:
            self.process: Optional[psutil.Process] = psutil.Process()
        except psutil.Error:
            self.process = None

    def is_available(self) -> bool:
        """Check if performance monitoring is available."""
        return self.process is not None

    def get_memory_mb(self) -> Optional[float]:
        """
        Get current memory usage in MB.

        Uses RSS (Resident Set Size) - actual physical RAM used by process.

        Returns:
            Memory usage in MB or None if unavailable
        """
        if not self.is_available():
            return None

        try:
            mem_bytes = self.process.memory_info().rss
            return mem_bytes / (1024 * 1024)
        except psutil.Error:
            return None

    @staticmethod
    def format_memory(mb: Optional[float]) -> str:
        """
        Format memory value for human-readable display.

        Args:
            mb: Memory in megabytes (None = unavailable)

        Returns:
            Formatted string like "234 MB" or "1.2 GB"
        """
        if mb is None:
            return "n/a"
        if mb >= 1024:
            return f"{mb / 1024:.1f} GB"
        return f"{int(mb)} MB"
