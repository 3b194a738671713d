"""Process memory probe shared by the pool status report and the governor."""

import psutil


def process_memory_usage() -> int:
    """Resident set size of the current process, in bytes."""
    return psutil.Process().memory_info().rss
