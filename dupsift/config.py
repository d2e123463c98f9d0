"""
Run configuration for the detection pipeline.
"""

import os
from dataclasses import dataclass, field

DEFAULT_PREFIX_BYTES = 4096


def default_worker_count() -> int:
    """Size of the confirmation pool: twice the available CPUs."""
    return 2 * (os.cpu_count() or 1)


@dataclass
class DetectorConfig:
    """Options recognised by find_duplicates()."""
    prefix_bytes: int = DEFAULT_PREFIX_BYTES  # bytes read per file for screening
    workers: int = field(default_factory=default_worker_count)
    summary_only: bool = False  # report only the final checkpoint
    fail_fast: bool = True
    scan_workers: int = 1  # threads used for identity extraction
    quiet: bool = False  # disable progress bars

    def __post_init__(self):
        if self.prefix_bytes <= 0:
            raise ValueError(f"prefix_bytes must be positive, got {self.prefix_bytes}")
        if self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        if self.scan_workers <= 0:
            raise ValueError(f"scan_workers must be positive, got {self.scan_workers}")
