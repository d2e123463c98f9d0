"""
Data model shared by all detection stages.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class FileRecord:
    """Identity of one file under consideration."""
    path: str
    size: int
    prefix_digest: int
    content_digest: Optional[int] = None  # set only by the confirmation stage

    @property
    def is_empty(self) -> bool:
        return self.size == 0
