"""
dupsift - find duplicate files by prefix screening and parallel content confirmation.
"""

from .config import DetectorConfig
from .detector import DetectionResult, find_duplicates, resolve_duplicates
from .errors import AccessError, DuplicatePathError, DupsiftError, HashingCancelled
from .hasher import extract_identity, hash_full_contents
from .models import FileRecord
from .parallel_hasher import ConfirmationHasher
from .store import CandidateStore

__version__ = "1.0.0"

__all__ = [
    "AccessError",
    "CandidateStore",
    "ConfirmationHasher",
    "DetectionResult",
    "DetectorConfig",
    "DuplicatePathError",
    "DupsiftError",
    "FileRecord",
    "HashingCancelled",
    "extract_identity",
    "find_duplicates",
    "hash_full_contents",
    "resolve_duplicates",
]
