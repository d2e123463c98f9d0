"""
File identity and content digests.

Both tiers use XXH64, a fast 64-bit non-cryptographic hash. Two different
files of equal size whose prefix and full contents both collide would be
reported as duplicates; this is an accepted tradeoff for speed.
"""

import logging
import os

import xxhash

from .config import DEFAULT_PREFIX_BYTES
from .errors import AccessError
from .models import FileRecord

logger = logging.getLogger(__name__)


def digest_bytes(data: bytes) -> int:
    """Return the 64-bit XXH64 digest of data."""
    return xxhash.xxh64(data).intdigest()


def extract_identity(path: str, prefix_bytes: int = DEFAULT_PREFIX_BYTES) -> FileRecord:
    """
    Characterize a file cheaply by its size and a digest of its first bytes.
    
    Args:
        path: Path to the file
        prefix_bytes: Number of leading bytes to digest
        
    Returns:
        FileRecord with size and prefix_digest set
        
    Raises:
        AccessError: If the file cannot be opened, stat'ed or read
    """
    if prefix_bytes <= 0:
        raise ValueError(f"prefix_bytes must be positive, got {prefix_bytes}")
    
    try:
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            # A file shorter than prefix_bytes is digested over what exists
            data = f.read(prefix_bytes)
    except OSError as e:
        raise AccessError(path, e.strerror or str(e)) from e
    
    return FileRecord(path=path, size=size, prefix_digest=digest_bytes(data))


def hash_full_contents(path: str) -> int:
    """
    Read a whole file into memory and return its content digest.
    
    Raises:
        AccessError: If the file cannot be read
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise AccessError(path, e.strerror or str(e)) from e
    
    logger.debug("Hashed %d bytes of %s", len(data), path)
    return digest_bytes(data)
