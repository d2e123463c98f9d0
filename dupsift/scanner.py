"""
Path sources: directory walking and line-oriented path input.
"""

import logging
import os
import stat
from typing import Dict, Iterator, List, TextIO

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ScanResult:
    """Container for scan results and warnings."""

    def __init__(self):
        self.files: List[str] = []
        self.warnings: List[str] = []
        self.skipped_items: Dict[str, int] = {
            'permission_denied': 0,
            'symlinks': 0,
            'special_files': 0,
            'other_errors': 0
        }


def scan_directory(directory: str, quiet: bool = False) -> List[str]:
    """
    Recursively collect regular files beneath a directory.

    Symbolic links are never followed or returned. Warnings for skipped
    items are logged once the walk finishes.

    Args:
        directory: Directory to scan
        quiet: Disable the progress bar

    Returns:
        Paths of all regular files found, in walk order
    """
    result = scan_directory_detailed(directory, quiet=quiet)

    if result.warnings:
        logger.warning("Scan completed with %d warnings:", len(result.warnings))
        for warning in result.warnings[:5]:
            logger.warning("  • %s", warning)
        if len(result.warnings) > 5:
            logger.warning("  • ... and %d more warnings", len(result.warnings) - 5)

    total_skipped = sum(result.skipped_items.values())
    if total_skipped > 0:
        logger.info("Skipped %d items:", total_skipped)
        for item_type, count in result.skipped_items.items():
            if count > 0:
                logger.info("  • %s: %d", item_type.replace('_', ' ').title(), count)

    return result.files


def scan_directory_detailed(directory: str, quiet: bool = False) -> ScanResult:
    """
    Walk a directory tree with per-item error tracking.

    Unreadable directories are skipped and recorded, never fatal.
    """
    result = ScanResult()

    def on_error(error: OSError) -> None:
        if isinstance(error, PermissionError):
            result.skipped_items['permission_denied'] += 1
        else:
            result.skipped_items['other_errors'] += 1
        result.warnings.append(f"Cannot read directory {error.filename}: {error.strerror}")

    with tqdm(desc="Scanning", unit=" files", leave=False, disable=quiet) as pbar:
        for dirpath, dirnames, filenames in os.walk(directory, onerror=on_error, followlinks=False):
            # Keep symlinked directories out of the walk and count them
            for name in list(dirnames):
                if os.path.islink(os.path.join(dirpath, name)):
                    dirnames.remove(name)
                    result.skipped_items['symlinks'] += 1
            dirnames.sort()

            for name in sorted(filenames):
                _process_item(os.path.join(dirpath, name), result)
                pbar.update(1)

    return result


def _process_item(path: str, result: ScanResult) -> None:
    """Keep path if it is a regular file that is not a symlink."""
    try:
        mode = os.lstat(path).st_mode
    except PermissionError as e:
        result.warnings.append(f"Permission denied: {path} ({e.strerror})")
        result.skipped_items['permission_denied'] += 1
        return
    except OSError as e:
        result.warnings.append(f"OS error processing {path}: {e.strerror}")
        result.skipped_items['other_errors'] += 1
        return

    if stat.S_ISLNK(mode):
        result.skipped_items['symlinks'] += 1
    elif stat.S_ISREG(mode):
        result.files.append(path)
    else:
        # FIFOs, sockets, device nodes
        result.skipped_items['special_files'] += 1


def read_paths(stream: TextIO) -> Iterator[str]:
    """Yield one path per non-blank line of a text stream."""
    for line in stream:
        path = line.rstrip("\r\n")
        if path.strip():
            yield path
