"""
Thread-safe grouping of file records by digest.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tqdm import tqdm

from .config import DEFAULT_PREFIX_BYTES
from .errors import AccessError, DuplicatePathError
from .hasher import extract_identity
from .models import FileRecord

logger = logging.getLogger(__name__)

PREFIX_DIGEST = "prefix_digest"
CONTENT_DIGEST = "content_digest"

GroupKey = Tuple[int, int]  # (size, digest)


class CandidateStore:
    """
    Groups of FileRecords sharing a digest, keyed by (size, digest).

    A store is keyed either by prefix digest or by content digest. All
    mutations and snapshots take the store's single lock, so concurrent
    insert() calls are safe and every aggregate query is consistent.
    """

    def __init__(self, digest_field: str = PREFIX_DIGEST, prefix_bytes: int = DEFAULT_PREFIX_BYTES):
        if digest_field not in (PREFIX_DIGEST, CONTENT_DIGEST):
            raise ValueError(f"Unknown digest field: {digest_field}")
        self.digest_field = digest_field
        self.prefix_bytes = prefix_bytes
        self._lock = threading.Lock()
        self._groups: Dict[GroupKey, List[FileRecord]] = {}
        self._paths: Set[str] = set()

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[str],
        prefix_bytes: int = DEFAULT_PREFIX_BYTES,
        workers: int = 1,
        quiet: bool = True,
        failures: Optional[List[Tuple[str, str]]] = None,
    ) -> "CandidateStore":
        """
        Build a prefix-digest store from a sequence of paths.

        With workers > 1 identity extraction runs on a thread pool; the
        resulting groups are the same as for sequential insertion.

        Args:
            paths: Files to characterize
            prefix_bytes: Leading bytes digested per file
            workers: Extraction threads
            quiet: Disable the progress bar
            failures: When given, unreadable files are appended here as
                (path, message) and skipped. Otherwise the first
                AccessError is raised.
        """
        store = cls(PREFIX_DIGEST, prefix_bytes)
        paths = list(paths)

        def insert(path: str) -> None:
            try:
                store.insert(path)
            except AccessError as e:
                if failures is None:
                    raise
                logger.warning("%s", e)
                failures.append((path, str(e)))

        if workers <= 1:
            for path in tqdm(paths, desc="Reading prefixes", unit=" files", leave=False, disable=quiet):
                insert(path)
            return store

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(insert, path) for path in paths]
            with tqdm(total=len(paths), desc="Reading prefixes", unit=" files", leave=False, disable=quiet) as pbar:
                try:
                    for future in as_completed(futures):
                        future.result()
                        pbar.update(1)
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise
        return store

    def _key(self, record: FileRecord) -> GroupKey:
        digest = getattr(record, self.digest_field)
        if digest is None:
            raise ValueError(f"Record {record.path} has no {self.digest_field}")
        return record.size, digest

    def contains(self, path: str) -> bool:
        """Return True if path was already added to this store."""
        with self._lock:
            return path in self._paths

    def __contains__(self, path: str) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return self.file_count()

    def insert(self, path: str) -> FileRecord:
        """
        Extract a file's identity and add it to its group.

        Raises:
            DuplicatePathError: If path was already inserted into this store
            AccessError: If the file cannot be read
        """
        # Cheap rejection before any I/O; re-checked under the lock below
        if self.contains(path):
            raise DuplicatePathError(path)
        record = extract_identity(path, self.prefix_bytes)
        self.add_record(record)
        return record

    def add_record(self, record: FileRecord) -> None:
        """
        Add an already characterized record to its group.

        Raises:
            DuplicatePathError: If the record's path is already in this store
            ValueError: If the record has no value for this store's digest
        """
        key = self._key(record)
        with self._lock:
            if record.path in self._paths:
                raise DuplicatePathError(record.path)
            self._paths.add(record.path)
            self._groups.setdefault(key, []).append(record)
        logger.debug("Added %s to group %016x (%d bytes)", record.path, key[1], key[0])

    def prune(self) -> "CandidateStore":
        """Return a new store holding only groups with two or more records."""
        pruned = CandidateStore(self.digest_field, self.prefix_bytes)
        with self._lock:
            for key, group in self._groups.items():
                if len(group) > 1:
                    pruned._groups[key] = list(group)
                    pruned._paths.update(record.path for record in group)
        return pruned

    def groups(self) -> List[List[FileRecord]]:
        """Snapshot of every group, each as a new list."""
        with self._lock:
            return [list(group) for group in self._groups.values()]

    def keyed_groups(self) -> List[Tuple[GroupKey, List[FileRecord]]]:
        with self._lock:
            return [(key, list(group)) for key, group in self._groups.items()]

    def all_records(self) -> List[FileRecord]:
        with self._lock:
            return [record for group in self._groups.values() for record in group]

    def empty_file_records(self) -> List[FileRecord]:
        """Records of zero-byte files."""
        with self._lock:
            return [record for group in self._groups.values() for record in group if record.is_empty]

    def file_count(self) -> int:
        with self._lock:
            return sum(len(group) for group in self._groups.values())

    def group_count(self) -> int:
        with self._lock:
            return len(self._groups)

    def total_duplicated_bytes(self) -> int:
        """
        Bytes taken by the extra copies in every group.

        Each group counts (len(group) - 1) times its first member's size. At
        the prefix tier this is an estimate; at the content tier it is exact.
        """
        with self._lock:
            return sum((len(group) - 1) * group[0].size for group in self._groups.values())

    def stats(self) -> Tuple[int, int, int]:
        """(file_count, group_count, total_duplicated_bytes) from one snapshot."""
        with self._lock:
            files = sum(len(group) for group in self._groups.values())
            duplicated = sum((len(group) - 1) * group[0].size for group in self._groups.values())
            return files, len(self._groups), duplicated

    def __repr__(self) -> str:
        files, groups, _ = self.stats()
        return f"CandidateStore(digest_field={self.digest_field!r}, files={files}, groups={groups})"

