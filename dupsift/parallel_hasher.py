"""
Parallel full-content hashing of screened candidates.

A feeder thread fills a bounded task queue, a fixed pool of worker threads
reads and digests each file, and the calling thread drains a result queue.
A closer thread joins every worker before closing the result queue, so the
consumer sees the closing sentinel only after all results.
"""

import logging
import queue
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import default_worker_count
from .errors import AccessError, HashingCancelled
from .hasher import hash_full_contents
from .models import FileRecord
from .store import CandidateStore

logger = logging.getLogger(__name__)

# Seconds a blocked queue operation waits before re-checking for cancellation
_POLL_INTERVAL = 0.05

_MAX_WARNINGS_PER_TYPE = 5

_CLOSED = object()


@dataclass
class HashingResult:
    """Records that received a content digest and the files that failed."""
    records: List[FileRecord] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    warning_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class _Failure:
    record: FileRecord
    error: AccessError


class ConfirmationHasher:
    """
    Fixed-size pool of worker threads computing content digests.

    Args:
        workers: Number of worker threads (default: twice the CPU count)
        fail_fast: Stop the whole run on the first unreadable file. When
            False, failures are collected and hashing continues.
        quiet: Disable the progress bar
        queue_size: Capacity of the task queue (default: 2 * workers)
    """

    def __init__(
        self,
        workers: Optional[int] = None,
        fail_fast: bool = True,
        quiet: bool = True,
        queue_size: Optional[int] = None,
    ):
        self.workers = workers if workers is not None else default_worker_count()
        if self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        self.fail_fast = fail_fast
        self.quiet = quiet
        self.queue_size = queue_size or 2 * self.workers
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Ask every running thread to stop at its next check point."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _put(self, q: queue.Queue, item) -> bool:
        """Blocking put that gives up once cancelled."""
        while not self._cancel.is_set():
            try:
                q.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def _feed(self, records: List[FileRecord], tasks: queue.Queue, worker_count: int) -> None:
        for record in records:
            if not self._put(tasks, record):
                return
        # One sentinel per worker closes the task queue
        for _ in range(worker_count):
            if not self._put(tasks, _CLOSED):
                return

    def _work(self, tasks: queue.Queue, results: queue.Queue) -> None:
        while not self._cancel.is_set():
            try:
                record = tasks.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            if record is _CLOSED or self._cancel.is_set():
                return
            try:
                digest = hash_full_contents(record.path)
            except AccessError as e:
                results.put(_Failure(record, e))
                if self.fail_fast:
                    return
                continue
            # Screening stores keep their records; only the copy carries the digest
            results.put(replace(record, content_digest=digest))

    def _close_when_done(self, workers: List[threading.Thread], results: queue.Queue) -> None:
        for worker in workers:
            worker.join()
        results.put(_CLOSED)

    def confirm(self, store: CandidateStore) -> HashingResult:
        """
        Compute the content digest of every record in a pruned store.

        Args:
            store: Prefix-tier store, already pruned to groups of two or more

        Returns:
            HashingResult with the digested records in completion order

        Raises:
            AccessError: A file could not be read and fail_fast is set
            HashingCancelled: cancel() was called before hashing finished
        """
        try:
            return self._confirm(store)
        finally:
            # Ready for another run
            self._cancel.clear()

    def _confirm(self, store: CandidateStore) -> HashingResult:
        records = store.all_records()
        result = HashingResult()
        if self._cancel.is_set():
            raise HashingCancelled("Hashing cancelled before it started")
        if not records:
            return result

        tasks: queue.Queue = queue.Queue(maxsize=self.queue_size)
        results: queue.Queue = queue.Queue()

        workers = [
            threading.Thread(target=self._work, args=(tasks, results), name=f"dupsift-hasher-{i}", daemon=True)
            for i in range(min(self.workers, len(records)))
        ]
        feeder = threading.Thread(
            target=self._feed, args=(records, tasks, len(workers)), name="dupsift-feeder", daemon=True
        )
        closer = threading.Thread(target=self._close_when_done, args=(workers, results), name="dupsift-closer", daemon=True)

        logger.debug("Confirming %d files with %d workers", len(records), len(workers))
        feeder.start()
        for worker in workers:
            worker.start()
        closer.start()

        first_error: Optional[AccessError] = None
        try:
            with tqdm(total=len(records), desc="Full hashing", unit=" files", leave=False, disable=self.quiet) as pbar:
                while True:
                    try:
                        item = results.get(timeout=_POLL_INTERVAL)
                    except queue.Empty:
                        continue
                    if item is _CLOSED:
                        break
                    pbar.update(1)
                    if isinstance(item, _Failure):
                        if self.fail_fast:
                            if first_error is None:
                                first_error = item.error
                            self.cancel()
                        else:
                            self._record_failure(result, item)
                        continue
                    result.records.append(item)
        except BaseException:
            self.cancel()
            raise
        finally:
            closer.join()
            feeder.join()

        if first_error is not None:
            raise first_error
        if self._cancel.is_set():
            raise HashingCancelled(f"Hashing cancelled after {len(result.records)} of {len(records)} files")
        return result

    def _record_failure(self, result: HashingResult, failure: _Failure) -> None:
        """Keep a failure and log it, rate limited per kind of error."""
        cause = failure.error.__cause__
        if isinstance(cause, PermissionError):
            kind = "permission_denied"
        elif isinstance(cause, FileNotFoundError):
            kind = "file_not_found"
        else:
            kind = "io_errors"

        result.failures.append((failure.record.path, str(failure.error)))
        count = result.warning_counts.get(kind, 0)
        result.warning_counts[kind] = count + 1

        if count < _MAX_WARNINGS_PER_TYPE:
            logger.warning("%s", failure.error)
        elif count == _MAX_WARNINGS_PER_TYPE:
            warning_name = kind.replace("_", " ").title()
            logger.warning("%s: Additional warnings suppressed...", warning_name)
