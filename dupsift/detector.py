"""
Duplicate file detection with prefix screening and content confirmation.

Stage 1: Group files by size and a digest of their first bytes
Stage 2: Drop groups with a single member
Stage 3: Hash full contents of the survivors in parallel
Stage 4: Regroup by content digest and drop singletons
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .config import DetectorConfig
from .formatter import summarize
from .models import FileRecord
from .parallel_hasher import ConfirmationHasher
from .store import CONTENT_DIGEST, CandidateStore

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


@dataclass
class DetectionResult:
    """Every store built during a run, from first screening to final groups."""
    prefix_store: CandidateStore
    screened_store: CandidateStore
    confirmed_store: CandidateStore
    duplicates: CandidateStore
    failures: List[Tuple[str, str]] = field(default_factory=list)
    warning_counts: Dict[str, int] = field(default_factory=dict)

    def duplicate_groups(self) -> List[List[FileRecord]]:
        return self.duplicates.groups()


def resolve_duplicates(records: Iterable[FileRecord]) -> Tuple[CandidateStore, CandidateStore]:
    """
    Regroup confirmed records by content digest.

    Returns:
        Tuple of (confirmed_store, duplicates) where duplicates holds only
        groups of two or more byte-identical files
    """
    confirmed = CandidateStore(CONTENT_DIGEST)
    for record in records:
        confirmed.add_record(record)
    return confirmed, confirmed.prune()


def build_prefix_store(
    paths: Iterable[str],
    config: DetectorConfig,
    failures: List[Tuple[str, str]],
) -> CandidateStore:
    """
    Insert every path into a new prefix-tier store.

    With config.fail_fast unset, unreadable files are appended to failures
    and skipped instead of stopping the run.
    """
    return CandidateStore.from_paths(
        paths,
        config.prefix_bytes,
        workers=config.scan_workers,
        quiet=config.quiet,
        failures=None if config.fail_fast else failures,
    )


def find_duplicates(
    paths: Iterable[str],
    config: Optional[DetectorConfig] = None,
    reporter: Optional[Reporter] = print,
    hasher: Optional[ConfirmationHasher] = None,
    report_final: bool = True,
) -> DetectionResult:
    """
    Find sets of byte-identical files among paths.

    A summary line goes to reporter after initial grouping, after prefix
    pruning and after confirmation; with config.summary_only only the last
    one is sent. Callers that print the final summary themselves, after
    their own listing, pass report_final=False.

    Args:
        paths: Regular files to compare
        config: Run options (defaults to DetectorConfig())
        reporter: Receives summary strings, or None for no reporting
        hasher: Confirmation hasher to use (built from config when omitted)
        report_final: Send the post-confirmation summary to reporter

    Returns:
        DetectionResult with the final duplicate groups in result.duplicates

    Raises:
        AccessError: A file could not be read and config.fail_fast is set
        DuplicatePathError: The same path appears twice in paths
    """
    if config is None:
        config = DetectorConfig()

    def report(store: CandidateStore, final: bool = False) -> None:
        if reporter is None:
            return
        if (final and report_final) or (not final and not config.summary_only):
            reporter(summarize(store))

    failures: List[Tuple[str, str]] = []

    prefix_store = build_prefix_store(paths, config, failures)
    report(prefix_store)
    logger.debug("%d empty files found", len(prefix_store.empty_file_records()))

    screened = prefix_store.prune()
    report(screened)

    if hasher is None:
        hasher = ConfirmationHasher(workers=config.workers, fail_fast=config.fail_fast, quiet=config.quiet)
    hashing = hasher.confirm(screened)
    failures.extend(hashing.failures)

    confirmed, duplicates = resolve_duplicates(hashing.records)
    report(duplicates, final=True)

    return DetectionResult(
        prefix_store=prefix_store,
        screened_store=screened,
        confirmed_store=confirmed,
        duplicates=duplicates,
        failures=failures,
        warning_counts=hashing.warning_counts,
    )
