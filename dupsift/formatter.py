"""
Output formatting for duplicate detection results.
"""

import json
from typing import TYPE_CHECKING, List, Tuple

from .store import CandidateStore

if TYPE_CHECKING:
    from .detector import DetectionResult

MEGABYTE = 1024 * 1024


def summarize(store: CandidateStore) -> str:
    """One-line checkpoint summary of a store."""
    files, groups, duplicated = store.stats()
    return f"{files} files (in {groups} sets), occupying {duplicated // MEGABYTE} megabytes"


def _format_file_size(size: int) -> str:
    """Format file size in human-readable format."""
    if size < 1024:
        return f"{size} bytes"
    elif size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    elif size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    else:
        return f"{size / (1024 * 1024 * 1024):.1f} GB"


def _sorted_groups(store: CandidateStore) -> List[Tuple[Tuple[int, int], List[str]]]:
    """Groups largest first, paths sorted within each group."""
    keyed = [(key, sorted(record.path for record in group)) for key, group in store.keyed_groups()]
    return sorted(keyed, key=lambda item: (-item[0][0], item[1]))


def format_output(result: "DetectionResult") -> str:
    """Render the final duplicate groups and any unreadable files as text."""
    lines = []

    groups = _sorted_groups(result.duplicates)
    if groups:
        lines.append("=" * 60)
        lines.append("DUPLICATE FILES FOUND")
        lines.append("=" * 60)
        for group_num, ((size, digest), paths) in enumerate(groups, 1):
            lines.append("")
            lines.append(f"GROUP {group_num}: {len(paths)} identical files ({_format_file_size(size)} each)")
            lines.append(f"   Digest: {digest:016x}")
            for path in paths:
                lines.append(f"   • {path}")
            if size > 0:
                lines.append(f"   Potential space savings: {_format_file_size(size * (len(paths) - 1))}")
    else:
        lines.append("No duplicate files found.")

    if result.failures:
        lines.append("")
        lines.append(f"{len(result.failures)} files could not be read:")
        for path, message in sorted(result.failures):
            lines.append(f"   • {path}: {message}")

    return "\n".join(lines)


def format_json_output(result: "DetectionResult") -> str:
    """Render the final duplicate groups, statistics and failures as JSON."""
    json_groups = []
    for (size, digest), paths in _sorted_groups(result.duplicates):
        json_groups.append({
            "digest": f"{digest:016x}",
            "size": size,
            "size_formatted": _format_file_size(size),
            "count": len(paths),
            "files": paths,
        })

    files, groups, duplicated = result.duplicates.stats()
    output = {
        "duplicate_files": json_groups,
        "failures": [{"path": path, "error": message} for path, message in result.failures],
        "statistics": {
            "total_files": result.prefix_store.file_count(),
            "screened_files": result.screened_store.file_count(),
            "screened_groups": result.screened_store.group_count(),
            "duplicate_files_count": files,
            "duplicate_groups_count": groups,
            "empty_files_count": len(result.prefix_store.empty_file_records()),
            "total_duplicated_bytes": duplicated,
            "total_duplicated_bytes_formatted": _format_file_size(duplicated),
        },
    }
    return json.dumps(output, indent=2)
