"""
Utility functions for formatting what the cleanup shows to the operator.

This module provides functions to:
- Format sizes and registry timestamps for prompt labels
- Render the end-of-run deletion summary table
"""
from datetime import datetime
from typing import List, Optional, Sequence

from tabulate import tabulate

from release_cleanup.models import DeletionOutcome, DeletionStatus, RegistryKind


# ============================================================================
# Formatting Utilities
# ============================================================================

def sizeof_fmt(num: float, suffix: str = "B") -> str:
    """Format bytes into human-readable size.

    Args:
        num: Number of bytes
        suffix: Suffix to append (default: "B")

    Returns:
        Formatted string like "1.5GiB", "500MiB", etc.
    """
    for unit in ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei", "Zi"):
        if abs(num) < 1024.0:
            return f"{num:3.1f}{unit}{suffix}"
        num /= 1024.0
    return f"{num:.1f}Yi{suffix}"


def format_date(timestamp: Optional[str]) -> str:
    """Render an ISO-8601 registry timestamp as YYYY-MM-DD.

    Returns 'unknown date' when the timestamp is missing or unparseable.
    """
    if not timestamp:
        return "unknown date"
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        # Fractional seconds beyond microseconds, e.g. 2024-01-02T03:04:05.123456789Z
        if len(timestamp) >= 10 and timestamp[4] == "-" and timestamp[7] == "-":
            return timestamp[:10]
        return "unknown date"


# ============================================================================
# Summary Tables
# ============================================================================

_STATUS_LABELS = {
    DeletionStatus.SKIPPED_EMPTY: "nothing selected",
    DeletionStatus.DECLINED: "skipped",
    DeletionStatus.DELETED: "deleted",
    DeletionStatus.FAILED: "failed",
}


def format_outcomes_table(outcomes: Sequence[DeletionOutcome]) -> str:
    """Render per-group deletion results as a grid table"""
    headers = ["Image", "Result"] + [f"{kind.label} deleted/failed" for kind in RegistryKind]
    rows: List[list] = []
    for outcome in outcomes:
        row = [outcome.base_name, _STATUS_LABELS[outcome.status]]
        for kind in RegistryKind:
            if kind in outcome.deleted or kind in outcome.failed:
                row.append(f"{outcome.deleted.get(kind, 0)}/{outcome.failed.get(kind, 0)}")
            else:
                row.append("-")
        rows.append(row)
    return tabulate(rows, headers=headers, tablefmt="grid")
