"""
Deduplication Utilities
=======================

Formatting helpers for presenting analysis results.
"""

from vaultdedup.core.dedup.models import DuplicateAnalysis


def format_file_size(num_bytes: float) -> str:
    """
    Formats a file size in bytes to a human-readable string (e.g. '1.5 MB').
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if abs(num_bytes) < 1024.0:
            return f"{num_bytes:3.1f} {unit}"
        num_bytes /= 1024.0
    return f"{num_bytes:.1f} PB"


def format_similarity_score(score: float) -> str:
    """
    Formats a similarity ratio (0-1) as a percentage string.
    """
    return f"{score * 100:.2f}%"


def summarize_analysis(analysis: DuplicateAnalysis) -> str:
    """One-line summary of an analysis, e.g. for logs or a status bar."""
    if not analysis.groups:
        return "No duplicates found"
    return (
        f"{len(analysis.exact_groups)} exact, {len(analysis.similar_groups)} similar, "
        f"{len(analysis.name_groups)} name groups; "
        f"{analysis.total_duplicate_files} duplicate files, "
        f"{format_file_size(analysis.potential_savings_bytes)} reclaimable"
    )
