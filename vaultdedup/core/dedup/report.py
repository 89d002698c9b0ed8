"""
Duplicate Analysis Report
=========================

Combines the groups found by the deduplication engine into a single
`DuplicateAnalysis` with totals and reclaimable space.

Only exact and perceptually similar groups count towards the totals: name
groups hold distinct content and free no space.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from vaultdedup.core.dedup.dedup_engine import DuplicateGrouper, ProgressCallback
from vaultdedup.core.dedup.errors import MalformedRecordError
from vaultdedup.core.dedup.models import DuplicateAnalysis, FileRecord
from vaultdedup.core.settings import DedupSettings

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_records(files: Iterable[Union[FileRecord, Mapping[str, Any]]]) -> List[FileRecord]:
    """
    Validate a whole batch up front.

    Mappings are converted with FileRecord.from_dict. The first malformed
    entry rejects the batch; nothing is silently skipped.
    """
    if files is None:
        raise MalformedRecordError("File list is required")

    records = []
    for position, item in enumerate(files):
        if isinstance(item, FileRecord):
            records.append(item)
        elif isinstance(item, Mapping):
            records.append(FileRecord.from_dict(item))
        else:
            raise MalformedRecordError(
                f"Item {position} is not a file record ({type(item).__name__})"
            )
    return records


class Aggregator:
    """Runs the grouper and totals its groups into a DuplicateAnalysis."""

    def __init__(
        self,
        settings: Optional[DedupSettings] = None,
        grouper: Optional[DuplicateGrouper] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.grouper = grouper or DuplicateGrouper(settings)
        self.clock = clock or _utc_now

    def analyze(
        self,
        files: Iterable[Union[FileRecord, Mapping[str, Any]]],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event=None,
    ) -> DuplicateAnalysis:
        records = coerce_records(files)
        result = self.grouper.find_duplicates(
            records,
            progress_callback=progress_callback,
            cancel_event=cancel_event,
        )

        reclaimable = [g for g in result.groups if g.category.reclaimable]
        analysis = DuplicateAnalysis(
            total_duplicate_files=sum(g.duplicate_count for g in reclaimable),
            groups=tuple(result.groups),
            potential_savings_bytes=sum(g.potential_savings_bytes for g in reclaimable),
            generated_at=self.clock(),
            skipped_file_ids=tuple(result.skipped_file_ids),
        )

        logger.info(
            f"Analysis: {len(analysis.groups)} groups, "
            f"{analysis.total_duplicate_files} duplicate files, "
            f"{analysis.potential_savings_bytes} bytes reclaimable"
        )
        return analysis


def analyze(
    files: Iterable[Union[FileRecord, Mapping[str, Any]]],
    settings: Optional[DedupSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event=None,
) -> DuplicateAnalysis:
    """Analyze a batch with a fresh Aggregator."""
    return Aggregator(settings).analyze(
        files,
        progress_callback=progress_callback,
        cancel_event=cancel_event,
    )
