"""
Retention Strategies
====================

Keep strategies for deciding which member of a duplicate group to retain.
Supports NEWEST, OLDEST (by date added), LARGEST and SMALLEST (by size).
Ties go to the member listed first in the group.

Only exact and perceptually similar groups are eligible. Name groups hold
distinct content, so a decision for one never lists anything to delete.
The engine only recommends; the caller's storage layer performs deletions.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Union

from vaultdedup.core.dedup.errors import MalformedRecordError
from vaultdedup.core.dedup.models import (
    DuplicateGroup,
    FileRecord,
    RetentionDecision,
    index_records,
)

logger = logging.getLogger(__name__)


class KeepStrategy(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    LARGEST = "largest"
    SMALLEST = "smallest"

    @classmethod
    def coerce(cls, value: Union["KeepStrategy", str]) -> "KeepStrategy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy: {value!r} (expected one of {choices})")


# For each strategy: the sort key and whether the largest key wins
_STRATEGY_KEYS: Dict[KeepStrategy, tuple] = {
    KeepStrategy.NEWEST: (lambda r: r.date_added, True),
    KeepStrategy.OLDEST: (lambda r: r.date_added, False),
    KeepStrategy.LARGEST: (lambda r: r.size_bytes, True),
    KeepStrategy.SMALLEST: (lambda r: r.size_bytes, False),
}

_STRATEGY_REASONS = {
    KeepStrategy.NEWEST: "Keep most recently added file",
    KeepStrategy.OLDEST: "Keep earliest added file",
    KeepStrategy.LARGEST: "Keep largest file",
    KeepStrategy.SMALLEST: "Keep smallest file",
}


def _pick_keeper(members: List[FileRecord], key: Callable, prefer_max: bool) -> FileRecord:
    keeper = members[0]
    for candidate in members[1:]:
        # Strict comparison keeps the earliest member on ties
        if prefer_max and key(candidate) > key(keeper):
            keeper = candidate
        elif not prefer_max and key(candidate) < key(keeper):
            keeper = candidate
    return keeper


class RetentionPolicy:
    """
    Applies keep strategies to groups produced from a batch of records.

    Args:
        files: The records the groups were computed from (sequence or
            id -> record mapping).
    """

    def __init__(self, files: Union[Iterable[FileRecord], Mapping[str, FileRecord]]):
        if isinstance(files, Mapping):
            self._records: Dict[str, FileRecord] = dict(files)
        else:
            self._records = index_records(files)

    def _resolve(self, group: DuplicateGroup) -> List[FileRecord]:
        members = []
        for file_id in group.members:
            record = self._records.get(file_id)
            if record is None:
                raise MalformedRecordError(
                    f"Group {group.id} references unknown file {file_id!r}",
                    record_id=file_id
                )
            members.append(record)
        return members

    def select_for_cleanup(
        self,
        group: DuplicateGroup,
        strategy: Union[KeepStrategy, str],
    ) -> RetentionDecision:
        """
        Decide which member of `group` to keep.

        Returns a decision whose delete list is every other member, in group
        order. Name groups yield no keeper and nothing to delete.
        """
        strategy = KeepStrategy.coerce(strategy)

        if not group.category.reclaimable:
            return RetentionDecision(
                group_id=group.id,
                keep_file_id=None,
                delete_file_ids=(),
                strategy=strategy.value,
                reason="Name matches hold distinct content; manual review required",
            )

        members = self._resolve(group)
        key, prefer_max = _STRATEGY_KEYS[strategy]
        keeper = _pick_keeper(members, key, prefer_max)

        return RetentionDecision(
            group_id=group.id,
            keep_file_id=keeper.id,
            delete_file_ids=tuple(r.id for r in members if r.id != keeper.id),
            strategy=strategy.value,
            reason=_STRATEGY_REASONS[strategy],
        )

    def generate_cleanup_plan(
        self,
        groups: Iterable[DuplicateGroup],
        strategy: Union[KeepStrategy, str],
    ) -> List[RetentionDecision]:
        """
        Generates a list of decisions for the given groups using the specified strategy.
        """
        decisions = [self.select_for_cleanup(group, strategy) for group in groups]
        logger.info(
            f"Cleanup plan ({KeepStrategy.coerce(strategy).value}): "
            f"{sum(len(d.delete_file_ids) for d in decisions)} files to delete "
            f"across {sum(1 for d in decisions if d.is_actionable)} groups"
        )
        return decisions


def collect_deletions(decisions: Iterable[RetentionDecision]) -> List[str]:
    """
    Flatten a cleanup plan into the ids to hand to the deletion executor.

    A file can sit in an exact group and a similar group at once; it is
    listed once, and never if any decision keeps it.
    """
    decisions = list(decisions)
    kept = {d.keep_file_id for d in decisions if d.keep_file_id is not None}

    deletions: List[str] = []
    seen = set()
    for decision in decisions:
        for file_id in decision.delete_file_ids:
            if file_id in kept or file_id in seen:
                continue
            seen.add(file_id)
            deletions.append(file_id)
    return deletions


def select_for_cleanup(
    group: DuplicateGroup,
    strategy: Union[KeepStrategy, str],
    files: Union[Iterable[FileRecord], Mapping[str, FileRecord]],
) -> RetentionDecision:
    """Select which item to keep based on the strategy."""
    return RetentionPolicy(files).select_for_cleanup(group, strategy)


def generate_cleanup_plan(
    groups: Iterable[DuplicateGroup],
    strategy: Union[KeepStrategy, str],
    files: Union[Iterable[FileRecord], Mapping[str, FileRecord]],
) -> List[RetentionDecision]:
    return RetentionPolicy(files).generate_cleanup_plan(groups, strategy)
