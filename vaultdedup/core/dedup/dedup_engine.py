"""
Deduplication Engine
====================

Runs the three detection passes over one batch of vault files:

1. Exact: files whose full content hashes are equal.
2. Similar: images whose average hashes match on more than the threshold
   share of bits. The default grouping is a single-pass greedy partition in
   input order, so each image lands in at most one group. A connected
   components mode (Union-Find over the similarity graph) is available on
   request; it changes which images end up together.
3. Name: files with confusingly similar names but different content.

All passes are deterministic: the same records in the same order always
produce the same groups in the same order.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from vaultdedup.core import config
from vaultdedup.core.dedup.errors import AnalysisCancelledError, MalformedRecordError
from vaultdedup.core.dedup.hash_calculator import (
    ContentHasher,
    PerceptualFingerprint,
    PerceptualImageHasher,
)
from vaultdedup.core.dedup.models import (
    DuplicateCategory,
    DuplicateGroup,
    FileRecord,
    index_records,
)
from vaultdedup.core.dedup.name_similarity import NameSimilarityScorer
from vaultdedup.core.settings import DedupSettings
from vaultdedup.utils.concurrency import map_in_order

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class GroupingResult:
    """Groups from all three passes, in pass order, plus files the perceptual pass had to skip."""
    groups: List[DuplicateGroup] = field(default_factory=list)
    skipped_file_ids: List[str] = field(default_factory=list)

    def by_category(self, category: DuplicateCategory) -> List[DuplicateGroup]:
        return [g for g in self.groups if g.category is category]


class UnionFind:
    """
    Helper class for Union-Find data structure to manage connected components.
    """
    def __init__(self, elements):
        self.parent = {e: e for e in elements}

    def find(self, item):
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, item1, item2):
        root1 = self.find(item1)
        root2 = self.find(item2)
        if root1 != root2:
            self.parent[root2] = root1

    def get_components(self) -> List[List]:
        """
        Returns the components with more than one element. Components and
        their members follow the insertion order of the elements.
        """
        components: Dict = defaultdict(list)
        for item in self.parent:
            components[self.find(item)].append(item)
        return [items for items in components.values() if len(items) > 1]


def _group_id(category: DuplicateCategory, number: int) -> str:
    return f"{config.GROUP_ID_PREFIXES[category.value]}_{number}"


def _total_size(records: Sequence[FileRecord]) -> int:
    return sum(r.size_bytes for r in records)


class DuplicateGrouper:
    """
    Orchestrates the exact, perceptual and name passes.

    The grouper holds configuration only; every call to `find_duplicates`
    starts from scratch.
    """

    def __init__(
        self,
        settings: Optional[DedupSettings] = None,
        content_hasher: Optional[ContentHasher] = None,
        image_hasher: Optional[PerceptualImageHasher] = None,
    ):
        self.settings = (settings or DedupSettings()).validate()
        self.content_hasher = content_hasher or ContentHasher()
        self.image_hasher = image_hasher or PerceptualImageHasher(self.settings.grid_size)

    def find_duplicates(
        self,
        files: Sequence[FileRecord],
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event=None,
    ) -> GroupingResult:
        """
        Run all three passes over `files`.

        Args:
            files: Validated FileRecords in caller order
            progress_callback: Callback(message, current, total)
            cancel_event: Object with is_set() (e.g. threading.Event); checked
                once per outer iteration of the pairwise passes

        Raises:
            MalformedRecordError: an element is not a FileRecord or ids repeat
            AnalysisCancelledError: cancel_event was set
        """
        records = list(files)
        for position, record in enumerate(records):
            if not isinstance(record, FileRecord):
                raise MalformedRecordError(
                    f"Item {position} is not a FileRecord ({type(record).__name__})"
                )
        index_records(records)

        result = GroupingResult()
        if not records:
            logger.debug("No files to analyze")
            return result

        logger.info(
            f"Starting duplicate scan: {len(records)} files, "
            f"perceptual>{self.settings.perceptual_threshold}, "
            f"name>={self.settings.name_threshold}, clustering={self.settings.clustering}"
        )

        self._report(progress_callback, "Hashing file contents...", 0, len(records))
        fingerprints = map_in_order(
            lambda r: self.content_hasher.hash(r.content),
            records,
            self.settings.max_workers,
        )

        exact_groups = self._find_exact(records, fingerprints)
        similar_groups, skipped = self._find_similar(records, progress_callback, cancel_event)
        name_groups = self._find_by_name(records, fingerprints, progress_callback, cancel_event)

        result.groups = exact_groups + similar_groups + name_groups
        result.skipped_file_ids = skipped

        logger.info(
            f"Duplicate scan complete: {len(exact_groups)} exact, "
            f"{len(similar_groups)} similar, {len(name_groups)} name groups"
            + (f", {len(skipped)} images skipped" if skipped else "")
        )
        return result

    # ------------------------------------------------------------------
    # Exact pass
    # ------------------------------------------------------------------

    def _find_exact(self, records: List[FileRecord], fingerprints: List[str]) -> List[DuplicateGroup]:
        buckets: Dict[str, List[FileRecord]] = defaultdict(list)
        for record, fingerprint in zip(records, fingerprints):
            buckets[fingerprint].append(record)

        groups = []
        for members in buckets.values():
            if len(members) < 2:
                continue
            total = _total_size(members)
            groups.append(DuplicateGroup(
                id=_group_id(DuplicateCategory.EXACT, len(groups) + 1),
                category=DuplicateCategory.EXACT,
                members=tuple(r.id for r in members),
                similarity_score=1.0,
                total_size_bytes=total,
                potential_savings_bytes=total - members[0].size_bytes,
            ))

        logger.debug(f"Exact pass: {len(buckets)} distinct contents, {len(groups)} groups")
        return groups

    # ------------------------------------------------------------------
    # Perceptual pass
    # ------------------------------------------------------------------

    def _find_similar(
        self,
        records: List[FileRecord],
        progress_callback: Optional[ProgressCallback],
        cancel_event,
    ) -> Tuple[List[DuplicateGroup], List[str]]:
        candidates = [r for r in records if r.is_image]
        if not candidates:
            return [], []

        self._report(progress_callback, "Computing image fingerprints...", 0, len(candidates))
        perceptual = map_in_order(
            lambda r: self.image_hasher.hash(r.content, file_id=r.id),
            candidates,
            self.settings.max_workers,
        )

        hashed: List[Tuple[FileRecord, PerceptualFingerprint]] = []
        skipped: List[str] = []
        for record, fp in zip(candidates, perceptual):
            if fp is None:
                skipped.append(record.id)
            else:
                hashed.append((record, fp))
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(f"Image {record.id}: average hash {fp.to_hex()}")

        if len(hashed) < 2:
            return [], skipped

        if self.settings.clustering == config.CLUSTERING_CONNECTED:
            clusters = self._connected_image_clusters(hashed, progress_callback, cancel_event)
        else:
            clusters = self._greedy_image_clusters(hashed, progress_callback, cancel_event)

        groups = []
        for members, score in clusters:
            total = _total_size(members)
            # Survivor size is estimated as the group average
            estimated_kept = int(round(total / len(members)))
            groups.append(DuplicateGroup(
                id=_group_id(DuplicateCategory.SIMILAR, len(groups) + 1),
                category=DuplicateCategory.SIMILAR,
                members=tuple(r.id for r in members),
                similarity_score=score,
                total_size_bytes=total,
                potential_savings_bytes=max(0, total - estimated_kept),
            ))

        logger.debug(f"Perceptual pass: {len(hashed)} images compared, {len(groups)} groups")
        return groups, skipped

    def _greedy_image_clusters(self, hashed, progress_callback, cancel_event):
        threshold = self.settings.perceptual_threshold
        assigned = set()
        clusters = []

        for i, (record, fp) in enumerate(hashed):
            self._check_cancelled(cancel_event)
            self._report(progress_callback, "Comparing images...", i + 1, len(hashed))
            if record.id in assigned:
                continue
            assigned.add(record.id)

            members = [record]
            first_score = None
            for other, other_fp in hashed[i + 1:]:
                if other.id in assigned:
                    continue
                score = self.image_hasher.similarity(fp, other_fp)
                if score > threshold:
                    members.append(other)
                    assigned.add(other.id)
                    if first_score is None:
                        first_score = score

            if len(members) > 1:
                clusters.append((members, first_score))

        return clusters

    def _connected_image_clusters(self, hashed, progress_callback, cancel_event):
        threshold = self.settings.perceptual_threshold
        by_id = {record.id: (record, fp) for record, fp in hashed}
        uf = UnionFind([record.id for record, _ in hashed])

        for i, (record, fp) in enumerate(hashed):
            self._check_cancelled(cancel_event)
            self._report(progress_callback, "Comparing images...", i + 1, len(hashed))
            for other, other_fp in hashed[i + 1:]:
                if self.image_hasher.similarity(fp, other_fp) > threshold:
                    uf.union(record.id, other.id)

        clusters = []
        for component in uf.get_components():
            pivot_fp = by_id[component[0]][1]
            score = min(self.image_hasher.similarity(pivot_fp, by_id[item][1]) for item in component[1:])
            clusters.append(([by_id[item][0] for item in component], score))
        return clusters

    # ------------------------------------------------------------------
    # Name pass
    # ------------------------------------------------------------------

    def _find_by_name(
        self,
        records: List[FileRecord],
        fingerprints: List[str],
        progress_callback: Optional[ProgressCallback],
        cancel_event,
    ) -> List[DuplicateGroup]:
        scorer = NameSimilarityScorer(self.settings.name_threshold)
        assigned = set()
        groups = []

        for i, record in enumerate(records):
            self._check_cancelled(cancel_event)
            self._report(progress_callback, "Comparing file names...", i + 1, len(records))
            if record.id in assigned:
                continue
            assigned.add(record.id)

            members = [record]
            member_contents = {fingerprints[i]}
            first_score = None
            for j in range(i + 1, len(records)):
                other = records[j]
                if other.id in assigned or not scorer.could_match(record.name, other.name):
                    continue
                score = scorer.similarity(record.name, other.name)
                if score < scorer.threshold:
                    continue
                assigned.add(other.id)
                # Same content as a member: already covered by an exact group
                if fingerprints[j] in member_contents:
                    continue
                member_contents.add(fingerprints[j])
                members.append(other)
                if first_score is None:
                    first_score = score

            if len(members) > 1:
                groups.append(DuplicateGroup(
                    id=_group_id(DuplicateCategory.NAME, len(groups) + 1),
                    category=DuplicateCategory.NAME,
                    members=tuple(r.id for r in members),
                    similarity_score=first_score,
                    total_size_bytes=_total_size(members),
                    potential_savings_bytes=0,
                ))

        logger.debug(f"Name pass: {len(groups)} groups")
        return groups

    # ------------------------------------------------------------------

    @staticmethod
    def _check_cancelled(cancel_event):
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Duplicate scan cancelled")
            raise AnalysisCancelledError("Duplicate analysis was cancelled")

    @staticmethod
    def _report(progress_callback, message: str, current: int, total: int):
        if progress_callback:
            progress_callback(message, current, total)
