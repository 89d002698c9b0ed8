"""
Deduplication Module
====================

Detects redundant files in a vault batch and recommends which copies to
discard. Three kinds of redundancy are reported: byte-identical content,
visually near-identical images, and confusingly similar names.

The engine is a pure in-memory computation over caller-supplied records. It
never deletes anything itself.

Usage:
------
    from vaultdedup.core.dedup import Aggregator, RetentionPolicy, KeepStrategy

    analysis = Aggregator().analyze(records)
    policy = RetentionPolicy(records)
    plan = policy.generate_cleanup_plan(analysis.groups, KeepStrategy.NEWEST)
    to_delete = collect_deletions(plan)
"""

from vaultdedup.core.dedup.errors import (
    DedupError,
    MalformedRecordError,
    ImageDecodeError,
    AnalysisCancelledError
)
from vaultdedup.core.dedup.models import (
    FileType,
    FileRecord,
    DuplicateCategory,
    DuplicateGroup,
    DuplicateAnalysis,
    RetentionDecision
)
from vaultdedup.core.dedup.hash_calculator import (
    ContentHasher,
    PerceptualFingerprint,
    PerceptualImageHasher
)
from vaultdedup.core.dedup.hash_comparison import (
    calculate_hamming_distance,
    calculate_similarity_ratio,
    calculate_bit_similarity
)
from vaultdedup.core.dedup.name_similarity import (
    NameSimilarityScorer,
    normalize_name,
    levenshtein_distance
)
from vaultdedup.core.dedup.dedup_engine import DuplicateGrouper, GroupingResult
from vaultdedup.core.dedup.dedup_strategies import (
    KeepStrategy,
    RetentionPolicy,
    select_for_cleanup,
    generate_cleanup_plan,
    collect_deletions
)
from vaultdedup.core.dedup.report import Aggregator, analyze
from vaultdedup.core.dedup.serialization import (
    analysis_to_dict,
    analysis_to_json,
    group_to_dict,
    decision_to_dict,
    plan_to_dicts
)
from vaultdedup.core.dedup.utils import (
    format_file_size,
    format_similarity_score,
    summarize_analysis
)

__all__ = [
    # Errors
    'DedupError',
    'MalformedRecordError',
    'ImageDecodeError',
    'AnalysisCancelledError',

    # Data model
    'FileType',
    'FileRecord',
    'DuplicateCategory',
    'DuplicateGroup',
    'DuplicateAnalysis',
    'RetentionDecision',

    # Fingerprints
    'ContentHasher',
    'PerceptualFingerprint',
    'PerceptualImageHasher',
    'calculate_hamming_distance',
    'calculate_similarity_ratio',
    'calculate_bit_similarity',

    # Names
    'NameSimilarityScorer',
    'normalize_name',
    'levenshtein_distance',

    # Grouping and reporting
    'DuplicateGrouper',
    'GroupingResult',
    'Aggregator',
    'analyze',

    # Retention
    'KeepStrategy',
    'RetentionPolicy',
    'select_for_cleanup',
    'generate_cleanup_plan',
    'collect_deletions',

    # Output
    'analysis_to_dict',
    'analysis_to_json',
    'group_to_dict',
    'decision_to_dict',
    'plan_to_dicts',
    'format_file_size',
    'format_similarity_score',
    'summarize_analysis',
]
