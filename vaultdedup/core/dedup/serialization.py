"""
Result Serialization
====================

Converts analysis results to plain JSON-compatible dictionaries for the
report layer. Keys use the vault front end's camelCase naming.
"""

import json
from typing import Any, Dict, Iterable, List

from vaultdedup.core.dedup.models import DuplicateAnalysis, DuplicateGroup, RetentionDecision


def group_to_dict(group: DuplicateGroup) -> Dict[str, Any]:
    return {
        'id': group.id,
        'category': group.category.value,
        'categoryName': group.category.display_name,
        'members': list(group.members),
        'similarityScore': group.similarity_score,
        'totalSizeBytes': group.total_size_bytes,
        'potentialSavingsBytes': group.potential_savings_bytes,
    }


def analysis_to_dict(analysis: DuplicateAnalysis) -> Dict[str, Any]:
    return {
        'totalDuplicateFiles': analysis.total_duplicate_files,
        'groups': [group_to_dict(g) for g in analysis.groups],
        'potentialSavingsBytes': analysis.potential_savings_bytes,
        'generatedAt': analysis.generated_at.isoformat(),
        'skippedFileIds': list(analysis.skipped_file_ids),
    }


def decision_to_dict(decision: RetentionDecision) -> Dict[str, Any]:
    return {
        'groupId': decision.group_id,
        'keepFileId': decision.keep_file_id,
        'deleteFileIds': list(decision.delete_file_ids),
        'strategy': decision.strategy,
        'reason': decision.reason,
    }


def plan_to_dicts(decisions: Iterable[RetentionDecision]) -> List[Dict[str, Any]]:
    return [decision_to_dict(d) for d in decisions]


def analysis_to_json(analysis: DuplicateAnalysis, indent: int = 2) -> str:
    return json.dumps(analysis_to_dict(analysis), indent=indent)
