"""
Unit tests for report serialization and formatting helpers.
"""

import json
import unittest
from datetime import datetime, timezone

from vaultdedup.core.dedup.models import (
    DuplicateAnalysis,
    DuplicateCategory,
    DuplicateGroup,
    RetentionDecision,
)
from vaultdedup.core.dedup.serialization import (
    analysis_to_dict,
    analysis_to_json,
    decision_to_dict,
    group_to_dict,
    plan_to_dicts,
)
from vaultdedup.core.dedup.utils import format_file_size, format_similarity_score, summarize_analysis

GROUP = DuplicateGroup(
    id="similar_1",
    category=DuplicateCategory.SIMILAR,
    members=("beach", "sunset"),
    similarity_score=61 / 64,
    total_size_bytes=4096,
    potential_savings_bytes=2048,
)

ANALYSIS = DuplicateAnalysis(
    total_duplicate_files=1,
    groups=(GROUP,),
    potential_savings_bytes=2048,
    generated_at=datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    skipped_file_ids=("broken",),
)


class TestSerialization(unittest.TestCase):
    def test_group_to_dict(self):
        self.assertEqual(group_to_dict(GROUP), {
            'id': 'similar_1',
            'category': 'similar',
            'categoryName': 'PerceptualSimilar',
            'members': ['beach', 'sunset'],
            'similarityScore': 61 / 64,
            'totalSizeBytes': 4096,
            'potentialSavingsBytes': 2048,
        })

    def test_analysis_to_json(self):
        data = json.loads(analysis_to_json(ANALYSIS))
        self.assertEqual(data['totalDuplicateFiles'], 1)
        self.assertEqual(data['potentialSavingsBytes'], 2048)
        self.assertEqual(data['generatedAt'], '2025-01-02T03:04:05+00:00')
        self.assertEqual(data['skippedFileIds'], ['broken'])
        self.assertEqual(data['groups'][0]['id'], 'similar_1')
        self.assertEqual(analysis_to_dict(ANALYSIS), data)

    def test_decisions(self):
        decision = RetentionDecision("similar_1", "beach", ("sunset",), "largest", "Keep largest file")
        self.assertEqual(decision_to_dict(decision), {
            'groupId': 'similar_1',
            'keepFileId': 'beach',
            'deleteFileIds': ['sunset'],
            'strategy': 'largest',
            'reason': 'Keep largest file',
        })
        review = RetentionDecision("name_1", None, (), "newest")
        self.assertIsNone(plan_to_dicts([decision, review])[1]['keepFileId'])


class TestFormatting(unittest.TestCase):
    def test_format_file_size(self):
        self.assertEqual(format_file_size(512), "512.0 B")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(5 * 1024 ** 3), "5.0 GB")

    def test_format_similarity_score(self):
        self.assertEqual(format_similarity_score(61 / 64), "95.31%")
        self.assertEqual(format_similarity_score(1.0), "100.00%")

    def test_summarize_analysis(self):
        self.assertEqual(
            summarize_analysis(ANALYSIS),
            "0 exact, 1 similar, 0 name groups; 1 duplicate files, 2.0 KB reclaimable",
        )

    def test_summarize_empty_analysis(self):
        empty = DuplicateAnalysis(0, (), 0, ANALYSIS.generated_at)
        self.assertEqual(summarize_analysis(empty), "No duplicates found")


if __name__ == '__main__':
    unittest.main()
