"""
Unit tests for the analysis aggregator.
"""

import base64
import unittest
from datetime import datetime, timezone

from vaultdedup.core.dedup.errors import MalformedRecordError
from vaultdedup.core.dedup.models import DuplicateCategory
from vaultdedup.core.dedup.report import Aggregator, analyze, coerce_records
from vaultdedup.core.settings import DedupSettings
from factories import HALF_BITS, flip_bits, image_record, make_record, png_from_bits

FIXED_TIME = datetime(2025, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


def _fixed_clock():
    return FIXED_TIME


class TestAggregator(unittest.TestCase):
    def setUp(self):
        self.aggregator = Aggregator(clock=_fixed_clock)

    def test_empty_input(self):
        analysis = self.aggregator.analyze([])
        self.assertEqual(analysis.total_duplicate_files, 0)
        self.assertEqual(analysis.groups, ())
        self.assertEqual(analysis.potential_savings_bytes, 0)
        self.assertEqual(analysis.generated_at, FIXED_TIME)

    def test_exact_totals(self):
        content = b"x" * 1000
        files = [make_record(i, name=f"{i}.txt", content=content, file_type="document") for i in "abc"]
        analysis = self.aggregator.analyze(files)
        self.assertEqual(analysis.total_duplicate_files, 2)
        self.assertEqual(analysis.potential_savings_bytes, 2000)
        self.assertEqual(len(analysis.exact_groups), 1)

    def test_name_groups_do_not_count(self):
        files = [
            make_record("v1", name="vacation.jpg", content=b"one", size=500),
            make_record("v2", name="vacation(1).jpg", content=b"two", size=700),
        ]
        analysis = self.aggregator.analyze(files)
        self.assertEqual(len(analysis.name_groups), 1)
        self.assertEqual(analysis.total_duplicate_files, 0)
        self.assertEqual(analysis.potential_savings_bytes, 0)

    def test_totals_sum_reclaimable_groups(self):
        files = [
            make_record("d1", name="report.pdf", content=b"pdf", size=100, file_type="document"),
            make_record("d2", name="copy.pdf", content=b"pdf", size=100, file_type="document"),
            image_record("i1", HALF_BITS, name="beach.png", size=3000),
            image_record("i2", flip_bits(HALF_BITS, [4]), name="lake.png", size=1000),
            make_record("n1", name="invoice.txt", content=b"a"),
            make_record("n2", name="invoice1.txt", content=b"b"),
        ]
        analysis = self.aggregator.analyze(files)

        self.assertEqual(
            [g.category for g in analysis.groups],
            [DuplicateCategory.EXACT, DuplicateCategory.SIMILAR, DuplicateCategory.NAME],
        )
        self.assertEqual(analysis.total_duplicate_files, 2)
        self.assertEqual(analysis.potential_savings_bytes, 100 + 2000)
        self.assertIsNotNone(analysis.group("similar_1"))
        self.assertIsNone(analysis.group("similar_2"))

    def test_identical_images_count_in_both_groups(self):
        content = png_from_bits(HALF_BITS)
        files = [
            make_record("a", name="alpha.png", content=content, file_type="image"),
            make_record("b", name="qwerty.png", content=content, file_type="image"),
        ]
        analysis = self.aggregator.analyze(files)
        self.assertEqual(
            [(g.category, g.members) for g in analysis.groups],
            [(DuplicateCategory.EXACT, ("a", "b")), (DuplicateCategory.SIMILAR, ("a", "b"))],
        )
        self.assertEqual(analysis.similar_groups[0].similarity_score, 1.0)
        self.assertEqual(analysis.total_duplicate_files, 2)

    def test_lone_undecodable_image_is_reported(self):
        files = [make_record("bad", name="bad.png", content=b"not an image", file_type="image")]
        with self.assertLogs("vaultdedup.core.dedup.hash_calculator", level="WARNING"):
            analysis = self.aggregator.analyze(files)
        self.assertEqual(analysis.skipped_file_ids, ("bad",))
        self.assertEqual(analysis.groups, ())

    def test_accepts_dicts(self):
        payload = base64.b64encode(b"same bytes").decode("ascii")
        files = [
            {"id": "a", "name": "a.bin", "type": "other", "sizeBytes": 10, "content": payload,
             "dateAdded": "2024-01-01T00:00:00Z", "dateModified": "2024-01-01T00:00:00Z"},
            {"id": "b", "name": "b.bin", "type": "other", "sizeBytes": 10, "content": payload,
             "dateAdded": "2024-01-02T00:00:00Z", "dateModified": "2024-01-02T00:00:00Z"},
        ]
        analysis = self.aggregator.analyze(files)
        self.assertEqual(analysis.exact_groups[0].members, ("a", "b"))

    def test_malformed_entry_rejects_batch(self):
        files = [
            make_record("a", content=b"1"),
            {"id": "b", "name": "b.bin", "type": "other", "content": b"2",
             "dateAdded": 0, "dateModified": 0},
        ]
        with self.assertRaises(MalformedRecordError) as ctx:
            self.aggregator.analyze(files)
        self.assertEqual(ctx.exception.field_name, "size_bytes")

    def test_skipped_images_are_reported(self):
        files = [
            make_record("bad", name="bad.png", content=b"garbage", file_type="image"),
            image_record("ok", HALF_BITS),
        ]
        with self.assertLogs("vaultdedup.core.dedup.hash_calculator", level="WARNING"):
            analysis = self.aggregator.analyze(files)
        self.assertEqual(analysis.skipped_file_ids, ("bad",))

    def test_deterministic_with_fixed_clock(self):
        files = [
            make_record("a", name="notes.txt", content=b"1"),
            make_record("b", name="notes.txt", content=b"1"),
            make_record("c", name="notes2.txt", content=b"2"),
        ]
        self.assertEqual(self.aggregator.analyze(files), self.aggregator.analyze(files))

    def test_default_clock_is_timezone_aware(self):
        analysis = Aggregator().analyze([])
        self.assertIsNotNone(analysis.generated_at.tzinfo)

    def test_module_level_analyze(self):
        files = [make_record("a", content=b"1"), make_record("b", content=b"1")]
        analysis = analyze(files, DedupSettings(name_threshold=1.0))
        self.assertEqual(analysis.total_duplicate_files, 1)


class TestCoerceRecords(unittest.TestCase):
    def test_rejects_none(self):
        with self.assertRaises(MalformedRecordError):
            coerce_records(None)

    def test_rejects_foreign_items(self):
        with self.assertRaises(MalformedRecordError):
            coerce_records([make_record("a"), 42])

    def test_passes_records_through(self):
        record = make_record("a")
        self.assertEqual(coerce_records([record]), [record])


if __name__ == '__main__':
    unittest.main()
