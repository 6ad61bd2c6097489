import unittest
from datetime import datetime, timezone

from blogrank.records import (
    CategoryAggregate,
    PostRecord,
    ScoredPost,
    as_record,
    coerce_int,
    extract_posts,
    normalize_category,
    parse_timestamp,
)


EPOCH_TS = 1704067200.0


class CoerceIntTests(unittest.TestCase):
    def test_numbers_and_numeric_strings(self):
        self.assertEqual(coerce_int(7), 7)
        self.assertEqual(coerce_int(-3), -3)
        self.assertEqual(coerce_int(4.9), 4)
        self.assertEqual(coerce_int("12"), 12)
        self.assertEqual(coerce_int(" -2 "), -2)
        self.assertEqual(coerce_int(True), 1)

    def test_malformed_values_become_zero(self):
        for value in (None, "", "abc", float("nan"), float("inf"), "inf", [], {}):
            self.assertEqual(coerce_int(value), 0, value)


class TimestampTests(unittest.TestCase):
    def test_iso_strings(self):
        self.assertEqual(parse_timestamp("2024-01-01T00:00:00Z"), EPOCH_TS)
        self.assertEqual(parse_timestamp("2024-01-01T00:00:00"), EPOCH_TS)
        self.assertEqual(parse_timestamp("2024-01-01T02:00:00+02:00"), EPOCH_TS)

    def test_datetimes_and_numbers(self):
        self.assertEqual(parse_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc)), EPOCH_TS)
        self.assertEqual(parse_timestamp(datetime(2024, 1, 1)), EPOCH_TS)
        self.assertEqual(parse_timestamp(EPOCH_TS), EPOCH_TS)
        self.assertEqual(parse_timestamp(1704067200), EPOCH_TS)

    def test_millisecond_epoch_numbers(self):
        self.assertEqual(parse_timestamp(1704067200000), EPOCH_TS)
        self.assertEqual(parse_timestamp(1704067200500.0), EPOCH_TS + 0.5)
        record = PostRecord.from_mapping({"createdAt": 1704067200000})
        self.assertEqual(record.created_at, EPOCH_TS)

    def test_firestore_timestamp_json(self):
        self.assertEqual(parse_timestamp({"seconds": 1704067200, "nanoseconds": 500000000}), EPOCH_TS + 0.5)
        self.assertEqual(parse_timestamp({"_seconds": 1704067200, "_nanoseconds": 0}), EPOCH_TS)

    def test_unparseable_values(self):
        for value in (None, "", "yesterday", {"nanoseconds": 3}, True, float("nan")):
            self.assertIsNone(parse_timestamp(value), value)


class PostRecordTests(unittest.TestCase):
    def test_from_mapping_defaults(self):
        record = PostRecord.from_mapping({})
        self.assertEqual(record.id, "")
        self.assertEqual(record.vote_count, 0)
        self.assertEqual(record.comment_count, 0)
        self.assertEqual(record.category, "general")
        self.assertIsNone(record.created_at)

    def test_from_mapping_reads_aliases(self):
        record = PostRecord.from_mapping(
            {
                "id": 42,
                "vote_count": 3,
                "comment_count": "5",
                "category": "Travel",
                "created_at": "2024-01-01T00:00:00Z",
            }
        )
        self.assertEqual(record.id, "42")
        self.assertEqual(record.vote_count, 3)
        self.assertEqual(record.comment_count, 5)
        self.assertEqual(record.category, "Travel")
        self.assertEqual(record.created_at, EPOCH_TS)

    def test_raw_is_a_copy(self):
        source = {"id": "p1", "voteCount": 2}
        record = as_record(source)
        source["voteCount"] = 99
        self.assertEqual(record.raw["voteCount"], 2)
        self.assertIs(as_record(record), record)

    def test_to_dict_without_raw(self):
        record = PostRecord(id="p", vote_count=1, comment_count=2, category="Tech", created_at=EPOCH_TS)
        self.assertEqual(
            record.to_dict(),
            {
                "id": "p",
                "voteCount": 1,
                "commentCount": 2,
                "category": "Tech",
                "createdAt": "2024-01-01T00:00:00+00:00",
            },
        )

    def test_scored_post_to_dict_adds_score_field(self):
        scored = ScoredPost(post=as_record({"id": "p", "title": "T"}), score=1.5, score_field="trendingScore")
        self.assertEqual(scored.to_dict(), {"id": "p", "title": "T", "trendingScore": 1.5})
        self.assertEqual(scored.id, "p")

    def test_category_normalization(self):
        self.assertEqual(normalize_category(None), "general")
        self.assertEqual(normalize_category(""), "general")
        self.assertEqual(normalize_category("Tech"), "Tech")

    def test_category_aggregate_keys(self):
        agg = CategoryAggregate("Tech", 2, 15, 3, 1.25, 10.5)
        self.assertEqual(agg.to_dict()["postCount"], 2)
        self.assertEqual(agg.to_dict()["trendingScore"], 10.5)


class ExtractPostsTests(unittest.TestCase):
    def test_list_and_envelopes(self):
        self.assertEqual(extract_posts([{"id": "a"}, "junk"]), [{"id": "a"}])
        self.assertEqual(extract_posts({"posts": [{"id": "b"}]}), [{"id": "b"}])
        self.assertEqual(extract_posts({"results": [{"id": "c"}]}), [{"id": "c"}])
        self.assertEqual(extract_posts({"nothing": []}), [])
        self.assertEqual(extract_posts("text"), [])


if __name__ == "__main__":
    unittest.main()
