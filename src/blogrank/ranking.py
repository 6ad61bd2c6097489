"""
Hot and trending ranking for blog posts.

hot:      sign(s) * log10(max(|s|, 1)) + (created - 2024-01-01) / 45000,
          s = votes + 2 * comments
trending: (votes + 3 * comments) / max(age_h, 0.5) / (age_h + 1),
          0 once a post is older than 72 hours

Every function is pure. ``now`` is resolved once per call so a whole batch is
scored against the same instant; pass it explicitly for reproducible output.
"""
from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, TypeVar

from .records import (
    CategoryAggregate,
    PostLike,
    PostRecord,
    ScoredPost,
    as_record,
    parse_timestamp,
)


HOT_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc).timestamp()
HOT_DECAY_SECONDS = 45000.0
HOT_COMMENT_WEIGHT = 2

TRENDING_COMMENT_WEIGHT = 3
TRENDING_WINDOW_HOURS = 72.0
TRENDING_MIN_AGE_HOURS = 0.5

TOPIC_COMMENT_WEIGHT = 2

DEFAULT_HOT_LIMIT = 10
DEFAULT_TRENDING_LIMIT = 5

T = TypeVar("T")


def resolve_now(now: Any = None) -> float:
    if now is None:
        return datetime.now(timezone.utc).timestamp()
    parsed = parse_timestamp(now)
    if parsed is None:
        return datetime.now(timezone.utc).timestamp()
    return parsed


def _sign(value: int) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _hot(record: PostRecord, now_ts: float) -> float:
    created_ts = record.created_at if record.created_at is not None else now_ts
    weighted = record.vote_count + record.comment_count * HOT_COMMENT_WEIGHT
    order = math.log10(max(abs(weighted), 1))
    age_seconds = created_ts - HOT_EPOCH
    return _sign(weighted) * order + age_seconds / HOT_DECAY_SECONDS


def _trending(record: PostRecord, now_ts: float) -> float:
    if record.created_at is None:
        age_hours = 0.0
    else:
        age_hours = (now_ts - record.created_at) / 3600.0
    if age_hours > TRENDING_WINDOW_HOURS:
        return 0.0
    # A post dated exactly one hour ahead would divide by zero.
    if age_hours + 1.0 == 0:
        return 0.0
    engagement = record.vote_count + record.comment_count * TRENDING_COMMENT_WEIGHT
    velocity = engagement / max(age_hours, TRENDING_MIN_AGE_HOURS)
    return velocity * (1.0 / (age_hours + 1.0))


def compute_hot_score(post: PostLike, now: Any = None) -> float:
    """Reddit-style hot score; higher is hotter.

    Comments count double. The age term grows with creation time, so newer
    posts outrank older ones with the same engagement.
    """
    return _hot(as_record(post), resolve_now(now))


def compute_trending_score(post: PostLike, now: Any = None) -> float:
    """Engagement velocity over the last 72 hours, comments weighted triple."""
    return _trending(as_record(post), resolve_now(now))


def _truncate(ranked: List[T], limit: Optional[int]) -> List[T]:
    """``None`` keeps everything; negative limits behave like 0."""
    if limit is None:
        return ranked
    return ranked[: max(0, int(limit))]


def get_hot_posts(posts: Iterable[PostLike], limit: Optional[int] = DEFAULT_HOT_LIMIT, now: Any = None) -> List[ScoredPost]:
    now_ts = resolve_now(now)
    scored = []
    for post in posts:
        record = as_record(post)
        scored.append(ScoredPost(post=record, score=_hot(record, now_ts), score_field="hotScore"))
    # sorted() is stable with reverse=True: equal scores keep input order.
    ranked = sorted(scored, key=lambda item: item.score, reverse=True)
    return _truncate(ranked, limit)


def get_trending_posts(
    posts: Iterable[PostLike],
    limit: Optional[int] = DEFAULT_TRENDING_LIMIT,
    now: Any = None,
) -> List[ScoredPost]:
    now_ts = resolve_now(now)
    scored = []
    for post in posts:
        record = as_record(post)
        score = _trending(record, now_ts)
        if score > 0:
            scored.append(ScoredPost(post=record, score=score, score_field="trendingScore"))
    ranked = sorted(scored, key=lambda item: item.score, reverse=True)
    return _truncate(ranked, limit)


def get_trending_topics(posts: Iterable[PostLike], now: Any = None) -> List[CategoryAggregate]:
    """Roll posts up per category and rank categories by engagement per post.

    Categories with equal scores stay in the order they were first seen.
    """
    now_ts = resolve_now(now)
    buckets: Dict[str, Dict[str, Any]] = {}
    for post in posts:
        record = as_record(post)
        stats = buckets.get(record.category)
        if stats is None:
            stats = {"post_count": 0, "total_votes": 0, "total_comments": 0, "hot_sum": 0.0}
            buckets[record.category] = stats
        stats["post_count"] += 1
        stats["total_votes"] += record.vote_count
        stats["total_comments"] += record.comment_count
        stats["hot_sum"] += _hot(record, now_ts)

    topics: List[CategoryAggregate] = []
    for category, stats in buckets.items():
        count = stats["post_count"]
        topics.append(
            CategoryAggregate(
                category=category,
                post_count=count,
                total_votes=stats["total_votes"],
                total_comments=stats["total_comments"],
                avg_hot_score=stats["hot_sum"] / count,
                trending_score=(stats["total_votes"] + stats["total_comments"] * TOPIC_COMMENT_WEIGHT) / count,
            )
        )
    return sorted(topics, key=lambda topic: topic.trending_score, reverse=True)
