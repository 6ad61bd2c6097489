from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union


DEFAULT_CATEGORY = "general"

# Epoch numbers above this are JavaScript-style milliseconds (1e11 s is year 5138).
MILLISECONDS_THRESHOLD = 1e11


def normalize_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def coerce_int(value: Any) -> int:
    """Best-effort integer for counters coming from loosely typed documents.

    Missing or malformed values count as 0 so a single bad document cannot
    turn a score into NaN.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    text = normalize_str(value).strip()
    if not text:
        return 0
    try:
        parsed = float(text)
    except ValueError:
        return 0
    if not math.isfinite(parsed):
        return 0
    return int(parsed)


def normalize_category(value: Any) -> str:
    text = normalize_str(value)
    return text if text else DEFAULT_CATEGORY


def _first_present(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None


def parse_timestamp(value: Any) -> Optional[float]:
    """Return epoch seconds (UTC) for the timestamp shapes feeds hand us.

    Plain numbers are epoch seconds, or milliseconds when they exceed
    ``MILLISECONDS_THRESHOLD``. Naive datetimes and ISO strings without an
    offset are read as UTC.
    Firestore timestamps exported as JSON arrive as ``{"seconds", "nanoseconds"}``
    (or the underscored admin SDK spelling).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        if abs(value) > MILLISECONDS_THRESHOLD:
            return float(value) / 1000.0
        return float(value)
    if isinstance(value, Mapping):
        seconds = _first_present(value, "seconds", "_seconds")
        if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
            return None
        nanos = _first_present(value, "nanoseconds", "_nanoseconds")
        if not isinstance(nanos, (int, float)) or isinstance(nanos, bool):
            nanos = 0
        return float(seconds) + float(nanos) / 1e9
    text = normalize_str(value).strip()
    if not text:
        return None
    try:
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


@dataclass(frozen=True)
class PostRecord:
    """A post as the ranking engine sees it.

    Absent counters default to 0, an absent category to ``"general"`` and an
    absent ``created_at`` stays ``None`` (scored as "now"). ``created_at`` is
    always epoch seconds, whatever unit the source document used.
    """

    id: str = ""
    vote_count: int = 0
    comment_count: int = 0
    category: str = DEFAULT_CATEGORY
    created_at: Optional[float] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "PostRecord":
        return cls(
            id=normalize_str(mapping.get("id")),
            vote_count=coerce_int(_first_present(mapping, "voteCount", "vote_count")),
            comment_count=coerce_int(_first_present(mapping, "commentCount", "comment_count")),
            category=normalize_category(mapping.get("category")),
            created_at=parse_timestamp(_first_present(mapping, "createdAt", "created_at")),
            raw=dict(mapping),
        )

    def to_dict(self) -> Dict[str, Any]:
        if self.raw:
            return dict(self.raw)
        out: Dict[str, Any] = {
            "id": self.id,
            "voteCount": self.vote_count,
            "commentCount": self.comment_count,
            "category": self.category,
        }
        if self.created_at is not None:
            out["createdAt"] = datetime.fromtimestamp(self.created_at, tz=timezone.utc).isoformat()
        return out


PostLike = Union[PostRecord, Mapping[str, Any]]


def as_record(item: PostLike) -> PostRecord:
    if isinstance(item, PostRecord):
        return item
    return PostRecord.from_mapping(item)


@dataclass(frozen=True)
class ScoredPost:
    post: PostRecord
    score: float
    score_field: str = "hotScore"

    @property
    def id(self) -> str:
        return self.post.id

    def to_dict(self) -> Dict[str, Any]:
        out = self.post.to_dict()
        out[self.score_field] = self.score
        return out


@dataclass(frozen=True)
class CategoryAggregate:
    category: str
    post_count: int
    total_votes: int
    total_comments: int
    avg_hot_score: float
    trending_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "postCount": self.post_count,
            "totalVotes": self.total_votes,
            "totalComments": self.total_comments,
            "avgHotScore": self.avg_hot_score,
            "trendingScore": self.trending_score,
        }


def extract_posts(payload: Any) -> List[Dict[str, Any]]:
    if isinstance(payload, list):
        return [dict(item) for item in payload if isinstance(item, Mapping)]
    if not isinstance(payload, Mapping):
        return []
    for key in ("posts", "data", "items", "results"):
        value = payload.get(key)
        if isinstance(value, list):
            return [dict(item) for item in value if isinstance(item, Mapping)]
    return []
