from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, TypeVar

from .records import PostRecord, ScoredPost, normalize_category, normalize_str


T = TypeVar("T")

SEARCH_FIELDS = ("title", "content", "excerpt", "authorName", "author")
MIN_QUERY_LENGTH = 2


def _raw_fields(item: Any) -> Mapping[str, Any]:
    if isinstance(item, ScoredPost):
        return item.post.to_dict()
    if isinstance(item, PostRecord):
        return item.to_dict()
    if isinstance(item, Mapping):
        return item
    return {}


def _category_of(item: Any) -> str:
    if isinstance(item, ScoredPost):
        return item.post.category
    if isinstance(item, PostRecord):
        return item.category
    return normalize_category(_raw_fields(item).get("category"))


def _post_id_of(item: Any) -> str:
    if isinstance(item, ScoredPost):
        return item.post.id
    if isinstance(item, PostRecord):
        return item.id
    return normalize_str(_raw_fields(item).get("id"))


def filter_by_category(posts: Iterable[T], category: Optional[str]) -> List[T]:
    items = list(posts)
    if not normalize_str(category):
        return items
    wanted = normalize_category(category).lower()
    return [item for item in items if _category_of(item).lower() == wanted]


def search_posts(posts: Iterable[T], query: Optional[str]) -> List[T]:
    """Case-insensitive substring search over title, body, author and category.

    Queries shorter than two characters do not narrow the feed.
    """
    items = list(posts)
    needle = normalize_str(query).strip().lower()
    if len(needle) < MIN_QUERY_LENGTH:
        return items
    out: List[T] = []
    for item in items:
        fields = _raw_fields(item)
        blob = " ".join(normalize_str(fields.get(key)).lower() for key in SEARCH_FIELDS)
        if needle in blob or needle in _category_of(item).lower():
            out.append(item)
    return out


def filter_by_author(posts: Iterable[T], author_id: Optional[str]) -> List[T]:
    wanted = normalize_str(author_id).strip()
    if not wanted:
        return []
    out: List[T] = []
    for item in posts:
        fields = _raw_fields(item)
        author = normalize_str(fields.get("authorId") or fields.get("author_id")).strip()
        if author == wanted:
            out.append(item)
    return out


def attach_comment_counts(
    posts: Iterable[Any],
    comments: Iterable[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Return copies of ``posts`` with ``commentCount`` taken from ``comments``."""
    counts: Dict[str, int] = {}
    for comment in comments:
        if not isinstance(comment, Mapping):
            continue
        post_id = normalize_str(comment.get("postId") or comment.get("post_id")).strip()
        if post_id:
            counts[post_id] = counts.get(post_id, 0) + 1
    out: List[Dict[str, Any]] = []
    for item in posts:
        enriched = dict(_raw_fields(item))
        enriched["commentCount"] = counts.get(_post_id_of(item), 0)
        out.append(enriched)
    return out
