import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .config import Config, load_config
from .feed_client import FeedAuthError, FeedClient, load_posts_file
from .feeds import filter_by_author, filter_by_category, search_posts
from .logging_utils import setup_logging
from .ranking import get_hot_posts, get_trending_posts, get_trending_topics, resolve_now
from .records import parse_timestamp


logger = logging.getLogger(__name__)


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _load_posts(args: argparse.Namespace, cfg: Config) -> List[Dict[str, Any]]:
    if args.input:
        return load_posts_file(Path(args.input))
    url = args.url or cfg.feed_url
    if not url:
        raise SystemExit("You must provide --input, --url or set BLOGRANK_FEED_URL.")
    client = FeedClient(timeout_seconds=cfg.feed_timeout_seconds, token=cfg.feed_token)
    return client.fetch_posts(url)


def _select_posts(args: argparse.Namespace, cfg: Config) -> List[Dict[str, Any]]:
    posts = _load_posts(args, cfg)
    posts = filter_by_category(posts, args.category)
    posts = search_posts(posts, args.search)
    if args.author:
        posts = filter_by_author(posts, args.author)
    logger.info("Ranking posts count=%s command=%s", len(posts), args.command)
    return posts


def _now(args: argparse.Namespace) -> float:
    if args.now and parse_timestamp(args.now) is None:
        raise SystemExit(f"Could not parse --now value: {args.now}")
    return resolve_now(args.now)


def cmd_hot(args: argparse.Namespace, cfg: Config) -> None:
    """Print the hottest posts, highest score first."""
    limit = cfg.hot_limit if args.limit is None else args.limit
    ranked = get_hot_posts(_select_posts(args, cfg), limit=limit, now=_now(args))
    print_json([item.to_dict() for item in ranked])


def cmd_trending(args: argparse.Namespace, cfg: Config) -> None:
    """Print posts gaining engagement fastest over the last three days."""
    limit = cfg.trending_limit if args.limit is None else args.limit
    ranked = get_trending_posts(_select_posts(args, cfg), limit=limit, now=_now(args))
    print_json([item.to_dict() for item in ranked])


def cmd_topics(args: argparse.Namespace, cfg: Config) -> None:
    """Print per-category rollups ranked by engagement per post."""
    topics = get_trending_topics(_select_posts(args, cfg), now=_now(args))
    if args.limit is not None:
        topics = topics[: max(0, args.limit)]
    print_json([topic.to_dict() for topic in topics])


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", help="Path to a JSON file with posts")
    source.add_argument("--url", help="JSON endpoint returning posts")
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument("--now", help="Reference instant (ISO-8601), defaults to the current time")
    parser.add_argument("--category", help="Only rank posts in this category")
    parser.add_argument("--search", help="Only rank posts matching this text")
    parser.add_argument("--author", help="Only rank posts by this author id")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rank blog posts by hot score, trending velocity or category.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_hot = subparsers.add_parser("hot", help="Rank posts by hot score")
    _add_common_arguments(p_hot)
    p_hot.set_defaults(func=cmd_hot)

    p_trending = subparsers.add_parser("trending", help="Rank posts by recent engagement velocity")
    _add_common_arguments(p_trending)
    p_trending.set_defaults(func=cmd_trending)

    p_topics = subparsers.add_parser("topics", help="Rank categories by engagement per post")
    _add_common_arguments(p_topics)
    p_topics.set_defaults(func=cmd_topics)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        cfg = load_config()
        setup_logging(cfg)
        parser = build_parser()
        args = parser.parse_args(argv)
        args.func(args, cfg)
    except FeedAuthError as e:
        raise SystemExit(str(e))
    except SystemExit:
        raise
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        raise SystemExit(f"Error: {e}")


if __name__ == "__main__":
    main()
