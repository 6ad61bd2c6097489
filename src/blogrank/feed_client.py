import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from requests import exceptions as requests_exceptions

from .records import extract_posts


logger = logging.getLogger(__name__)


class FeedClientError(RuntimeError):
    pass


class FeedAuthError(FeedClientError):
    pass


def _error_message(resp: Any) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}
    return str(data.get("error") or data.get("message") or resp.text or "request failed")


def load_posts_file(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON export of posts: a bare list or a ``{"posts": [...]}`` envelope."""
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            payload = json.load(f)
    except ValueError as e:
        raise FeedClientError(f"Could not parse posts file {path}: {e}") from e
    posts = extract_posts(payload)
    logger.info("Loaded posts count=%s path=%s", len(posts), path)
    return posts


class FeedClient:
    """Fetches post collections from a JSON endpoint.

    The endpoint may answer with a bare list or an envelope keyed by
    ``posts``, ``data``, ``items`` or ``results``.
    """

    def __init__(self, timeout_seconds: int = 30, token: Optional[str] = None):
        self.timeout_seconds = timeout_seconds
        self.token = (token or "").strip() or None

    @property
    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def fetch_posts(self, url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        if not str(url or "").strip():
            raise ValueError("url must be provided.")
        logger.debug("Fetching posts url=%s params=%s", url, params)
        try:
            resp = requests.get(
                url,
                headers=self._headers,
                params=params or {},
                timeout=self.timeout_seconds,
            )
        except requests_exceptions.Timeout as e:
            raise FeedClientError(f"Timed out while fetching posts from {url}.") from e
        except requests_exceptions.ConnectionError as e:
            raise FeedClientError(f"Could not connect to {url}: {e}") from e

        if resp.status_code in {401, 403}:
            raise FeedAuthError(f"Feed auth error {resp.status_code}: {_error_message(resp)}")

        if resp.status_code >= 400:
            raise FeedClientError(f"Feed error {resp.status_code}: {_error_message(resp)}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise FeedClientError(f"Feed at {url} did not return JSON.") from e

        posts = extract_posts(payload)
        logger.info("Fetched posts count=%s url=%s", len(posts), url)
        return posts
