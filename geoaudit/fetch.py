"""
Page fetching through crawl4ai.

Wraps AsyncWebCrawler for one-shot, non-retried fetches. A single URL is
fetched directly; with max_pages > 1 a bounded BFS deep crawl collects
pages in crawl order. HTML is located in whatever the crawler returns by
probing a few conventional payload keys.
"""

import json
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from crawl4ai import AsyncWebCrawler, BrowserConfig, CrawlerRunConfig, CacheMode
from crawl4ai.async_configs import ProxyConfig
from crawl4ai.deep_crawling import BFSDeepCrawlStrategy

from .config import AuditConfig
from .errors import FetchError, NoContentError

logger = logging.getLogger(__name__)

PathKey = Union[str, int]

HTML_PATHS: Sequence[Tuple[PathKey, ...]] = (
    ("html",),
    ("data", "html"),
    ("data", "body"),
    ("data",),
    ("results", 0, "html"),
    ("results", 0, "payload", "html"),
    ("output", "html"),
)


def _looks_like_html(value: Any) -> bool:
    return isinstance(value, str) and value.strip().startswith("<")


def _lookup(obj: Any, *path: PathKey) -> Any:
    for key in path:
        if obj is None:
            return None
        if isinstance(key, int):
            if not isinstance(obj, (list, tuple)) or len(obj) <= key:
                return None
            obj = obj[key]
        elif isinstance(obj, dict):
            obj = obj.get(key)
        else:
            obj = getattr(obj, key, None)
    return obj


def extract_html(payload: Any) -> Optional[str]:
    """
    Locate an HTML string inside a fetch response.

    Accepts a raw HTML string, a mapping, or an object (such as a crawl4ai
    CrawlResult). Falls back to scanning the JSON dump of the payload for a
    doctype or <html> tag. Returns None when nothing HTML-like is found.
    """
    if payload is None:
        return None
    if _looks_like_html(payload):
        return payload

    for path in HTML_PATHS:
        candidate = _lookup(payload, *path)
        if not candidate:
            continue
        if _looks_like_html(candidate):
            return candidate
        nested = _lookup(candidate, "html")
        if _looks_like_html(nested):
            return nested

    if not isinstance(payload, (dict, list)):
        return None
    try:
        dumped = json.dumps(payload, default=str)
    except (TypeError, ValueError):
        return None
    idx = dumped.find("<!DOCTYPE")
    if idx == -1:
        idx = dumped.find("<html")
    if idx == -1:
        return None
    return dumped[idx:].replace('\\"', '"').replace("\\n", "\n")


# ─── Crawler Configuration ────────────────────────────────────────────


def browser_config(config: AuditConfig) -> BrowserConfig:
    proxy = None
    if config.proxy_server:
        proxy = ProxyConfig(
            server=config.proxy_server,
            username=config.proxy_username,
            password=config.proxy_password,
        )
    return BrowserConfig(headless=True, proxy_config=proxy)


def run_config(config: AuditConfig) -> CrawlerRunConfig:
    deep_crawl = None
    if config.multi_page:
        deep_crawl = BFSDeepCrawlStrategy(
            max_depth=config.max_depth,
            max_pages=config.max_pages,
        )
    return CrawlerRunConfig(
        cache_mode=CacheMode.BYPASS,
        page_timeout=config.fetch_timeout_ms,
        wait_for="css:body",
        deep_crawl_strategy=deep_crawl,
    )


# ─── Fetch ────────────────────────────────────────────────────────────


async def fetch_pages(
    config: AuditConfig,
    crawler_factory: Callable[..., Any] = AsyncWebCrawler,
) -> List[Tuple[str, str]]:
    """
    Fetch the target (and, in multi-page mode, up to max_pages - 1 more
    pages) and return (url, html) pairs in crawl order.

    Raises:
        FetchError: the crawler raised, or the single-page fetch failed.
        NoContentError: no response contained extractable HTML.
    """
    logger.info(f"Starting fetch for {config.target_url} (max_pages={config.max_pages})")
    try:
        async with crawler_factory(config=browser_config(config)) as crawler:
            results = await crawler.arun(url=config.target_url, config=run_config(config))
    except Exception as e:
        raise FetchError(f"Fetch failed for {config.target_url}: {e}") from e

    # arun with deep crawl returns a list
    crawl_results = results if isinstance(results, list) else [results]

    pages: List[Tuple[str, str]] = []
    for result in crawl_results:
        url = getattr(result, "url", None) or config.target_url
        if getattr(result, "success", True) is False:
            message = getattr(result, "error_message", None) or "unknown error"
            if not config.multi_page:
                raise FetchError(f"Fetch failed for {url}: {message}")
            logger.warning(f"Skipping {url}: {message}")
            continue
        html = extract_html(result)
        if html is None:
            logger.warning(f"No HTML extracted from {url}")
            continue
        pages.append((url, html))
        if len(pages) >= config.max_pages:
            break

    if not pages:
        raise NoContentError(f"No HTML extracted for {config.target_url}")
    logger.info(f"Fetched {len(pages)} page(s)")
    return pages
