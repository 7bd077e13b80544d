"""Sitemap retrieval and keyword index construction.

A sitemap (or a sitemap index pointing at further sitemaps) is fetched and
flattened into a list of page URLs. The final path segment of every URL is
turned into a keyword, so ``https://example.com/blog/pricing-plans`` becomes
the keyword ``"pricing plans"`` pointing back at that page.
"""

from __future__ import annotations

import gzip
import logging
import urllib.error
import urllib.request
import warnings
from typing import Callable, Dict, List, Set, Tuple
from urllib.parse import unquote, urlparse
from xml.etree import ElementTree

from .config import EngineConfig, load_config
from .errors import FetchError, IndexEmptyWarning, ParseError
from .types import KeywordEntry

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], str]

USER_AGENT = "mdlinker/1.0 (+sitemap indexer)"


def fetch_sitemap_text(url: str, timeout: float = 20) -> str:
    """Fetch a sitemap from the given URL and return its decoded text.

    Gzipped files (by extension or content type) are transparently
    decompressed.

    Raises
    ------
    FetchError
        When the URL is invalid, the request fails or times out, or the
        server answers with a non-2xx status.
    """

    try:
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
        with urllib.request.urlopen(request, timeout=timeout) as resp:
            status = getattr(resp, "status", 200)
            if not 200 <= status < 300:
                raise FetchError(url, f"HTTP {status}")
            data = resp.read()
            content_type = resp.headers.get("Content-Type", "")
            charset = resp.headers.get_content_charset() or "utf-8"
    except urllib.error.HTTPError as exc:
        raise FetchError(url, f"HTTP {exc.code}") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise FetchError(url, str(getattr(exc, "reason", exc))) from exc

    if url.lower().endswith(".gz") or "gzip" in content_type:
        try:
            data = gzip.decompress(data)
        except OSError:
            pass
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode(charset, errors="replace")


def parse_sitemap(xml_text: str, url: str = "<sitemap>") -> Tuple[str, List[str]]:
    """Parse a sitemap document into its kind and the ``<loc>`` values it lists.

    Returns ``("sitemapindex", nested_sitemap_urls)`` for sitemap indexes and
    ``("urlset", page_urls)`` for regular sitemaps. Any other root element
    yields ``("unknown", [])``. Namespaces are ignored.
    """

    try:
        root = ElementTree.fromstring(xml_text)
    except ElementTree.ParseError as exc:
        raise ParseError(url, str(exc)) from exc

    tag = root.tag.rsplit("}", 1)[-1].lower()
    if tag == "sitemapindex":
        path = "{*}sitemap/{*}loc"
    elif tag == "urlset":
        path = "{*}url/{*}loc"
    else:
        return "unknown", []

    locs = []
    for loc in root.findall(path):
        value = (loc.text or "").strip()
        if value:
            locs.append(value)
    return tag, locs


def keywords_from_url(url: str, segments: str = "last") -> List[Tuple[str, bool]]:
    """Derive ``(keyword, is_single_word)`` pairs from the URL path.

    Only the final non-empty segment is used unless ``segments`` is
    ``"all"``. Hyphens become spaces and the result is lower-cased; a segment
    without a hyphen is a single-word keyword.
    """

    path = urlparse(url).path
    parts = [unquote(part) for part in path.split("/") if part.strip()]
    if not parts:
        return []
    if segments != "all":
        parts = parts[-1:]

    keywords = []
    for part in parts:
        keyword = " ".join(part.replace("-", " ").lower().split())
        if keyword:
            keywords.append((keyword, "-" not in part))
    return keywords


def build_keyword_index(urls: List[str], segments: str = "last") -> Dict[str, KeywordEntry]:
    """Map keywords to their page; the first URL seen for a keyword wins."""

    index: Dict[str, KeywordEntry] = {}
    for url in urls:
        for keyword, single in keywords_from_url(url, segments):
            if keyword in index:
                continue
            index[keyword] = KeywordEntry(keyword=keyword, url=url, is_single_word=single)
    return index


class SitemapIndexer:
    """Build a keyword index from a sitemap URL."""

    def __init__(self, config: EngineConfig | None = None, fetch: Fetcher | None = None) -> None:
        self.config = config or load_config(None)
        timeout = float(self.config.get("fetch_timeout", 20))
        self._fetch = fetch or (lambda url: fetch_sitemap_text(url, timeout=timeout))
        self.max_depth = int(self.config.get("max_sitemap_depth", 5))

    def index(self, sitemap_url: str) -> Dict[str, KeywordEntry]:
        """Return the keyword index for ``sitemap_url``.

        Fetch and parse failures of the top-level sitemap are logged and
        produce an empty index.
        """

        try:
            urls = self.collect_urls(sitemap_url)
        except (FetchError, ParseError) as exc:
            logger.warning("Continuing with an empty keyword index: %s", exc)
            return {}

        keyword_index = build_keyword_index(urls, self.config.get("keyword_segments", "last"))
        if not keyword_index:
            logger.warning("Sitemap %s yielded no keywords", sitemap_url)
            warnings.warn(f"Sitemap {sitemap_url} yielded no keywords", IndexEmptyWarning, stacklevel=2)
        else:
            logger.info("Indexed %d keywords from %d URLs in %s", len(keyword_index), len(urls), sitemap_url)
        return keyword_index

    def collect_urls(self, sitemap_url: str) -> List[str]:
        """Return page URLs from the sitemap and any nested sitemaps.

        Errors on the top-level document propagate; nested sitemaps that fail
        are skipped. Each sitemap is visited at most once and nesting stops
        at ``max_sitemap_depth``.
        """

        found: Dict[str, None] = {}
        visited: Set[str] = set()
        self._collect(sitemap_url, 0, visited, found)
        return list(found)

    def _collect(self, url: str, depth: int, visited: Set[str], found: Dict[str, None]) -> None:
        visited.add(url)
        kind, locs = parse_sitemap(self._fetch(url), url)
        if kind == "urlset":
            for loc in locs:
                found.setdefault(loc, None)
            return
        if kind != "sitemapindex":
            logger.debug("Ignoring %s: not a sitemap document", url)
            return

        for nested in locs:
            if nested in visited:
                logger.debug("Skipping already visited sitemap %s", nested)
                continue
            if depth + 1 > self.max_depth:
                logger.warning("Sitemap nesting deeper than %d at %s; not following", self.max_depth, nested)
                continue
            try:
                self._collect(nested, depth + 1, visited, found)
            except (FetchError, ParseError) as exc:
                logger.warning("Skipping nested sitemap: %s", exc)
