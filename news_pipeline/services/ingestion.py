"""Ingestion adapters that turn a web page or an RSS feed into RawItems."""
import logging
import re
from datetime import datetime, timezone
from time import struct_time
from typing import List, Optional
from urllib.parse import urlparse

import feedparser
import httpx
from bs4 import BeautifulSoup
from pydantic import ValidationError

from ..exceptions import IngestionError
from ..models.schemas import RawItem

logger = logging.getLogger(__name__)

NOISE_TAGS = ["script", "style", "noscript", "svg", "nav", "header", "footer", "aside"]

ARTICLE_SELECTORS = [
    "article",
    ".article-body",
    ".article__body",
    ".ArticleBody",
    ".story-body",
    ".post-content",
    ".entry-content",
    ".content__article-body",
    ".c-article__body",
]

PUBLISHED_META = [
    ("meta", {"property": "article:published_time"}, "content"),
    ("meta", {"name": "pubdate"}, "content"),
    ("meta", {"name": "publish-date"}, "content"),
    ("meta", {"name": "date"}, "content"),
    ("time", {"datetime": True}, "datetime"),
    ("meta", {"name": "DC.date.issued"}, "content"),
    ("meta", {"property": "og:updated_time"}, "content"),
]

# Bodies shorter than this are considered teasers
MIN_BODY_LENGTH = 300
MIN_PARAGRAPH_LENGTH = 50
MAX_PARAGRAPHS = 30
MAX_RSS_ITEMS = 10

UI_PATTERNS = [
    # Account and subscription prompts
    r'Sign in.*?account',
    r'Subscribe.*?newsletters?',
    r'Follow.*?(?:Facebook|Twitter|Instagram)',
    r'Ad Feedback',
    # Ads and feedback forms
    r'How relevant is this ad to you\?',
    r'Did you encounter any technical issues\?',
    r'Other issues.*?Cancel.*?Submit',
    # Sharing
    r'Facebook.*?Tweet.*?Email.*?Link.*?Link Copied!',
    r'See all topics',
    # Footer and legal text
    r'Terms of Use.*?Privacy Policy.*?Ad Choices',
    r'© \d{4}.*?All Rights Reserved',
    # Page structure
    r'Close icon',
    r'\d+ min read',
]


def clean_text(text: str) -> str:
    """
    Clean up text extracted from web pages by removing navigation and UI
    fragments, normalizing whitespace and dropping very short lines.

    Args:
        text: Raw text from web page

    Returns:
        Cleaned text with paragraphs separated by blank lines
    """
    if not text:
        return ""

    for pattern in UI_PATTERNS:
        text = re.sub(pattern, '', text, flags=re.IGNORECASE | re.DOTALL)

    text = text.replace('\t', ' ')
    text = re.sub(r' {2,}', ' ', text)

    # Keep substantial lines only (likely navigation otherwise)
    lines = []
    for line in text.split('\n'):
        line = line.strip()
        if line and (len(line.split()) > 2 or len(line) > 20):
            lines.append(line)

    return '\n\n'.join(lines).strip()


def validate_url(url: str) -> bool:
    """True if the URL has an http(s) scheme and a host."""
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return result.scheme in ("http", "https") and bool(result.netloc)


def extract_domain(url: str) -> str:
    hostname = urlparse(url).hostname
    if not hostname:
        return "Unknown Publisher"
    return hostname.replace("www.", "")


def parse_published(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp from page metadata."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _meta_content(soup: BeautifulSoup, **attrs) -> Optional[str]:
    node = soup.find("meta", attrs=attrs)
    if node and node.get("content"):
        return node["content"].strip()
    return None


def parse_article_html(html: str, source_url: str) -> RawItem:
    """
    Build a RawItem from an article page.

    Title priority is og:title, twitter:title, then <title>. The body comes from
    the first article container with enough paragraph text, else from all
    long paragraphs on the page.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NOISE_TAGS):
        tag.decompose()

    title = (
        _meta_content(soup, property="og:title")
        or _meta_content(soup, name="twitter:title")
        or (soup.title.get_text(strip=True) if soup.title else "")
    )
    publisher = (
        _meta_content(soup, property="og:site_name")
        or _meta_content(soup, name="application-name")
        or extract_domain(source_url)
    )

    published_at = None
    for tag_name, attrs, attr in PUBLISHED_META:
        node = soup.find(tag_name, attrs=attrs)
        if node is not None:
            published_at = parse_published(node.get(attr))
            if published_at:
                break

    body = ""
    for selector in ARTICLE_SELECTORS:
        container = soup.select_one(selector)
        if container is None:
            continue
        body = "\n".join(p.get_text(" ", strip=True) for p in container.find_all("p"))
        if len(body) > MIN_BODY_LENGTH:
            break

    if len(body) < MIN_BODY_LENGTH:
        paragraphs = [p.get_text(" ", strip=True) for p in soup.find_all("p")]
        long_paragraphs = [p for p in paragraphs if len(p) > MIN_PARAGRAPH_LENGTH]
        body = "\n".join(long_paragraphs[:MAX_PARAGRAPHS])

    body = clean_text(body)
    if not title or not body:
        raise IngestionError(f"Failed to extract content from URL: {source_url}")

    return RawItem(
        title=title,
        body=body,
        source_url=source_url,
        publisher=publisher,
        published_at=published_at or datetime.now(timezone.utc),
    )


async def _fetch(client: httpx.AsyncClient, url: str, user_agent: str, timeout: float) -> httpx.Response:
    response = await client.get(url, headers={"User-Agent": user_agent}, timeout=timeout, follow_redirects=True)
    response.raise_for_status()
    return response


async def ingest_from_url(
    client: httpx.AsyncClient,
    url: str,
    user_agent: str,
    timeout: float = 20.0,
) -> RawItem:
    """Scrape an article page into a RawItem."""
    if not validate_url(url):
        raise IngestionError(f"Invalid URL format: {url}")

    logger.info(f"Loading article from URL: {url}")
    try:
        response = await _fetch(client, url, user_agent, timeout)
    except httpx.HTTPError as e:
        logger.error(f"Error ingesting from URL {url}: {e}")
        raise IngestionError(f"Failed to fetch URL: {url}") from e

    item = parse_article_html(response.text, url)
    logger.info(f"Successfully loaded {len(item.body)} characters from {url}")
    return item


def _entry_published(entry) -> datetime:
    parsed: Optional[struct_time] = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return datetime.now(timezone.utc)
    return datetime(*parsed[:6], tzinfo=timezone.utc)


async def ingest_from_rss(
    client: httpx.AsyncClient,
    feed_url: str,
    limit: int,
    user_agent: str,
    timeout: float = 20.0,
) -> List[RawItem]:
    """
    Read the newest ``limit`` items (1-10) of a feed.

    Items whose description is a short teaser are scraped from their link;
    the teaser is kept if that fails.
    """
    try:
        response = await _fetch(client, feed_url, user_agent, timeout)
    except httpx.HTTPError as e:
        logger.error(f"Error ingesting from RSS {feed_url}: {e}")
        raise IngestionError(f"Failed to fetch feed: {feed_url}") from e

    feed = feedparser.parse(response.content)
    if feed.bozo and not feed.entries:
        raise IngestionError(f"Failed to parse feed {feed_url}: {feed.get('bozo_exception')}")

    feed_title = feed.feed.get("title", "")
    publisher = feed_title or extract_domain(feed_url)
    entries = feed.entries[: max(1, min(limit, MAX_RSS_ITEMS))]
    logger.info(f"📰 Feed {feed_url}: {len(feed.entries)} entries, taking {len(entries)}")

    items = []
    for entry in entries:
        source_url = entry.get("link") or entry.get("id", "")
        summary = entry.get("summary") or entry.get("description") or ""
        body = clean_text(BeautifulSoup(summary, "html.parser").get_text("\n"))

        if len(body) < MIN_BODY_LENGTH and validate_url(source_url):
            try:
                page = await ingest_from_url(client, source_url, user_agent, timeout)
                body = page.body
            except IngestionError as e:
                logger.warning(f"Keeping RSS description for {source_url}: {e}")

        try:
            items.append(
                RawItem(
                    title=entry.get("title") or feed_title,
                    body=body,
                    source_url=source_url,
                    publisher=publisher,
                    published_at=_entry_published(entry),
                )
            )
        except ValidationError as e:
            logger.warning(f"Skipping unusable feed entry {source_url!r}: {e.error_count()} validation errors")

    return items
