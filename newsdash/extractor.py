"""Readable text extraction from article pages."""

import logging
import re

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

USER_AGENT = "newsdash/0.1 (News Dashboard Bot)"
FETCH_TIMEOUT = 10
MAX_CONTENT_LENGTH = 5000
MIN_REGION_LENGTH = 200

NOISE_SELECTOR = "script, style, nav, footer, aside, .advertisement, .ads, .social-share"

# Most specific containers first; the first one with enough text wins.
CONTENT_SELECTORS = [
    "article",
    ".entry-content",
    ".post-content",
    ".article-content",
    '[role="main"]',
    "main",
]

_WHITESPACE_RE = re.compile(r"\s+")


def extract_content(url: str, timeout: int = FETCH_TIMEOUT) -> str:
    """Fetch an article page and return its main readable text.

    Args:
        url: URL of the article page
        timeout: Request timeout in seconds

    Returns:
        Extracted text, or an empty string if the page could not be
        fetched or parsed
    """
    try:
        response = requests.get(url, timeout=timeout, headers={"User-Agent": USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        logger.warning("Error extracting content from %s: %s", url, e)
        return ""

    try:
        return extract_text(response.content)
    except (ValueError, TypeError) as e:
        logger.warning("Error parsing content from %s: %s", url, e)
        return ""


def extract_text(html) -> str:
    """Strip boilerplate from an HTML document and return its main text.

    Noise elements are removed first. Then CONTENT_SELECTORS are tried in
    order and the first region whose text exceeds MIN_REGION_LENGTH is
    used; otherwise the whole body. The result has whitespace collapsed and
    is cut to MAX_CONTENT_LENGTH characters with "..." appended.

    Args:
        html: HTML markup as str or bytes

    Returns:
        Cleaned text
    """
    soup = BeautifulSoup(html, "html.parser")

    for element in soup.select(NOISE_SELECTOR):
        element.extract()

    content = ""
    for selector in CONTENT_SELECTORS:
        text = _select_text(soup, selector)
        if len(text) > MIN_REGION_LENGTH:
            content = text
            break

    if not content:
        root = soup.body or soup
        content = _collapse_whitespace(root.get_text(" "))

    if len(content) > MAX_CONTENT_LENGTH:
        content = content[:MAX_CONTENT_LENGTH] + "..."

    return content


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    """Return the combined text of every element matching selector."""
    elements = soup.select(selector)
    return _collapse_whitespace(" ".join(el.get_text(" ") for el in elements))


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()
