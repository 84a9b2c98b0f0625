"""
Recent news for a company.

GNews is used when a token is configured; otherwise the keyless Google
News RSS feed is read instead.
"""
import logging
from typing import List, Optional
from xml.etree import ElementTree as ET

import requests

from schemas import NewsItem

logger = logging.getLogger(__name__)

GNEWS_URL = "https://gnews.io/api/v4/search"
NEWS_LIMIT = 5


def dedupe_by_title(items: List[NewsItem]) -> List[NewsItem]:
    """Keep the first article for each title, compared trimmed and case-insensitively."""
    seen = set()
    unique = []
    for item in items:
        key = item.title.strip().lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


def fetch_gnews(company: str, api_key: str, limit: int = NEWS_LIMIT, timeout: float = 8) -> List[NewsItem]:
    params = {"q": company, "lang": "en", "max": limit, "token": api_key}
    try:
        r = requests.get(GNEWS_URL, params=params, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"News fetch failed for {company}: {e}")
        return []

    articles = data.get("articles") if isinstance(data, dict) else None
    if not isinstance(articles, list):
        logger.warning(f"Unexpected news payload for {company}")
        return []

    items = []
    for a in articles:
        if not isinstance(a, dict) or not isinstance(a.get("title"), str) or not a["title"].strip():
            continue
        link = a.get("url")
        items.append(NewsItem(title=a["title"], link=link if isinstance(link, str) else ""))
    return items


def fetch_google_news_rss(company: str, locale: Optional[str] = None, limit: int = NEWS_LIMIT, timeout: float = 8) -> List[NewsItem]:
    # Google News RSS endpoint
    q = requests.utils.quote(company)
    hl = (locale or "en-US")
    rss_url = f"https://news.google.com/rss/search?q={q}&hl={hl}&gl=US&ceid=US:en"
    items: List[NewsItem] = []
    try:
        resp = requests.get(rss_url, timeout=timeout)
        resp.raise_for_status()
        root = ET.fromstring(resp.text)
        # RSS structure: rss > channel > item
        for item in root.findall(".//item")[:limit]:
            title_el = item.find("title")
            link_el = item.find("link")
            if title_el is None or not title_el.text:
                continue
            items.append(NewsItem(
                title=title_el.text,
                link=link_el.text if link_el is not None and link_el.text else "",
            ))
    except (requests.RequestException, ET.ParseError) as e:
        logger.warning(f"RSS news fetch failed for {company}: {e}")
        return []
    return items


def get_news(company: str, api_key: Optional[str] = None, limit: int = NEWS_LIMIT, timeout: float = 8) -> List[NewsItem]:
    """Deduplicated recent articles; an empty list on any provider failure."""
    if api_key:
        items = fetch_gnews(company, api_key, limit=limit, timeout=timeout)
    else:
        items = fetch_google_news_rss(company, limit=limit, timeout=timeout)
    return dedupe_by_title(items)
