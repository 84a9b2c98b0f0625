"""
Homepage discovery and summary extraction.
"""
import logging
import re
from typing import List, Optional, Tuple

import requests
from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

CANDIDATE_PATHS = ["/", "/about", "/en", "/home", "/index.html"]
NO_SUMMARY = "No values summary found."
SUMMARY_MIN_LENGTH = 40
SUMMARY_MAX_LENGTH = 300


def guess_base_url(company: str) -> str:
    host = re.sub(r"[^a-z0-9-]", "", company.lower())
    return f"https://{host}.com"


def fallback_url(company: str) -> str:
    return f"https://www.google.com/search?q={requests.utils.quote(company)}+official+site"


def try_pages(base_url: str, paths: List[str], timeout: float = 8) -> Optional[Tuple[str, str]]:
    """Return (url, html) for the first path that answers with a 2xx status."""
    for path in paths:
        url = f"{base_url.rstrip('/')}{path}"
        try:
            r = requests.get(url, timeout=timeout)
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Page fetch failed for {url}: {e}")
            continue
        if r.ok:
            return url, r.text
    return None


def extract_summary(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for p in soup.find_all("p"):
        text = re.sub(r"\s+", " ", p.get_text()).strip()
        if SUMMARY_MIN_LENGTH < len(text) < SUMMARY_MAX_LENGTH:
            return text
    return NO_SUMMARY


def discover_site(company: str, timeout: float = 8) -> Tuple[str, str]:
    """
    Find the company's homepage and a one-paragraph summary of it.

    Never raises: when no candidate page answers, a web-search URL and the
    placeholder summary are returned instead.
    """
    page = try_pages(guess_base_url(company), CANDIDATE_PATHS, timeout=timeout)
    if page is None:
        logger.info(f"No homepage found for: {company}")
        return fallback_url(company), NO_SUMMARY

    url, html = page
    try:
        return url, extract_summary(html)
    except Exception as e:
        logger.warning(f"Summary extraction failed for {url}: {e}")
        return url, NO_SUMMARY
