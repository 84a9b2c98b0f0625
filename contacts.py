"""
Contact search over professional profiles via Google Custom Search.
"""
import logging
import re
from typing import Any, Dict, List, Optional

import requests

from schemas import Contact, SearchResult

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_URL = "https://customsearch.googleapis.com/customsearch/v1"
PROFILE_SITE = "site:linkedin.com/in"
MAX_RESULTS = 10
MAX_CONTACTS = 8

_BRANDING_SUFFIXES = (" | LinkedIn", " - LinkedIn")

# Tried in order; the first capture wins.
_POSITION_PATTERNS = [
    re.compile(r"([A-Z][\w&/+.-]*(?:\s+[A-Z][\w&/+.-]*)*)\s+at\s+"),
    re.compile(r"\|\s*([^·|]+?)(?:\s+at\s+|\s*·|$)"),
    re.compile(r"\bat\s+([^·]+?)\s*(?:·|$)", re.IGNORECASE),
]


class SearchNotConfigured(Exception):
    pass


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _result_items(data: Any) -> List[Dict[str, Any]]:
    """Result dicts that carry a link; anything else in the payload is dropped."""
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        return []
    return [i for i in items if isinstance(i, dict) and _text(i.get("link"))]


def strip_branding(title: str) -> str:
    for suffix in _BRANDING_SUFFIXES:
        title = title.replace(suffix, "")
    return title.strip()


def extract_position(snippet: str) -> str:
    """Best-effort job title from a profile snippet; "" when nothing matches."""
    for pattern in _POSITION_PATTERNS:
        match = pattern.search(snippet or "")
        if match and match.group(1).strip():
            return match.group(1).strip()
    return ""


def build_employee_query(company: str, role: Optional[str] = None, university: Optional[str] = None) -> str:
    parts = [f"{company} employees", PROFILE_SITE]
    if role:
        parts.append(f'"{role}"')
    if university:
        parts.append(f'"{university}"')
    return " ".join(parts)


def build_profile_query(company: str) -> str:
    return f'{PROFILE_SITE}/ "{company}" OR "{company} employee" OR "works at {company}"'


def custom_search(
    query: str,
    api_key: Optional[str],
    cse_id: Optional[str],
    num: int = MAX_RESULTS,
    timeout: float = 8,
) -> List[Dict[str, Any]]:
    """
    Raw result items from Google Custom Search.

    Raises SearchNotConfigured when credentials are missing and
    requests.RequestException on provider failure.
    """
    if not api_key or not cse_id:
        raise SearchNotConfigured("Google Custom Search API not configured")

    params = {"q": query, "key": api_key, "cx": cse_id, "num": num}
    r = requests.get(CUSTOM_SEARCH_URL, params=params, timeout=timeout)
    if not r.ok:
        try:
            body = r.json()
        except ValueError:
            body = None
        error = body.get("error") if isinstance(body, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        raise requests.HTTPError(message or f"Custom Search returned {r.status_code}", response=r)
    return _result_items(r.json())


def search_employees(
    company: str,
    api_key: Optional[str],
    cse_id: Optional[str],
    role: Optional[str] = None,
    university: Optional[str] = None,
    timeout: float = 8,
) -> List[SearchResult]:
    items = custom_search(build_employee_query(company, role, university), api_key, cse_id, timeout=timeout)
    results = []
    for item in items[:MAX_RESULTS]:
        results.append(SearchResult(
            title=strip_branding(_text(item.get("title"))),
            link=item["link"],
            snippet=_text(item.get("snippet")),
        ))
    return results


def fetch_profiles(
    company: str,
    api_key: Optional[str],
    cse_id: Optional[str],
    limit: int = MAX_CONTACTS,
    timeout: float = 8,
) -> List[Contact]:
    """Profiles mentioning the company, for the overview. Never raises."""
    try:
        items = custom_search(build_profile_query(company), api_key, cse_id, timeout=timeout)
    except SearchNotConfigured as e:
        logger.info(str(e))
        return []
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Profile search failed for {company}: {e}")
        return []

    contacts = []
    for item in items:
        snippet = _text(item.get("snippet"))
        contacts.append(Contact(
            name=strip_branding(_text(item.get("title"))) or "Unknown",
            link=item["link"],
            description=snippet,
            position=extract_position(snippet),
        ))
    return contacts[:limit]
