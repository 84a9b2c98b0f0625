"""
Interview insights from the company-review provider.

The lookup is two calls: a company search that resolves the name to an
employer id, then an interviews call for that id. The interviews payload
has no stable shape, so the reviews array is located by trying a list of
extractor functions in order.

`lookup_interviews` never raises. Every failure becomes an
InterviewRecord carrying a `note` or `error` explaining what happened.
"""
import logging
import re
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

import requests
from pydantic import ValidationError

from cache import JsonFileCache, normalize_key
from schemas import InterviewRecord

logger = logging.getLogger(__name__)

MAX_QUESTIONS = 20
MAX_REVIEWS = 20
MIN_QUESTION_LENGTH = 10
MIN_PROCESS_QUESTION_LENGTH = 15
NOT_SPECIFIED = "Not specified"
NO_PROCESS_DESCRIPTION = "No detailed process description available"

ReviewExtractor = Callable[[Dict[str, Any]], Optional[List[Dict[str, Any]]]]


# -------- Locating the reviews array --------

def _as_list(value: Any) -> Optional[List[Dict[str, Any]]]:
    if isinstance(value, list) and value:
        return [v for v in value if isinstance(v, dict)] or None
    return None


def _data(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = payload.get("data")
    return data if isinstance(data, dict) else {}


def reviews_at_top_level(payload: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    return _as_list(payload.get("interviews"))


def reviews_under_data(payload: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    return _as_list(_data(payload).get("interviews"))


def reviews_under_employer_interviews(payload: Dict[str, Any]) -> Optional[List[Dict[str, Any]]]:
    nested = _data(payload).get("employerInterviews")
    if isinstance(nested, dict):
        return _as_list(nested.get("interviews"))
    return _as_list(nested)


REVIEW_EXTRACTORS: List[ReviewExtractor] = [
    reviews_at_top_level,
    reviews_under_data,
    reviews_under_employer_interviews,
]


def find_reviews(payload: Any, extractors: Iterable[ReviewExtractor] = REVIEW_EXTRACTORS) -> List[Dict[str, Any]]:
    """First non-empty match wins; [] when no extractor matches."""
    if not isinstance(payload, dict):
        return []
    for extract in extractors:
        found = extract(payload)
        if found:
            return found
    return []


# -------- Aggregation --------

def most_common(values: Iterable[Any], default: str = NOT_SPECIFIED) -> str:
    """Most frequent non-empty value; ties go to the value seen first."""
    counts = Counter(v for v in values if isinstance(v, str) and v.strip())
    if not counts:
        return default
    return counts.most_common(1)[0][0]


def job_title_of(review: Dict[str, Any]) -> Optional[str]:
    title = review.get("jobTitle")
    if isinstance(title, dict):
        return title.get("text")
    return title


def questions_from_review(review: Dict[str, Any]) -> List[str]:
    questions = []
    for q in review.get("userQuestions") or []:
        if isinstance(q, dict):
            q = q.get("question") or q.get("text") or q.get("content")
        if isinstance(q, str) and len(q.strip()) > MIN_QUESTION_LENGTH:
            questions.append(q.strip())
    return questions


def questions_from_process(description: Any) -> List[str]:
    """Clauses of a process description that ask something."""
    if not isinstance(description, str):
        return []
    clauses = (c.strip() for c in re.split(r"[.!]", description) if "?" in c)
    return [c for c in clauses if len(c) > MIN_PROCESS_QUESTION_LENGTH]


def dedupe_questions(questions: Iterable[str], limit: int = MAX_QUESTIONS) -> List[str]:
    return list(dict.fromkeys(questions))[:limit]


def aggregate_reviews(employer: str, reviews: List[Dict[str, Any]]) -> InterviewRecord:
    questions: List[str] = []
    for review in reviews:
        questions.extend(questions_from_review(review))
        questions.extend(questions_from_process(review.get("processDescription")))

    descriptions = [
        r["processDescription"] for r in reviews
        if isinstance(r.get("processDescription"), str) and r["processDescription"].strip()
    ]

    return InterviewRecord(
        employer=employer,
        difficulty=most_common(r.get("difficulty") for r in reviews),
        experience=most_common(r.get("experience") for r in reviews),
        jobTitle=most_common(job_title_of(r) for r in reviews),
        outcome=most_common(r.get("outcome") for r in reviews),
        process=max(descriptions, key=len) if descriptions else NO_PROCESS_DESCRIPTION,
        questions=dedupe_questions(questions),
        interviewCount=len(reviews),
        hasCompanyInfo=True,
    )


# -------- Provider calls --------

class ReviewProvider:
    """Thin client for the RapidAPI-hosted review provider."""

    def __init__(self, api_key: str, host: str, timeout: float = 8):
        self.base_url = f"https://{host}"
        self.headers = {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": host}
        self.timeout = timeout

    def get(self, path: str, params: Dict[str, Any]) -> requests.Response:
        return requests.get(f"{self.base_url}{path}", params=params, headers=self.headers, timeout=self.timeout)

    def search_companies(self, query: str) -> requests.Response:
        return self.get("/companies/search", {"query": query})

    def interviews(self, employer_id: Any, limit: int = MAX_REVIEWS) -> requests.Response:
        return self.get("/companies/interviews", {"companyId": employer_id, "limit": limit})

    def overview(self, employer_id: Any) -> requests.Response:
        return self.get("/companies/overview", {"companyId": employer_id})


def _no_interview_data(employer: str, provider: ReviewProvider, employer_id: Any) -> InterviewRecord:
    try:
        overview = provider.overview(employer_id)
        if overview.ok:
            return InterviewRecord(
                employer=employer,
                hasCompanyInfo=True,
                note="Company found but no interview details are publicly available",
            )
    except requests.RequestException as e:
        logger.warning(f"Overview lookup failed for {employer}: {e}")

    return InterviewRecord(
        employer=employer,
        hasCompanyInfo=True,
        note="This company may not have public interview data available",
        error="No interview data available for this company",
    )


def _fetch_interviews(company: str, provider: ReviewProvider) -> InterviewRecord:
    search = provider.search_companies(company)
    if not search.ok:
        logger.warning(f"Review search returned {search.status_code} for {company}")
        return InterviewRecord(employer=company, error=f"API returned {search.status_code}: {search.reason}")

    search_data = search.json()
    if not isinstance(search_data, dict) or not search_data.get("status") or search_data.get("error"):
        reason = search_data.get("error") if isinstance(search_data, dict) else None
        return InterviewRecord(employer=company, error=f"API Error: {reason or 'Request failed'}")

    results = _data(search_data).get("employerResults") or []
    if not results:
        return InterviewRecord(
            employer=company,
            note=f'No companies found matching "{company}" on the review site',
        )

    first = results[0] if isinstance(results[0], dict) else {}
    employer_info = first.get("employer") if isinstance(first.get("employer"), dict) else {}
    employer_id = employer_info.get("id")
    employer = employer_info.get("name") or employer_info.get("shortName") or company
    logger.info(f"Found employer {employer} (id {employer_id}) for {company}")

    if not employer_id:
        return InterviewRecord(
            employer=employer,
            hasCompanyInfo=True,
            error="Employer ID not found in search results",
        )

    interviews = provider.interviews(employer_id)
    if not interviews.ok:
        logger.warning(f"Interview lookup returned {interviews.status_code} for {employer}")
        return InterviewRecord(
            employer=employer,
            hasCompanyInfo=True,
            error=f"Interview API returned {interviews.status_code}: {interviews.reason}",
        )

    reviews = find_reviews(interviews.json())
    logger.info(f"{len(reviews)} interview reviews for {employer}")
    if not reviews:
        return _no_interview_data(employer, provider, employer_id)

    return aggregate_reviews(employer, reviews)


def lookup_interviews(
    company: str,
    api_key: Optional[str],
    host: str,
    cache: Optional[JsonFileCache] = None,
    timeout: float = 8,
) -> InterviewRecord:
    key = normalize_key(company)
    if cache is not None:
        cached = cache.get(key)
        if isinstance(cached, dict):
            try:
                record = InterviewRecord(**cached)
                logger.info(f"Interview cache hit for {key}")
                return record
            except ValidationError:
                logger.warning(f"Discarding malformed cached interview record for {key}")

    if not api_key:
        return InterviewRecord(employer=company, error="Review provider not configured")

    try:
        record = _fetch_interviews(company, ReviewProvider(api_key, host, timeout=timeout))
    except Exception as e:
        logger.warning(f"Interview fetch error for {company}: {e}")
        return InterviewRecord(
            employer=company,
            process="Error occurred while fetching interview data",
            error="Request failed",
            note=str(e) or type(e).__name__,
        )

    if cache is not None and record.interviewCount > 0:
        cache.set(key, record.model_dump())
    return record
