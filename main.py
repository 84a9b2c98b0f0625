import hmac
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional

import requests
from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from cache import JsonFileCache, MemoryCache, make_cache_key, normalize_key
from chat import ChatProviderError, complete_chat
from config import Settings, get_settings
from contacts import SearchNotConfigured, fetch_profiles, search_employees
from database import create_document, get_documents, upsert_document
from discovery import discover_site
from interviews import lookup_interviews
from news import get_news
from prep import DEFAULT_ROLE, available_roles, get_prep_plan
from rate_limit import InMemoryRateLimitStore, SlidingWindowRateLimiter
from schemas import (
    AdminReport,
    Caller,
    ChatRequest,
    Companyquery,
    ContactSearchResponse,
    Feedback,
    FeedbackRequest,
    InterviewRecord,
    NewsItem,
    PrepPlan,
    SignInRequest,
    SiteSearchRequest,
    SiteSummary,
    Usersignin,
)

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

INTERVIEW_CACHE_FILE = "searchCache.json"
CONTACTS_CACHE_FILE = "contactsCache.json"

app = FastAPI(title="Compli API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------- Shared state (injected so tests can swap it) --------

_news_cache = MemoryCache()
_rate_limiter: Optional[SlidingWindowRateLimiter] = None


def get_news_cache(settings: Settings = Depends(get_settings)) -> MemoryCache:
    _news_cache.ttl_seconds = settings.cache_ttl_seconds
    return _news_cache


def get_interview_cache(settings: Settings = Depends(get_settings)) -> JsonFileCache:
    return JsonFileCache(Path(settings.cache_dir) / INTERVIEW_CACHE_FILE, ttl_seconds=settings.cache_ttl_seconds)


def get_contacts_cache(settings: Settings = Depends(get_settings)) -> JsonFileCache:
    return JsonFileCache(Path(settings.cache_dir) / CONTACTS_CACHE_FILE, ttl_seconds=settings.cache_ttl_seconds)


def get_rate_limiter(settings: Settings = Depends(get_settings)) -> SlidingWindowRateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = SlidingWindowRateLimiter(
            InMemoryRateLimitStore(),
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _rate_limiter


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_proxy_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> Caller:
    """
    Identity as forwarded by the identity provider's session proxy.

    The X-User-* headers are trusted only when the request also carries the
    shared IDENTITY_PROXY_SECRET; otherwise the caller is anonymous. With no
    secret configured every caller is anonymous, so the admin report stays closed.
    """
    secret = settings.identity_proxy_secret
    if not secret or not x_proxy_secret or not hmac.compare_digest(x_proxy_secret.encode(), secret.encode()):
        return Caller()
    return Caller(user_id=x_user_id, email=x_user_email)


def _require_company(company: Optional[str], message: str) -> str:
    company = (company or "").strip()
    if not company:
        raise HTTPException(status_code=400, detail=message)
    return company


@app.get("/")
def read_root():
    return {
        "product": "Compli API",
        "status": "ok",
        "endpoints": {
            "GET /api/search": "Homepage, summary, news and contacts for a company",
            "POST /api/search": "Same as GET, with contact options",
            "GET /api/news": "Recent news for a company",
            "GET /api/google-search": "Employee profiles, filtered by role or university",
            "GET /api/questions": "Interview insights for a company",
            "POST /api/llm": "Chat completion for the interview coach",
            "POST /api/feedback": "Submit feedback",
            "POST /api/signins": "Record a sign-in",
            "GET /api/admin/report": "Sign-ins and feedback (admin only)",
            "GET /api/prep-plan": "Seven-day preparation plan for a role",
        },
    }


# -------- Aggregation helpers --------

def cached_news(company: str, settings: Settings, cache: MemoryCache) -> List[NewsItem]:
    key = normalize_key(company)
    items = cache.get(key)
    if items is None:
        items = get_news(company, api_key=settings.gnews_api_key, timeout=settings.request_timeout)
        if items:
            cache.set(key, items)
    return items


def build_site_summary(
    company: str,
    settings: Settings,
    news_cache: MemoryCache,
    include_contacts: bool = True,
    max_contacts: int = 8,
) -> SiteSummary:
    with ThreadPoolExecutor(max_workers=3) as pool:
        site = pool.submit(discover_site, company, settings.request_timeout)
        news = pool.submit(cached_news, company, settings, news_cache)
        profiles = None
        if include_contacts:
            profiles = pool.submit(
                fetch_profiles,
                company,
                settings.google_api_key,
                settings.google_cse_id,
                max_contacts,
                settings.request_timeout,
            )
        url, summary = site.result()
        news_items = news.result()
        contacts = profiles.result() if profiles is not None else None

    logger.info(f"Search for {company}: {len(news_items)} news, {len(contacts or [])} contacts")

    # Usage log (best-effort)
    try:
        create_document("companyquery", Companyquery(company=company, normalized=normalize_key(company)))
    except Exception as e:
        logger.debug(f"Query not logged: {e}")

    return SiteSummary(url=url, summary=summary, news=news_items, contacts=contacts)


# -------- API routes --------

@app.get("/api/search", response_model=SiteSummary, response_model_exclude_none=True)
def search_company(
    company: Optional[str] = Query(None, description="Company name to search for"),
    settings: Settings = Depends(get_settings),
    news_cache: MemoryCache = Depends(get_news_cache),
):
    company = _require_company(company, "Missing company")
    return build_site_summary(company, settings, news_cache)


@app.post("/api/search", response_model=SiteSummary, response_model_exclude_none=True)
def search_company_post(
    payload: SiteSearchRequest,
    settings: Settings = Depends(get_settings),
    news_cache: MemoryCache = Depends(get_news_cache),
):
    company = _require_company(payload.company, "Missing company name")
    return build_site_summary(
        company,
        settings,
        news_cache,
        include_contacts=payload.includeContacts,
        max_contacts=payload.maxContacts,
    )


@app.get("/api/news", response_model=List[NewsItem])
def company_news(
    company: Optional[str] = Query(None, description="Company name to look up"),
    settings: Settings = Depends(get_settings),
    news_cache: MemoryCache = Depends(get_news_cache),
):
    company = _require_company(company, "Missing company")
    return cached_news(company, settings, news_cache)


@app.get("/api/google-search", response_model=ContactSearchResponse, response_model_exclude_none=True)
def contact_search(
    company: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    university: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    cache: JsonFileCache = Depends(get_contacts_cache),
):
    company = _require_company(company, "Missing company parameter")
    key = make_cache_key(company, role or "", university or "")

    cached = cache.get(key)
    if isinstance(cached, list):
        return ContactSearchResponse(results=cached)

    try:
        results = search_employees(
            company,
            settings.google_api_key,
            settings.google_cse_id,
            role=role,
            university=university,
            timeout=settings.request_timeout,
        )
    except SearchNotConfigured as e:
        return ContactSearchResponse(note=str(e))
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Contact search failed for {key}: {e}")
        return ContactSearchResponse(note="Failed to fetch search results")

    cache.set(key, [r.model_dump() for r in results])
    return ContactSearchResponse(results=results)


@app.get("/api/questions", response_model=InterviewRecord, response_model_exclude_none=True)
def interview_questions(
    company: Optional[str] = Query(None, description="Company name to look up"),
    settings: Settings = Depends(get_settings),
    cache: JsonFileCache = Depends(get_interview_cache),
):
    company = _require_company(company, "Missing company parameter.")
    return lookup_interviews(
        company,
        api_key=settings.rapidapi_key,
        host=settings.rapidapi_host,
        cache=cache,
        timeout=settings.request_timeout,
    )


@app.post("/api/llm")
def chat_completion(
    payload: ChatRequest,
    settings: Settings = Depends(get_settings),
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
):
    if not settings.openrouter_api_key:
        raise HTTPException(status_code=500, detail="OpenRouter API key not configured")

    if not payload.userId:
        raise HTTPException(status_code=400, detail="User ID is required for rate limiting")

    if limiter.is_limited(payload.userId):
        raise HTTPException(status_code=429, detail="Rate limit exceeded. Please try again later.")

    try:
        return complete_chat(
            payload.messages,
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            url=settings.openrouter_api_url,
            referer=settings.app_url,
            timeout=settings.chat_timeout,
        )
    except ChatProviderError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@app.post("/api/feedback")
def submit_feedback(payload: FeedbackRequest):
    if not isinstance(payload.feedback, str) or not payload.feedback.strip():
        raise HTTPException(status_code=400, detail="Feedback is required.")

    entry = Feedback(name=payload.name or "", email=payload.email or "", feedback=payload.feedback)
    try:
        create_document("feedback", entry)
    except Exception as e:
        logger.error(f"Failed to save feedback: {e}")
        raise HTTPException(status_code=500, detail="Failed to save feedback.")

    return {"success": True}


@app.post("/api/signins")
def record_sign_in(payload: SignInRequest):
    if not payload.userId:
        raise HTTPException(status_code=400, detail="User ID is required")

    record = Usersignin(email=payload.email, name=payload.name, avatarUrl=payload.avatarUrl)
    try:
        upsert_document("usersignin", payload.userId, record)
    except Exception as e:
        logger.error(f"Failed to record sign-in for {payload.userId}: {e}")
        raise HTTPException(status_code=500, detail="Failed to record sign-in.")

    return {"success": True}


@app.get("/api/admin/report", response_model=AdminReport)
def admin_report(
    caller: Caller = Depends(get_caller),
    settings: Settings = Depends(get_settings),
):
    if not settings.admin_email or caller.email != settings.admin_email:
        raise HTTPException(status_code=403, detail="Access denied")

    try:
        sign_ins = get_documents("usersignin", sort=[("timestamp", -1)])
        feedback = get_documents("feedback", sort=[("timestamp", -1)])
    except Exception as e:
        logger.error(f"Admin report unavailable: {e}")
        raise HTTPException(status_code=503, detail="Database not available")

    return AdminReport(totalUsers=len(sign_ins), signIns=sign_ins, feedback=feedback)


@app.get("/api/prep-plan", response_model=PrepPlan)
def prep_plan(role: str = Query(DEFAULT_ROLE)):
    try:
        return get_prep_plan(role)
    except KeyError:
        raise HTTPException(
            status_code=404,
            detail=f"No plan for role '{role}'. Available: {', '.join(available_roles())}",
        )


if __name__ == "__main__":
    import uvicorn

    port = get_settings().port
    uvicorn.run(app, host="0.0.0.0", port=port)
