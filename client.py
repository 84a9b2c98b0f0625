"""
Python client for the Compli API.

Mirrors what the web front-end does on a search: three independent
gateway calls in parallel, each allowed to fail on its own, merged into
the state behind the overview / news / interviews / contacts / prep tabs.
Search history, notes and mission summaries are kept in a ClientState.
"""
import argparse
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from cache import make_cache_key
from chat import (
    clean_mission_summary,
    extract_content,
    mission_prompt,
    mock_interview_opening,
    mock_interview_prompt,
    star_prompt,
)
from local_store import ClientState, FileStore, MemoryStore
from prep import DEFAULT_ROLE, PREP_PLANS
from schemas import ChatMessage, InterviewRecord, NewsItem, SearchResult

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    pass


class CompanyView(BaseModel):
    company: str
    url: str = ""
    summary: str = ""
    news: List[NewsItem] = Field(default_factory=list)
    interviews: Optional[InterviewRecord] = None
    contacts: List[SearchResult] = Field(default_factory=list)
    prep: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    activeTab: str = "overview"


class CompliClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        state: Optional[ClientState] = None,
        user_id: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.state = state or ClientState(MemoryStore())
        self.user_id = user_id or "public"
        self.timeout = timeout
        self.session = session or requests.Session()
        self._contact_memo: Dict[str, List[SearchResult]] = {}

    # -- transport --

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = self.session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GatewayError(f"{path} unreachable: {e}") from e
        try:
            data = r.json()
        except ValueError:
            data = {}
        if not r.ok:
            detail = data.get("detail") if isinstance(data, dict) else None
            raise GatewayError(detail or f"{path} returned {r.status_code}")
        return data

    def _get(self, path: str, **params) -> Any:
        return self._request("GET", path, params={k: v for k, v in params.items() if v})

    def _post(self, path: str, body: Dict[str, Any]) -> Any:
        return self._request("POST", path, json=body)

    # -- company lookup --

    def lookup(self, company: str, university: str = "", role: str = DEFAULT_ROLE) -> CompanyView:
        """Fetch overview, interviews and contacts in parallel; record the search."""
        company = company.strip()
        if not company:
            raise ValueError("company is required")

        view = CompanyView(company=company)
        with ThreadPoolExecutor(max_workers=3) as pool:
            calls = {
                "overview": pool.submit(self._get, "/api/search", company=company),
                "interviews": pool.submit(self._get, "/api/questions", company=company),
                "contacts": pool.submit(self.search_contacts, company, university),
            }
            for name, future in calls.items():
                try:
                    result = future.result()
                    if name == "overview":
                        view.url = result.get("url", "")
                        view.summary = result.get("summary", "")
                        view.news = [NewsItem(**n) for n in result.get("news", [])]
                    elif name == "interviews":
                        view.interviews = InterviewRecord(**result)
                    else:
                        view.contacts = result
                except (GatewayError, ValidationError) as e:
                    logger.warning(f"{name} lookup failed for {company}: {e}")
                    view.errors[name] = str(e)

        plan = PREP_PLANS.get(role)
        if plan:
            view.prep = {day: d.model_dump(exclude_none=True) for day, d in plan.items()}

        self.state.record_search(company)
        return view

    def search_contacts(self, company: str, university: str = "", role: str = "") -> List[SearchResult]:
        key = make_cache_key(company, role, university)
        if key not in self._contact_memo:
            data = self._get("/api/google-search", company=company, university=university, role=role)
            self._contact_memo[key] = [SearchResult(**r) for r in data.get("results", [])]
        return self._contact_memo[key]

    # -- LLM tools --

    def chat(self, messages: List[ChatMessage]) -> str:
        envelope = self._post(
            "/api/llm",
            {"messages": [m.model_dump() for m in messages], "userId": self.user_id},
        )
        try:
            return extract_content(envelope)
        except ValueError as e:
            raise GatewayError(str(e)) from e

    def mission_summary(self, company: str) -> str:
        cached = self.state.cached_mission(company)
        if cached:
            return cached
        summary = clean_mission_summary(self.chat([ChatMessage(role="user", content=mission_prompt(company))]))
        if summary:
            self.state.cache_mission(company, summary)
        return summary

    def improve_star_story(self, situation: str, task: str, action: str, result: str = "") -> str:
        prompt = star_prompt(situation, task, action, result)
        return self.chat([ChatMessage(role="user", content=prompt)])

    def mock_interview(self, company: Optional[str] = None, role: Optional[str] = None) -> "MockInterview":
        return MockInterview(self, company=company, role=role)

    # -- feedback & identity --

    def submit_feedback(self, feedback: str, name: str = "", email: str = "") -> bool:
        return bool(self._post("/api/feedback", {"name": name, "email": email, "feedback": feedback}).get("success"))

    def record_sign_in(self, email: Optional[str] = None, name: Optional[str] = None, avatar_url: Optional[str] = None) -> None:
        self._post("/api/signins", {"userId": self.user_id, "email": email, "name": name, "avatarUrl": avatar_url})


class MockInterview:
    """A running mock interview; the assistant plays the interviewer."""

    FAILURE_REPLY = "Sorry, something went wrong."

    def __init__(self, client: CompliClient, company: Optional[str] = None, role: Optional[str] = None):
        self.client = client
        self.company = company
        self.role = role
        self.reset()

    def reset(self) -> None:
        self.messages: List[ChatMessage] = [
            ChatMessage(role="assistant", content=mock_interview_opening(self.company, self.role))
        ]

    def send(self, answer: str) -> Optional[str]:
        if not answer.strip():
            return None
        self.messages.append(ChatMessage(role="user", content=answer))
        prompt = ChatMessage(role="system", content=mock_interview_prompt(self.company, self.role))
        try:
            reply = self.client.chat([prompt] + self.messages)
        except GatewayError as e:
            logger.warning(f"Mock interview reply failed: {e}")
            reply = self.FAILURE_REPLY
        self.messages.append(ChatMessage(role="assistant", content=reply))
        return reply


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Look up a company through the Compli API")
    parser.add_argument("company")
    parser.add_argument("--university", default="")
    parser.add_argument("--role", default=DEFAULT_ROLE)
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--state-file", default=None, help="JSON file for history and notes")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    store = FileStore(args.state_file) if args.state_file else MemoryStore()
    client = CompliClient(args.base_url, state=ClientState(store))
    view = client.lookup(args.company, university=args.university, role=args.role)
    print(json.dumps(view.model_dump(exclude_none=True), indent=2))


if __name__ == "__main__":
    main()
