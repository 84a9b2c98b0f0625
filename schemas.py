"""
Database Schemas for Compli

Each Pydantic model at the top represents a MongoDB collection.
The collection name is the lowercase of the class name.
The remaining models are request/response payloads of the API.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------- Collections --------

class Companyquery(BaseModel):
    """
    Stores user search queries so we can analyze usage.
    Collection: "companyquery"
    """
    company: str = Field(..., description="Company name as entered")
    normalized: str = Field(..., description="Normalized query key")
    user_id: Optional[str] = Field(None, description="Optional user identifier")


class Usersignin(BaseModel):
    """
    One document per user, overwritten on every sign-in.
    Collection: "usersignin" (document _id is the user id)
    """
    email: Optional[str] = None
    name: Optional[str] = None
    avatarUrl: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow, description="Last sign-in time")


class Feedback(BaseModel):
    """
    Append-only user feedback.
    Collection: "feedback"
    """
    name: str = ""
    email: str = ""
    feedback: str
    timestamp: datetime = Field(default_factory=_utcnow, description="Submission time")


# -------- Aggregation payloads --------

class NewsItem(BaseModel):
    title: str
    link: str


class Contact(BaseModel):
    name: str
    link: str
    description: str = ""
    position: str = ""


class SearchResult(BaseModel):
    title: str
    link: str
    snippet: str = ""


class SiteSummary(BaseModel):
    url: str
    summary: str
    news: List[NewsItem] = Field(default_factory=list)
    contacts: Optional[List[Contact]] = None


class SiteSearchRequest(BaseModel):
    company: Optional[str] = Field(None, description="Company name to search for")
    includeContacts: bool = True
    maxContacts: int = Field(8, ge=0, le=10)


class ContactSearchResponse(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)
    note: Optional[str] = None


class InterviewRecord(BaseModel):
    """Normalized interview insights; every field has a renderable fallback."""
    employer: str
    difficulty: str = "Not specified"
    experience: str = "Not specified"
    jobTitle: str = "Various positions"
    outcome: str = "Not specified"
    process: str = "Interview process information not available"
    questions: List[str] = Field(default_factory=list)
    interviewCount: int = 0
    hasCompanyInfo: bool = False
    note: Optional[str] = None
    error: Optional[str] = None


# -------- Chat --------

class ChatMessage(BaseModel):
    role: str
    content: str


class ChatRequest(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    userId: Optional[str] = None


# -------- Feedback, sign-ins, admin --------

class FeedbackRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    # Left untyped so a missing or non-string value is reported as 400, not 422
    feedback: Any = None


class SignInRequest(BaseModel):
    userId: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    avatarUrl: Optional[str] = None


class Caller(BaseModel):
    """Identity as handed to us by the identity provider's session."""
    user_id: Optional[str] = None
    email: Optional[str] = None


class AdminReport(BaseModel):
    totalUsers: int
    signIns: List[Dict[str, Any]]
    feedback: List[Dict[str, Any]]


# -------- Preparation plans --------

class PrepDay(BaseModel):
    title: str
    tasks: List[str]
    resources: Optional[List[str]] = None


class PrepPlan(BaseModel):
    role: str
    days: Dict[str, PrepDay]
