"""
Chat-completion passthrough to OpenRouter, and the prompts the client
builds on top of it (mock interview, STAR stories, mission summaries).
"""
import logging
import re
from typing import Any, Dict, List, Optional

import requests

from schemas import ChatMessage

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful job interview coach, focused on providing clear, "
    "actionable advice and insights."
)
APP_TITLE = "Compli - Interview Prep Assistant"


class ChatProviderError(Exception):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


def complete_chat(
    messages: List[ChatMessage],
    api_key: str,
    model: str,
    url: str,
    referer: str,
    timeout: float = 60,
) -> Dict[str, Any]:
    """Forward the conversation, behind the fixed system instruction. Returns the raw envelope."""
    body = {
        "model": model,
        "messages": [{"role": "system", "content": SYSTEM_INSTRUCTION}]
        + [m.model_dump() for m in messages],
    }
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": referer,
        "X-Title": APP_TITLE,
    }
    try:
        r = requests.post(url, json=body, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Chat provider unreachable: {e}")
        raise ChatProviderError("Failed to reach AI model", status_code=502) from e

    if not r.ok:
        logger.error(f"Chat provider error {r.status_code}: {r.text[:200]}")
        raise ChatProviderError("Failed to get response from AI model", status_code=r.status_code)

    try:
        return r.json()
    except ValueError as e:
        raise ChatProviderError("AI model returned an unreadable response", status_code=502) from e


def extract_content(envelope: Dict[str, Any]) -> str:
    """Text of the first choice; raises ValueError when there is none."""
    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        content = None
    if not content:
        raise ValueError("No AI response received")
    return content


# -------- Prompt builders --------

def _interest_clause(company: Optional[str], role: Optional[str]) -> str:
    clause = ""
    if company:
        clause += f" working at {company}"
    if role:
        clause += f" as a {role}"
    return clause


def mock_interview_opening(company: Optional[str] = None, role: Optional[str] = None) -> str:
    return (
        "Welcome to your mock interview! I will act as your interviewer. Let's begin.\n\n"
        "First, can you tell me a little about yourself and why you're interested in"
        f"{_interest_clause(company, role)}?"
    )


def mock_interview_prompt(company: Optional[str] = None, role: Optional[str] = None) -> str:
    prompt = "You are a professional interviewer for"
    if company:
        prompt += f" {company}"
    if role:
        prompt += f", interviewing for the role of {role}"
    return prompt + (
        ". Continue the mock interview. Ask behavioral and role-specific questions, "
        "give feedback, and follow up based on the candidate's answers. "
        "Be conversational and supportive."
    )


def star_prompt(situation: str, task: str, action: str, result: str = "") -> str:
    if not (situation.strip() and task.strip() and action.strip()):
        raise ValueError("Situation, task and action are required")

    lines = [
        "Improve this STAR story for a behavioral interview. Make it more impactful and "
        "professional while maintaining the core message. Add specific details and metrics "
        "where appropriate.",
        "",
        f"Situation: {situation}",
        f"Task: {task}",
        f"Action: {action}",
    ]
    if result.strip():
        lines.append(f"Result: {result}")
    lines += ["", "Format the response with clear sections and bullet points for key achievements."]
    return "\n".join(lines)


def mission_prompt(company: str) -> str:
    return (
        "In 2-3 concise sentences and without any additional commentary or internal reasoning, "
        f'describe the core mission and values of the company "{company}" so an applicant can '
        "reference them before interviews. Respond plainly."
    )


def clean_mission_summary(text: str, max_sentences: int = 3) -> str:
    """Drop markup such as <think> tags and wrapping quotes; one sentence per line."""
    cleaned = re.sub(r"<[^>]+>", "", text).strip()
    cleaned = re.sub(r'^"+|"+$', "", cleaned).strip()
    sentences = re.split(r"(?<=[.!?])\s+", cleaned)
    return "\n".join(s for s in sentences[:max_sentences] if s)
