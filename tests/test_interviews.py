"""
Tests for interview lookup and aggregation.
"""

from unittest.mock import patch

import pytest
import requests

from cache import JsonFileCache
from interviews import (
    MAX_QUESTIONS,
    aggregate_reviews,
    dedupe_questions,
    find_reviews,
    job_title_of,
    lookup_interviews,
    most_common,
    questions_from_process,
    questions_from_review,
)
from schemas import InterviewRecord

HOST = "glassdoor-real-time.p.rapidapi.com"

SEARCH_HIT = {
    "status": True,
    "data": {"employerResults": [{"employer": {"id": 42, "name": "Acme Corporation"}}]},
}

REVIEWS = [
    {
        "difficulty": "MEDIUM",
        "experience": "POSITIVE",
        "jobTitle": {"text": "Software Engineer"},
        "outcome": "ACCEPTED",
        "processDescription": "Phone screen then onsite. They asked why do you want to work here?",
        "userQuestions": [{"question": "Design a URL shortener for us"}, "Reverse a linked list in place"],
    },
    {
        "difficulty": "HARD",
        "experience": "POSITIVE",
        "jobTitle": "Software Engineer",
        "outcome": "REJECTED",
        "processDescription": "Short call.",
        "userQuestions": [{"text": "Design a URL shortener for us"}, {"content": "too short"}],
    },
    {
        "difficulty": "HARD",
        "jobTitle": {"text": "Data Scientist"},
        "userQuestions": [],
    },
]


# -------- Extractors --------

class TestFindReviews:
    def test_top_level(self):
        assert find_reviews({"interviews": [{"a": 1}]}) == [{"a": 1}]

    def test_under_data(self):
        assert find_reviews({"data": {"interviews": [{"a": 1}]}}) == [{"a": 1}]

    def test_under_employer_interviews_list(self):
        assert find_reviews({"data": {"employerInterviews": [{"a": 1}]}}) == [{"a": 1}]

    def test_under_employer_interviews_dict(self):
        payload = {"data": {"employerInterviews": {"interviews": [{"a": 1}]}}}
        assert find_reviews(payload) == [{"a": 1}]

    def test_first_non_empty_match_wins(self):
        payload = {"interviews": [], "data": {"interviews": [{"b": 2}], "employerInterviews": [{"c": 3}]}}
        assert find_reviews(payload) == [{"b": 2}]

    @pytest.mark.parametrize("payload", [None, [], "text", {}, {"data": "nope"}, {"interviews": "x"}])
    def test_no_match(self, payload):
        assert find_reviews(payload) == []


# -------- Aggregation helpers --------

class TestMostCommon:
    def test_most_frequent(self):
        assert most_common(["HARD", "EASY", "HARD"]) == "HARD"

    def test_tie_goes_to_first_seen(self):
        assert most_common(["EASY", "HARD", "HARD", "EASY"]) == "EASY"

    def test_skips_empty_values(self):
        assert most_common([None, "", "  ", "HARD"]) == "HARD"

    def test_default_when_empty(self):
        assert most_common([None, None]) == "Not specified"


def test_job_title_accepts_dict_or_string():
    assert job_title_of({"jobTitle": {"text": "SWE"}}) == "SWE"
    assert job_title_of({"jobTitle": "PM"}) == "PM"
    assert job_title_of({}) is None


def test_questions_from_review_reads_all_shapes_and_drops_short_ones():
    assert questions_from_review(REVIEWS[0]) == ["Design a URL shortener for us", "Reverse a linked list in place"]
    assert questions_from_review(REVIEWS[1]) == ["Design a URL shortener for us"]


def test_questions_from_process_keeps_long_question_clauses():
    description = "Intro call. What is your biggest weakness?. Then a second round! Why?. Tell us about a conflict you resolved?"
    assert questions_from_process(description) == [
        "What is your biggest weakness?",
        "Tell us about a conflict you resolved?",
    ]


def test_questions_from_process_ignores_non_strings():
    assert questions_from_process(None) == []


class TestDedupeQuestions:
    def test_preserves_first_occurrence_order(self):
        assert dedupe_questions(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_caps_at_twenty(self):
        questions = [f"Question number {i}?" for i in range(30)]
        assert len(dedupe_questions(questions)) == MAX_QUESTIONS

    def test_idempotent(self):
        questions = [f"Q{i % 7}" for i in range(40)]
        once = dedupe_questions(questions)
        assert dedupe_questions(once) == once
        assert len(once) <= MAX_QUESTIONS


def test_aggregate_reviews():
    record = aggregate_reviews("Acme Corporation", REVIEWS)

    assert record.employer == "Acme Corporation"
    assert record.difficulty == "HARD"
    assert record.experience == "POSITIVE"
    assert record.jobTitle == "Software Engineer"
    assert record.outcome == "ACCEPTED"
    assert record.process == REVIEWS[0]["processDescription"]
    assert record.questions == [
        "Design a URL shortener for us",
        "Reverse a linked list in place",
        "They asked why do you want to work here?",
    ]
    assert record.interviewCount == 3
    assert record.hasCompanyInfo is True


def test_aggregate_reviews_without_descriptions():
    record = aggregate_reviews("Acme", [{"difficulty": "EASY"}])
    assert record.process == "No detailed process description available"
    assert record.outcome == "Not specified"


# -------- Full lookup --------

class TestLookupInterviews:
    def test_success_is_cached(self, tmp_path, fake_response):
        cache = JsonFileCache(tmp_path / "cache.json")
        responses = [
            fake_response(json_data=SEARCH_HIT),
            fake_response(json_data={"data": {"interviews": REVIEWS}}),
        ]
        with patch("interviews.requests.get", side_effect=responses) as mock_get:
            record = lookup_interviews("Acme", "key", HOST, cache=cache)

        assert record.interviewCount == 3
        assert record.employer == "Acme Corporation"
        assert mock_get.call_count == 2
        assert cache.get("acme")["interviewCount"] == 3

    def test_cache_hit_short_circuits(self, tmp_path):
        cache = JsonFileCache(tmp_path / "cache.json")
        cache.set("acme corp", InterviewRecord(employer="Acme Corp", interviewCount=2, hasCompanyInfo=True).model_dump())

        with patch("interviews.requests.get") as mock_get:
            record = lookup_interviews("  ACME   Corp ", "key", HOST, cache=cache)

        mock_get.assert_not_called()
        assert record.employer == "Acme Corp"

    def test_no_employer_match(self, fake_response):
        no_results = fake_response(json_data={"status": True, "data": {"employerResults": []}})
        with patch("interviews.requests.get", return_value=no_results):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.employer == "Acme"
        assert record.hasCompanyInfo is False
        assert record.questions == []
        assert record.note

    def test_missing_api_key(self):
        with patch("interviews.requests.get") as mock_get:
            record = lookup_interviews("Acme", None, HOST)

        mock_get.assert_not_called()
        assert record.error == "Review provider not configured"
        assert record.difficulty == "Not specified"

    def test_search_http_error(self, fake_response):
        with patch("interviews.requests.get", return_value=fake_response(status_code=503, reason="Unavailable")):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.error == "API returned 503: Unavailable"
        assert record.hasCompanyInfo is False

    def test_search_status_false(self, fake_response):
        with patch("interviews.requests.get", return_value=fake_response(json_data={"status": False})):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.error.startswith("API Error")

    def test_employer_without_id(self, fake_response):
        data = {"status": True, "data": {"employerResults": [{"employer": {"shortName": "Acme"}}]}}
        with patch("interviews.requests.get", return_value=fake_response(json_data=data)):
            record = lookup_interviews("acme", "key", HOST)

        assert record.hasCompanyInfo is True
        assert record.error == "Employer ID not found in search results"

    def test_no_reviews_with_overview(self, fake_response, tmp_path):
        cache = JsonFileCache(tmp_path / "cache.json")
        responses = [
            fake_response(json_data=SEARCH_HIT),
            fake_response(json_data={"data": {}}),
            fake_response(json_data={"data": {"name": "Acme"}}),
        ]
        with patch("interviews.requests.get", side_effect=responses):
            record = lookup_interviews("Acme", "key", HOST, cache=cache)

        assert record.hasCompanyInfo is True
        assert record.interviewCount == 0
        assert record.note == "Company found but no interview details are publicly available"
        assert record.error is None
        assert cache.get("acme") is None

    def test_no_reviews_and_overview_fails(self, fake_response):
        responses = [
            fake_response(json_data=SEARCH_HIT),
            fake_response(json_data={}),
            requests.Timeout("slow"),
        ]
        with patch("interviews.requests.get", side_effect=responses):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.error == "No interview data available for this company"
        assert record.note

    def test_network_failure_degrades(self):
        with patch("interviews.requests.get", side_effect=requests.ConnectionError("down")):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.error == "Request failed"
        assert record.employer == "Acme"
        assert record.process == "Error occurred while fetching interview data"

    def test_unparseable_response_degrades(self, fake_response):
        with patch("interviews.requests.get", return_value=fake_response(json_data=ValueError("bad json"))):
            record = lookup_interviews("Acme", "key", HOST)

        assert record.error == "Request failed"
        assert record.questions == []
