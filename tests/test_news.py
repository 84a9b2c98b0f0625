"""
Tests for news lookup.
"""

from unittest.mock import patch

import requests

from news import dedupe_by_title, fetch_google_news_rss, get_news
from schemas import NewsItem

RSS = """<?xml version="1.0"?>
<rss><channel>
  <item><title>Acme launches rocket</title><link>https://news.example/1</link></item>
  <item><title>ACME LAUNCHES ROCKET </title><link>https://news.example/2</link></item>
  <item><title>Acme hires</title><link>https://news.example/3</link></item>
</channel></rss>
"""


def test_dedupe_is_case_insensitive_and_keeps_first():
    items = [
        NewsItem(title="Acme IPO", link="a"),
        NewsItem(title="  acme ipo ", link="b"),
        NewsItem(title="Other", link="c"),
    ]
    assert [i.link for i in dedupe_by_title(items)] == ["a", "c"]


def test_gnews_results(fake_response):
    data = {"articles": [
        {"title": "Acme IPO", "url": "https://n/1"},
        {"title": "acme ipo", "url": "https://n/2"},
        {"title": "Acme layoffs", "url": "https://n/3"},
        {"url": "https://n/no-title"},
    ]}
    with patch("news.requests.get", return_value=fake_response(json_data=data)) as mock_get:
        items = get_news("Acme", api_key="token")

    assert [(i.title, i.link) for i in items] == [("Acme IPO", "https://n/1"), ("Acme layoffs", "https://n/3")]
    params = mock_get.call_args.kwargs["params"]
    assert params["q"] == "Acme"
    assert params["max"] == 5
    assert params["lang"] == "en"


def test_gnews_failure_returns_empty_list():
    with patch("news.requests.get", side_effect=requests.ConnectionError("down")):
        assert get_news("Acme", api_key="token") == []


def test_gnews_http_error_returns_empty_list(fake_response):
    response = fake_response(status_code=403)
    response.raise_for_status.side_effect = requests.HTTPError("forbidden")
    with patch("news.requests.get", return_value=response):
        assert get_news("Acme", api_key="token") == []


def test_rss_used_without_api_key(fake_response):
    with patch("news.requests.get", return_value=fake_response(text=RSS)) as mock_get:
        items = get_news("Acme")

    assert "news.google.com/rss" in mock_get.call_args.args[0]
    assert [i.link for i in items] == ["https://news.example/1", "https://news.example/3"]


def test_rss_parse_error_returns_empty_list(fake_response):
    with patch("news.requests.get", return_value=fake_response(text="<rss><oops")):
        assert fetch_google_news_rss("Acme") == []


def test_gnews_skips_malformed_articles(fake_response):
    data = {"articles": [
        "oops",
        {"title": 123, "url": "https://n/1"},
        {"title": "  ", "url": "https://n/2"},
        {"title": "Acme expands", "url": {"href": "x"}},
    ]}
    with patch("news.requests.get", return_value=fake_response(json_data=data)):
        items = get_news("Acme", api_key="token")

    assert [(i.title, i.link) for i in items] == [("Acme expands", "")]


def test_gnews_unexpected_payload_shape(fake_response):
    for payload in (["a"], {"articles": "none"}, None):
        with patch("news.requests.get", return_value=fake_response(json_data=payload)):
            assert get_news("Acme", api_key="token") == []
