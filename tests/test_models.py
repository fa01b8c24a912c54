from __future__ import annotations

import pytest
from pydantic import ValidationError

from chanboard.exceptions import InvalidQuery
from chanboard.models import Catalog, Post, ThreadPayload
from chanboard.search import compile_query, html_to_text

from conftest import post


def _catalog(pages) -> Catalog:
    return Catalog.model_validate({"pages": pages})


def test_topics_flattens_pages_in_order(two_page_catalog):
    catalog = _catalog(two_page_catalog)
    assert [t.no for t in catalog.topics()] == [10, 20]
    assert [p.page for p in catalog.pages] == [1, 2]


def test_topics_keeps_duplicates_across_pages():
    catalog = _catalog(
        [
            {"page": 1, "threads": [post(5, "a")]},
            {"page": 2, "threads": [post(5, "b")]},
        ]
    )
    assert [t.com for t in catalog.topics()] == ["a", "b"]


def test_find_returns_matching_topics(two_page_catalog):
    found = _catalog(two_page_catalog).find("hello")
    assert found is not None
    assert [t.no for t in found] == [10]


def test_find_returns_none_when_nothing_matches(two_page_catalog):
    assert _catalog(two_page_catalog).find("xyz") is None


def test_find_empty_query_matches_everything(two_page_catalog):
    found = _catalog(two_page_catalog).find("")
    assert [t.no for t in found] == [10, 20]


def test_find_is_case_insensitive_and_checks_subject_and_filename(two_page_catalog):
    catalog = _catalog(two_page_catalog)
    assert [t.no for t in catalog.find("FIRST")] == [10]
    assert [t.no for t in catalog.find("^cat$")] == [20]


def test_find_invalid_regex_raises():
    with pytest.raises(InvalidQuery):
        _catalog([]).find("(unclosed")


def test_post_match_is_unicode_aware():
    p = Post.model_validate(post(1, "ÄRGER im Thread"))
    assert p.is_match(compile_query("ärger"))


def test_post_match_on_comment_text_not_markup():
    p = Post.model_validate(post(1, '<a href="#p2" class="quotelink">&gt;&gt;2</a><br>nice pic'))
    assert p.comment_text == ">>2\nnice pic"
    assert p.is_match(compile_query("nice pic$"))
    assert not p.is_match(compile_query("quotelink"))


def test_post_with_no_text_fields_still_matches_empty_query():
    p = Post.model_validate({"no": 3})
    assert p.is_match(compile_query(""))


def test_html_to_text_passes_plain_text_through():
    assert html_to_text("just text") == "just text"
    assert html_to_text(None) == ""


def test_post_ignores_unknown_fields_and_builds_image_url():
    p = Post.model_validate(post(7, tim=1700000000123, ext=".png", unique_ips=12))
    assert p.image_url("g") == "https://i.4cdn.org/g/1700000000123.png"
    assert Post.model_validate(post(8)).image_url("g") is None


def test_post_number_must_be_positive():
    with pytest.raises(ValidationError):
        Post.model_validate(post(0))


def test_catalog_accepts_wrapped_bare_array():
    catalog = Catalog.model_validate_json('{"pages":' + '[{"page": 1, "threads": [{"no": 1}]}]' + "}")
    assert catalog.topics()[0].no == 1


def test_thread_payload_splits_topic_and_replies():
    payload = ThreadPayload.model_validate({"posts": [post(1, "op"), post(2, "re", resto=1)]})
    assert payload.topic.no == 1
    assert [r.no for r in payload.replies] == [2]
    assert payload.topic.is_topic and not payload.replies[0].is_topic


def test_thread_payload_requires_posts():
    with pytest.raises(ValidationError):
        ThreadPayload.model_validate({"posts": []})
