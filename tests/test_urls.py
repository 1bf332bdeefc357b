"""Tests for URL normalization and post identity."""

import re

from content_ingest.urls import derive_post_id, normalize_url


def test_strips_utm_and_ref():
    assert normalize_url("https://example.com/post?utm_source=x&ref=y") == "https://example.com/post"


def test_keeps_non_tracking_params():
    url = "https://paragraph.xyz/@dao/post?id=5&utm_campaign=z&fbclid=abc&gclid=1"
    assert normalize_url(url) == "https://paragraph.xyz/@dao/post?id=5"


def test_strips_any_utm_prefixed_param():
    assert normalize_url("https://mirror.xyz/a?utm_id=1&utm_whatever=2") == "https://mirror.xyz/a"


def test_medium_drops_entire_query():
    assert normalize_url("https://medium.com/@u/post-1a2b?foo=bar&page=2") == "https://medium.com/@u/post-1a2b"
    assert normalize_url("https://blog.medium.com/post?x=1") == "https://blog.medium.com/post"


def test_preserves_fragment():
    assert normalize_url("https://mirror.xyz/a?utm_source=x#section") == "https://mirror.xyz/a#section"


def test_unparseable_input_is_returned_unchanged():
    assert normalize_url("not a url") == "not a url"
    assert normalize_url("/relative/path?utm_source=x") == "/relative/path?utm_source=x"
    assert normalize_url("") == ""


def test_normalization_is_idempotent():
    once = normalize_url("https://mirror.xyz/a?b=1&utm_medium=x")
    assert normalize_url(once) == once


def test_post_id_is_deterministic_and_alphanumeric():
    url = normalize_url("https://medium.com/@uniswap/introducing-v4-5f3e2a1b9c?source=rss")
    first = derive_post_id(url)
    assert first == derive_post_id(url)
    assert len(first) == 32
    assert re.fullmatch(r"[A-Za-z0-9]+", first)


def test_post_ids_differ_for_posts_on_same_profile():
    a = derive_post_id("https://medium.com/@uniswap/introducing-v4-5f3e2a1b9c")
    b = derive_post_id("https://medium.com/@uniswap/governance-update-77ab01cd3e")
    assert a != b


def test_short_url_id_is_not_padded():
    post_id = derive_post_id("https://a.io/x")
    assert 0 < len(post_id) <= 32
