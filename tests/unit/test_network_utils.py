# tests/unit/test_network_utils.py
# -*- coding: utf-8 -*-
"""URL glob 匹配与请求体解析。"""

import re

import pytest

from utils.network_utils import decode_post_data, encode_body, glob_to_regex, url_matches


@pytest.mark.parametrize(
    "glob,url,expected",
    [
        ("**/api/auth/login", "http://localhost:5004/api/auth/login", True),
        ("**/api/auth/login", "https://app.example.com/v1/api/auth/login", True),
        ("**/api/auth/login", "http://localhost:5004/api/auth/login/extra", False),
        ("**/api/projects", "http://localhost:5004/api/settings/projects", False),
        ("**/api/projects", "http://localhost:5004/api/projects?page=1", False),
        ("http://h.test/*", "http://h.test/index.html", True),
        ("http://h.test/*", "http://h.test/a/b", False),
        ("http://h.test/{,dashboard}", "http://h.test/", True),
        ("http://h.test/{,dashboard}", "http://h.test/dashboard", True),
        ("http://h.test/{,dashboard}", "http://h.test/settings", False),
        ("http://h.test/{,dashboard}{,?*}", "http://h.test/?analysis=stall", True),
        ("http://h.test/page?x=1", "http://h.test/pageAx=1", False),
        ("**/api.json", "http://h.test/apiXjson", False),
    ],
)
def test_glob_matching(glob, url, expected):
    assert url_matches(glob, url) is expected


def test_glob_translation_is_cached():
    assert glob_to_regex("**/api/*") is glob_to_regex("**/api/*")


def test_regex_matcher_uses_search():
    assert url_matches(re.compile(r"/api/"), "http://h.test/api/tasks")
    assert not url_matches(re.compile(r"^/api/"), "http://h.test/api/tasks")


def test_decode_json_body():
    assert decode_post_data(b'{"username": "admin"}') == ({"username": "admin"}, None)


@pytest.mark.parametrize("buffer", [None, b""])
def test_decode_empty_body(buffer):
    assert decode_post_data(buffer) == (None, "empty body")


def test_decode_text_body_keeps_raw_text():
    body, error = decode_post_data(b"username=admin")
    assert body == "username=admin"
    assert error.startswith("invalid json")


def test_decode_binary_body_keeps_bytes():
    body, error = decode_post_data(b"\xff\xfe\x00")
    assert body == b"\xff\xfe\x00"
    assert error == "body is not utf-8 text"


def test_encode_body():
    assert encode_body({"名称": 1}, "application/json") == '{"名称": 1}'
    assert encode_body("<html></html>", "text/html") == "<html></html>"
    assert encode_body(b"\x00", "application/octet-stream") == b"\x00"
    assert encode_body(404, "text/plain") == "404"
