"""Unit tests for bearer-token extraction."""

from __future__ import annotations

import pytest
from werkzeug.datastructures import Headers

from subtrack.auth.bearer import extract_bearer_token
from subtrack.auth.errors import MalformedHeaderError, MissingHeaderError


def test_extracts_token():
    assert extract_bearer_token({"Authorization": "Bearer abc.def.ghi"}) == "abc.def.ghi"


def test_werkzeug_headers_are_case_insensitive_on_name():
    headers = Headers([("authorization", "Bearer tok")])

    assert extract_bearer_token(headers) == "tok"


@pytest.mark.parametrize("headers", [{}, {"Authorization": ""}, {"Authorization": "   "}])
def test_missing_or_blank_header(headers):
    with pytest.raises(MissingHeaderError):
        extract_bearer_token(headers)


@pytest.mark.parametrize(
    "value",
    [
        "Bearer",
        "bearer abc",
        "BEARER abc",
        "Basic abc",
        "Bearer abc def",
        "Token abc",
    ],
)
def test_malformed_header(value):
    with pytest.raises(MalformedHeaderError):
        extract_bearer_token({"Authorization": value})
