"""Tests for page cursor parsing."""

from __future__ import annotations

import pytest

from zendesk_connector.client.pagination import convert_page_token, parse_next_page
from zendesk_connector.errors import MalformedCursorError


class TestParseNextPage:
    def test_no_url_means_last_page(self):
        assert parse_next_page(None) == ""
        assert parse_next_page("") == ""

    def test_extracts_page_param(self):
        url = "https://acme.zendesk.com/api/v2/groups.json?page=3&per_page=100"
        assert parse_next_page(url) == "3"

    def test_page_param_anywhere_in_query(self):
        url = "https://acme.zendesk.com/api/v2/users.json?role%5B%5D=admin&page=12"
        assert parse_next_page(url) == "12"

    def test_url_without_page_is_malformed(self):
        with pytest.raises(MalformedCursorError) as info:
            parse_next_page("https://acme.zendesk.com/api/v2/users.json?per_page=100")
        assert "per_page=100" in info.value.cursor


class TestConvertPageToken:
    def test_empty_is_first_page(self):
        assert convert_page_token("") == 0
        assert convert_page_token(None) == 0

    def test_numeric_token(self):
        assert convert_page_token("7") == 7

    @pytest.mark.parametrize("token", ["abc", "1.5", "page=2"])
    def test_non_numeric_is_malformed(self, token):
        with pytest.raises(MalformedCursorError):
            convert_page_token(token)

    def test_negative_is_malformed(self):
        with pytest.raises(MalformedCursorError, match="negative"):
            convert_page_token("-1")
