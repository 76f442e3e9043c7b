"""Tests for query-string construction."""

from __future__ import annotations

from pyoceanconnect.models import DeviceQuery
from pyoceanconnect.query import build_query, with_query


class TestBuildQuery:
    """Test build_query()."""

    def test_empty(self) -> None:
        """Test that no parameters produce an empty string."""
        assert build_query(None) == ""
        assert build_query({}) == ""

    def test_all_none(self) -> None:
        """Test that only-None parameters produce an empty string."""
        assert build_query({"gatewayId": None, "sort": None}) == ""

    def test_skips_none_without_trailing_separator(self) -> None:
        """Test that missing values leave no dangling separators."""
        assert build_query({"pageNo": 0, "pageSize": None, "sort": "DESC", "status": None}) == "pageNo=0&sort=DESC"

    def test_keeps_falsy_values(self) -> None:
        """Test that 0 and empty strings are real values."""
        assert build_query({"pageNo": 0, "nodeType": ""}) == "pageNo=0&nodeType="

    def test_preserves_order(self) -> None:
        """Test that parameters keep the mapping's order."""
        assert build_query({"b": 1, "a": 2}) == "b=1&a=2"

    def test_encodes_values(self) -> None:
        """Test that reserved characters are percent-encoded."""
        assert build_query({"callback": "https://x.example.com/a?b=c&d"}) == (
            "callback=https%3A%2F%2Fx.example.com%2Fa%3Fb%3Dc%26d"
        )


class TestWithQuery:
    """Test with_query()."""

    def test_no_query(self) -> None:
        """Test that the path is untouched without parameters."""
        assert with_query("/iocm/app/dm/v1.1.0/devices", {"status": None}) == "/iocm/app/dm/v1.1.0/devices"

    def test_appends_query(self) -> None:
        """Test that the query is appended after a question mark."""
        assert with_query("/devices", {"appId": "app-123"}) == "/devices?appId=app-123"


class TestDeviceQuery:
    """Test DeviceQuery.to_params()."""

    def test_default_sends_page_no_only(self) -> None:
        """Test that only the page number is always sent."""
        assert build_query(DeviceQuery().to_params()) == "pageNo=0"

    def test_documented_order(self) -> None:
        """Test that filters follow the documented order."""
        params = DeviceQuery(sort="ASC", gateway_id="gw-1", page_size=5).to_params()
        assert build_query(params) == "gatewayId=gw-1&pageNo=0&pageSize=5&sort=ASC"
