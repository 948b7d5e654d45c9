from __future__ import annotations

import pytest

from noma_client_sdk.routes import RoutePattern, compile_route, is_route_match, match_any


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("/orders", "/orders", True),
        ("/orders/:id", "/orders/42", True),
        ("/orders/:id/edit", "/orders/42/edit", True),
        ("/orders/:id/edit", "/orders/42/view", False),
        ("/orders/:id", "/orders", False),
        ("/orders/:id", "/orders/42/edit", False),
        ("/orders/:id", "/orders/", False),
        ("/orders", "/orders/", False),
        ("/orders/:id", "/orders/42/", False),
        ("/orders/new", "/orders/42", False),
        ("/reports", "/dashboard", False),
    ],
)
def test_route_matching(pattern: str, path: str, expected: bool) -> None:
    assert is_route_match(pattern, path) is expected


def test_pattern_records_placeholder_positions() -> None:
    pattern = RoutePattern.parse("/orders/:id/items/:item")

    assert pattern.segments == ("", "orders", ":id", "items", ":item")
    assert pattern.placeholders == frozenset({2, 4})
    assert not pattern.is_static
    assert pattern.params("/orders/7/items/3") == {"id": "7", "item": "3"}
    assert pattern.params("/orders/7") is None


def test_exact_pattern_matches_by_equality() -> None:
    assert compile_route("/subscription-expired").is_static
    assert is_route_match("/subscription-expired", "/subscription-expired")


def test_match_any_over_default_routes() -> None:
    patterns = ("/dashboard", "/orders", "/orders/:id")

    assert match_any(patterns, "/orders/abc")
    assert not match_any(patterns, "/profile")
    assert not match_any((), "/orders")
