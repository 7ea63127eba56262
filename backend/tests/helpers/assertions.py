"""Assertion helper utilities for tests."""

from __future__ import annotations


def assert_json_keys(data: dict, required: set[str]) -> None:
    """Ensure that all required keys are present in ``data``.

    Raises
    ------
    AssertionError
        If any required key is missing.
    """
    missing = required - data.keys()
    assert not missing, f"Missing keys: {', '.join(sorted(missing))}"


def assert_problem(resp, status: int, error: str | None = None) -> dict:
    """Check a problem+json failure and return its body."""
    assert resp.status_code == status, resp.get_data(as_text=True)
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert isinstance(body.get("error"), str)
    if error is not None:
        assert body["error"] == error
    return body


def assert_pagination(obj: dict, *, total: int | None = None) -> None:
    """Validate the ``pagination`` block of a list response."""
    assert_json_keys(obj, {"pagination"})
    assert_json_keys(obj["pagination"], {"page", "limit", "total", "total_pages"})
    if total is not None:
        assert obj["pagination"]["total"] == total
