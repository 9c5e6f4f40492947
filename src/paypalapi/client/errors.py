"""Normalisation of PayPal failures into one readable diagnostic string.

PayPal reports errors in a few overlapping shapes: REST errors carry
``name`` / ``message`` plus a ``details`` list of ``{issue, description}``
pairs, while the OAuth2 token endpoint answers with ``error`` /
``error_description``.  :func:`parse_response_error` folds all of them, plus
the failures that never got a response, into a single string that is both
logged and attached to the exception handed back to the caller.
"""

from __future__ import annotations

from typing import Any

from paypalapi.exceptions import HTTPStatusError


def _summary(body: dict[str, Any]) -> str:
    for key in ("name", "message", "error_description", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return ""


def _issues(body: dict[str, Any]) -> list[str]:
    details = body.get("details")
    if not isinstance(details, list):
        return []
    issues: list[str] = []
    for item in details:
        if not isinstance(item, dict):
            continue
        issue = f"{item.get('issue') or ''} {item.get('description') or ''}".strip()
        if issue:
            issues.append(issue)
    return issues


def parse_response_error(exc: BaseException) -> str:
    """Build a human-readable description of *exc*.

    The parts are, in order: ``Status <code>`` when a response was received,
    the provider's ``name`` (or ``message``), then every ``<issue>
    <description>`` pair, joined with ``", "``.  When none of these can be
    extracted the exception's own message is returned, or its ``repr`` if
    that is empty.

    The function is pure and idempotent: applying it to an exception whose
    message was already replaced by a previous call yields the same string.

    Example::

        >>> exc = HTTPStatusError(422, {
        ...     "name": "VALIDATION_ERROR",
        ...     "details": [{"issue": "DUPLICATE", "description": "already exists"}],
        ... })
        >>> parse_response_error(exc)
        'Status 422, VALIDATION_ERROR, DUPLICATE already exists'
    """
    parts: list[str] = []

    if isinstance(exc, HTTPStatusError):
        parts.append(f"Status {exc.status_code}")
        if isinstance(exc.body, dict):
            summary = _summary(exc.body)
            if summary:
                parts.append(summary)
            parts.extend(_issues(exc.body))

    if parts:
        return ", ".join(parts)

    message = str(exc)
    return message if message else repr(exc)
