"""Helpers for exposing document revisions as HTTP ETag headers."""

from __future__ import annotations

from starlette.responses import Response


def canonicalize_etag(value: str | None) -> str | None:
    """Return a normalized ETag token without weak prefixes or quotes."""

    if value is None:
        return None
    token = value.strip()
    if not token:
        return None
    if token.startswith("W/"):
        token = token[2:].strip()
    if token.startswith('"') and token.endswith('"'):
        token = token[1:-1]
    return token or None


def format_etag(value: str | None) -> str | None:
    """Quote a canonical ETag for use in HTTP headers."""

    token = canonicalize_etag(value)
    if token is None:
        return None
    return f'"{token}"'


def parse_if_match(value: str | None) -> str | None:
    """Return the revision named by an ``If-Match`` header, or ``None``.

    ``*`` matches any current revision, so it is treated as absent.
    """

    if value is None or value.strip() == "*":
        return None
    return canonicalize_etag(value)


def apply_etag(response: Response, revision: str | None) -> None:
    """Expose ``revision`` as the response ETag."""

    etag = format_etag(revision)
    if etag is not None:
        response.headers["ETag"] = etag


__all__ = [
    "apply_etag",
    "canonicalize_etag",
    "format_etag",
    "parse_if_match",
]
