"""Opaque page cursors shared by the store backends."""

from __future__ import annotations

import base64
import binascii
import json
import uuid

from .base import InvalidPageParamError


def encode_page_param(page_number: int) -> str:
    raw = json.dumps({"page": page_number}, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_page_param(param: str | None) -> int:
    """Return the 1-based page number carried by ``param``.

    An empty or missing cursor addresses the first page.
    """

    if param is None or not param.strip():
        return 1
    token = param.strip()
    padded = token + "=" * (-len(token) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidPageParamError(param) from exc
    page = payload.get("page") if isinstance(payload, dict) else None
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise InvalidPageParamError(param)
    return page


def page_window(page_number: int, page_size: int) -> tuple[int, int]:
    """Return ``(offset, limit)`` for a page."""

    return (page_number - 1) * page_size, page_size


def page_links(
    *, page_number: int, page_size: int, returned: int, total: int
) -> tuple[bool, bool, str | None, str | None]:
    """Return ``(has_next, has_previous, next_param, previous_param)``."""

    offset, _ = page_window(page_number, page_size)
    has_next = offset + returned < total
    has_previous = page_number > 1
    next_param = encode_page_param(page_number + 1) if has_next else None
    previous_param = encode_page_param(page_number - 1) if has_previous else None
    return has_next, has_previous, next_param, previous_param


def new_revision(previous: str | None = None) -> str:
    """Return the revision that follows ``previous`` (``"<generation>-<hex>"``)."""

    generation = 0
    if previous:
        head, _, _ = previous.partition("-")
        generation = int(head) if head.isdigit() else 0
    return f"{generation + 1}-{uuid.uuid4().hex}"


__all__ = [
    "decode_page_param",
    "encode_page_param",
    "new_revision",
    "page_links",
    "page_window",
]
