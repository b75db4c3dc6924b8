from __future__ import annotations

import base64

import pytest

from iam_api.store.base import InvalidPageParamError
from iam_api.store.paging import (
    decode_page_param,
    encode_page_param,
    new_revision,
    page_links,
)


def test_missing_param_addresses_first_page() -> None:
    assert decode_page_param(None) == 1
    assert decode_page_param("") == 1
    assert decode_page_param("   ") == 1


def test_encoded_param_is_url_safe_and_decodes() -> None:
    token = encode_page_param(7)

    assert "=" not in token
    assert "/" not in token and "+" not in token
    assert decode_page_param(token) == 7


@pytest.mark.parametrize(
    "param",
    [
        "not-a-cursor!",
        base64.urlsafe_b64encode(b'{"page": 0}').decode(),
        base64.urlsafe_b64encode(b'{"page": "2"}').decode(),
        base64.urlsafe_b64encode(b"[1, 2]").decode(),
    ],
)
def test_malformed_param_is_rejected(param: str) -> None:
    with pytest.raises(InvalidPageParamError) as excinfo:
        decode_page_param(param)

    assert excinfo.value.param == param


def test_page_links_on_middle_page() -> None:
    has_next, has_previous, next_param, previous_param = page_links(
        page_number=2, page_size=10, returned=10, total=35
    )

    assert has_next is True
    assert has_previous is True
    assert decode_page_param(next_param) == 3
    assert decode_page_param(previous_param) == 1


def test_page_links_on_last_page() -> None:
    has_next, has_previous, next_param, _ = page_links(
        page_number=4, page_size=10, returned=5, total=35
    )

    assert has_next is False
    assert next_param is None
    assert has_previous is True


def test_new_revision_increments_generation() -> None:
    first = new_revision()
    second = new_revision(first)

    assert first.startswith("1-")
    assert second.startswith("2-")
    assert first != second
