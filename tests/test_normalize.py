from __future__ import annotations

import base64
from urllib.parse import parse_qs, urlparse

import pytest
from pydantic import ValidationError

from core import FetchResult, FetchStatus, ErrorKind, ItemExtra, NormalizedItem
from sources.normalize import format_count, ms_from_seconds, proxy_picture


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (9999, "9999"), (10000, "1w+"), (19999, "1w+"), (1234567, "123w+"), (None, "0")],
)
def test_format_count(value, expected) -> None:
    assert format_count(value) == expected


def test_proxy_picture_rewrites_through_prefix() -> None:
    proxied = proxy_picture("https://i0.hdslb.com/a b.png?x=1", prefix="/img")
    assert proxied == "/img?type=encodeURIComponent&url=https%3A%2F%2Fi0.hdslb.com%2Fa%20b.png%3Fx%3D1"


def test_proxy_picture_handles_empty_protocol_relative_and_proxied_urls() -> None:
    assert proxy_picture("", prefix="/img") is None
    assert proxy_picture(None, prefix="/img") is None
    assert proxy_picture("//i0.hdslb.com/a.png", prefix="/img").endswith("https%3A%2F%2Fi0.hdslb.com%2Fa.png")
    already = "/img?type=encodeURIComponent&url=x"
    assert proxy_picture(already, prefix="/img") == already


def test_proxy_picture_base64_encoding_round_trips_the_url() -> None:
    proxied = proxy_picture("//i0.hdslb.com/a.png", encoding="base64", prefix="/img")
    query = parse_qs(urlparse(proxied).query)
    assert query["type"] == ["base64"]
    assert base64.urlsafe_b64decode(query["url"][0]).decode("utf-8") == "https://i0.hdslb.com/a.png"


def test_ms_from_seconds() -> None:
    assert ms_from_seconds(1_700_000_000) == 1_700_000_000_000
    assert ms_from_seconds(0) is None
    assert ms_from_seconds("bad") is None


def test_normalized_item_rejects_empty_fields_and_coerces_numeric_ids() -> None:
    item = NormalizedItem(id=42, title="t", url="https://x")
    assert item.id == "42"
    for field in ("id", "title", "url"):
        data = {"id": "1", "title": "t", "url": "https://x", field: "  "}
        with pytest.raises(ValidationError):
            NormalizedItem(**data)


def test_envelope_payload_shape() -> None:
    item = NormalizedItem(
        id="1",
        title="t",
        url="https://x",
        pub_date=1000,
        extra=ItemExtra(info="i", rank=3),
    )
    ok = FetchResult.success([item], updated_at=5).to_payload()
    assert ok == {
        "status": "success",
        "items": [{"id": "1", "title": "t", "url": "https://x", "pubDate": 1000, "extra": {"info": "i", "rank": 3}}],
        "updatedAt": 5,
    }

    failed = FetchResult.failure(ErrorKind.NETWORK_FAILURE, "down", updated_at=6)
    assert failed.status == FetchStatus.ERROR
    assert failed.to_payload() == {
        "status": "error",
        "items": [],
        "updatedAt": 6,
        "errorKind": "NetworkFailure",
        "message": "down",
    }


def test_envelope_is_immutable() -> None:
    result = FetchResult.success([], updated_at=1)
    with pytest.raises(ValidationError):
        result.status = FetchStatus.ERROR
