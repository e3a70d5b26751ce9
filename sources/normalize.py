"""Display-formatting helpers shared by source integrations."""

from __future__ import annotations

import base64
from typing import Any, Optional
from urllib.parse import quote

from config import get_image_proxy_settings


def format_count(value: Any) -> str:
    """Abbreviate social-proof counters: 123456 -> '12w+', 9999 -> '9999'."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return "0"
    if number >= 10000:
        return f"{number // 10000}w+"
    return str(number)


def proxy_picture(
    url: Optional[str],
    *,
    encoding: str = "encodeURIComponent",
    prefix: Optional[str] = None,
) -> Optional[str]:
    """Route a third-party image through the image proxy instead of linking it directly."""
    text = str(url or "").strip()
    if not text:
        return None
    base = prefix if prefix is not None else get_image_proxy_settings().prefix
    if text.startswith(base):
        return text
    if text.startswith("//"):
        text = f"https:{text}"
    if encoding == "base64":
        quoted = quote(base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii"), safe="")
    else:
        quoted = quote(text, safe="")
    return f"{base}?type={encoding}&url={quoted}"


def ms_from_seconds(value: Any) -> Optional[int]:
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return None
    if seconds <= 0:
        return None
    return seconds * 1000
