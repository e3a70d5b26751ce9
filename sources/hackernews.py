"""
Hacker News Source
极客社区首页热门, 使用 Algolia HN Search API
API 文档: https://hn.algolia.com/api
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from core import ItemExtra, NormalizedItem
from utils.exceptions import UpstreamProtocolError

from .base import EmptyPolicy, define_source
from .http_client import HttpClient
from .normalize import ms_from_seconds


ALGOLIA_URL = "https://hn.algolia.com/api/v1/search"


def _item_url(item_id: str) -> str:
    return f"https://news.ycombinator.com/item?id={item_id}"


def map_front_page(payload: Mapping[str, Any]) -> Optional[List[NormalizedItem]]:
    """Algolia hits -> 标准条目; 没有 hits 字段时返回 None"""
    hits = payload.get("hits")
    if hits is None:
        return None

    items = []
    for hit in hits:
        item_id = str(hit["objectID"])
        points = hit.get("points") or 0
        comments = hit.get("num_comments") or 0
        items.append(
            NormalizedItem(
                id=item_id,
                title=hit["title"],
                # Ask/Show HN 帖子没有外链
                url=hit.get("url") or _item_url(item_id),
                pub_date=ms_from_seconds(hit.get("created_at_i")),
                extra=ItemExtra(
                    info=f"{points} points · {comments} comments",
                    hover=hit.get("author") or None,
                ),
            )
        )
    return items


# Algolia 没有内嵌状态码, 缺少 hits 说明响应结构异常
@define_source("hackernews.front_page", empty_policy=EmptyPolicy.ERROR)
async def front_page(client: HttpClient) -> Optional[List[NormalizedItem]]:
    payload = await client.get_json(ALGOLIA_URL, params={"tags": "front_page", "hitsPerPage": 30})
    if not isinstance(payload, Mapping):
        raise UpstreamProtocolError("Upstream response is not an object", source="hackernews.front_page")
    return map_front_page(payload)


SOURCES = {
    "hackernews": front_page,
    "hackernews-front-page": front_page,
}
