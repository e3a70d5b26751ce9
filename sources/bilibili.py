"""
Bilibili Sources
哔哩哔哩热搜 / 热门视频 / 排行榜
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote
import logging

from pydantic import ValidationError

from core import ItemExtra, NormalizedItem
from utils.exceptions import FetchError

from .base import define_source, raise_for_code
from .http_client import HttpClient
from .normalize import format_count, ms_from_seconds, proxy_picture


logger = logging.getLogger(__name__)

HOME_URL = "https://www.bilibili.com/"
HOT_SEARCH_URL = "https://s.search.bilibili.com/main/hotword"
HOT_VIDEO_URL = "https://api.bilibili.com/x/web-interface/popular"
RANKING_URL = "https://api.bilibili.com/x/web-interface/ranking/v2"

HEADERS = {"Referer": HOME_URL}


def map_hot_search(payload: Mapping[str, Any]) -> Optional[List[NormalizedItem]]:
    """热搜词 -> 标准条目; 没有 list 字段时返回 None"""
    entries = payload.get("list")
    if entries is None:
        return None

    items = []
    for entry in entries:
        keyword = str(entry.get("keyword") or "").strip()
        if not keyword:
            logger.debug(f"[bilibili.hot_search] skipping hotword without keyword: {entry!r}")
            continue
        items.append(
            NormalizedItem(
                id=keyword,
                title=str(entry.get("show_name") or "").strip() or keyword,
                url=f"https://search.bilibili.com/all?keyword={quote(keyword, safe='')}",
                extra=ItemExtra(icon=proxy_picture(entry.get("icon"))),
            )
        )
    return items


def map_videos(payload: Mapping[str, Any]) -> Optional[List[NormalizedItem]]:
    """热门视频 / 排行榜共用的视频列表映射"""
    data = payload.get("data") or {}
    entries = data.get("list")
    if entries is None:
        return None

    items = []
    for video in entries:
        bvid = video["bvid"]
        owner = video.get("owner") or {}
        stat = video.get("stat") or {}
        try:
            item = NormalizedItem(
                id=bvid,
                title=video["title"],
                url=f"https://www.bilibili.com/video/{bvid}",
                pub_date=ms_from_seconds(video.get("pubdate")),
                extra=ItemExtra(
                    info=_video_info(owner.get("name"), stat),
                    hover=video.get("desc") or None,
                    icon=proxy_picture(video.get("pic")),
                ),
            )
        except ValidationError:
            logger.debug(f"[bilibili] skipping video with blank fields: {bvid!r}")
            continue
        items.append(item)
    return items


def _video_info(owner_name: Optional[str], stat: Dict[str, Any]) -> str:
    parts = []
    if owner_name:
        parts.append(owner_name)
    parts.append(f"{format_count(stat.get('view', 0))}观看")
    parts.append(f"{format_count(stat.get('like', 0))}点赞")
    return " · ".join(parts)


@define_source("bilibili.hot_search")
async def hot_search(client: HttpClient) -> Optional[List[NormalizedItem]]:
    payload = await client.get_json(HOT_SEARCH_URL, params={"limit": 30}, headers=HEADERS)
    raise_for_code(payload, source="bilibili.hot_search")
    return map_hot_search(payload)


@define_source("bilibili.hot_video")
async def hot_video(client: HttpClient) -> Optional[List[NormalizedItem]]:
    payload = await client.get_json(HOT_VIDEO_URL, headers=HEADERS)
    raise_for_code(payload, source="bilibili.hot_video")
    return map_videos(payload)


@define_source("bilibili.ranking")
async def ranking(client: HttpClient) -> Optional[List[NormalizedItem]]:
    headers = dict(HEADERS)
    # 排行榜接口对无 cookie 的请求更容易返回 -352 风控码
    try:
        cookie = await client.fetch_cookies(HOME_URL)
    except FetchError as exc:
        logger.warning(f"[bilibili.ranking] cookie bootstrap failed, continuing without: {exc}")
        cookie = ""
    if cookie:
        headers["Cookie"] = cookie

    payload = await client.get_json(RANKING_URL, headers=headers)
    raise_for_code(payload, source="bilibili.ranking")
    return map_videos(payload)


SOURCES = {
    "bilibili-hot-search": hot_search,
    "bilibili-hot-video": hot_video,
    "bilibili-ranking": ranking,
}
