"""Display metadata for registered sources. Opaque to the fetch pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple


UNCATEGORIZED = "未分类"
PINNED_FIRST = "科技"

COLUMNS: Dict[str, str] = {
    "china": "国内",
    "world": "国际",
    "tech": "科技",
    "finance": "财经",
}


@dataclass(frozen=True)
class SourceMeta:
    """Presentation-facing description of one public source id."""

    name: str
    title: Optional[str] = None
    column: Optional[str] = None
    color: str = "primary"
    home: Optional[str] = None
    interval: Optional[int] = None  # freshness window override, seconds
    type: Optional[str] = None  # "hottest" | "realtime"
    redirect: Optional[str] = None

    @property
    def column_label(self) -> str:
        if self.column and self.column in COLUMNS:
            return COLUMNS[self.column]
        return UNCATEGORIZED

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"name": self.name, "color": self.color, "column": self.column_label}
        for key in ("title", "home", "interval", "type"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        return payload


_BILIBILI = dict(name="哔哩哔哩", color="blue", home="https://www.bilibili.com")

SOURCE_METAS: Dict[str, SourceMeta] = {
    "bilibili": SourceMeta(**_BILIBILI, redirect="bilibili-hot-search"),
    "bilibili-hot-search": SourceMeta(**_BILIBILI, title="热搜", column="china", type="hottest"),
    "bilibili-hot-video": SourceMeta(**_BILIBILI, title="热门视频", column="china", type="hottest"),
    "bilibili-ranking": SourceMeta(**_BILIBILI, title="排行榜", column="china", type="hottest", interval=3600),
    "hackernews": SourceMeta(
        name="Hacker News",
        column="tech",
        color="orange",
        home="https://news.ycombinator.com",
        type="hottest",
    ),
    "hackernews-front-page": SourceMeta(
        name="Hacker News",
        title="Front Page",
        column="tech",
        color="orange",
        home="https://news.ycombinator.com",
        type="hottest",
    ),
}


def group_by_column(
    entries: Sequence[Tuple[str, SourceMeta]],
) -> List[Tuple[str, List[Tuple[str, SourceMeta]]]]:
    """Group visible sources by column label: tech first, uncategorized last, the rest by label."""
    groups: Dict[str, List[Tuple[str, SourceMeta]]] = {}
    for key, meta in entries:
        groups.setdefault(meta.column_label, []).append((key, meta))

    def _order(label: str) -> Tuple[int, str]:
        if label == PINNED_FIRST:
            return (0, label)
        if label == UNCATEGORIZED:
            return (2, label)
        return (1, label)

    return [(label, groups[label]) for label in sorted(groups, key=_order)]
