"""
Source Definition
所有数据源的统一契约: 一个具名的异步抓取行为, 返回标准化条目列表或抛出类型化错误
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, List, Mapping, Optional, TYPE_CHECKING
import logging

from pydantic import ValidationError

from core import NormalizedItem
from utils.exceptions import FetchError, UpstreamProtocolError

if TYPE_CHECKING:
    from .http_client import HttpClient


logger = logging.getLogger(__name__)

Fetcher = Callable[["HttpClient"], Awaitable[Optional[List[NormalizedItem]]]]


class EmptyPolicy(str, Enum):
    """上游缺少列表容器时如何处理, 由数据源声明而不是运行时推断"""
    SUCCESS = "success"  # 视为合法的空结果
    ERROR = "error"      # 视为畸形响应


@dataclass(frozen=True)
class SourceDefinition:
    """
    数据源定义

    fetcher 返回 None 表示上游响应中没有列表容器, 由 empty_policy 决定结果;
    返回列表 (可以为空) 表示成功。
    """

    name: str
    fetcher: Fetcher
    empty_policy: EmptyPolicy = EmptyPolicy.SUCCESS
    client: Optional["HttpClient"] = None

    def bind(self, client: "HttpClient") -> "SourceDefinition":
        """绑定出站客户端 (注册时调用一次)"""
        return replace(self, client=client)

    @property
    def is_bound(self) -> bool:
        return self.client is not None

    async def fetch(self) -> List[NormalizedItem]:
        """
        执行抓取

        Returns:
            去重后的标准化条目列表

        Raises:
            FetchError: NetworkFailure / UpstreamProtocolError
        """
        if self.client is None:
            raise RuntimeError(f"Source '{self.name}' is not bound to an HTTP client")

        try:
            items = await self.fetcher(self.client)
        except FetchError as exc:
            if exc.source is None:
                exc.source = self.name
            raise
        except (KeyError, IndexError, TypeError, ValueError, ValidationError) as exc:
            raise UpstreamProtocolError(
                f"Unexpected payload shape: {exc.__class__.__name__}: {exc}",
                source=self.name,
            ) from exc

        if items is None:
            if self.empty_policy == EmptyPolicy.ERROR:
                raise UpstreamProtocolError("Upstream payload has no item list", source=self.name)
            logger.info(f"[{self.name}] upstream returned no list, treating as empty")
            return []

        return self._dedupe(items)

    def _dedupe(self, items: List[NormalizedItem]) -> List[NormalizedItem]:
        seen = set()
        unique: List[NormalizedItem] = []
        for item in items:
            if item.id in seen:
                logger.debug(f"[{self.name}] dropping duplicate item id {item.id!r}")
                continue
            seen.add(item.id)
            unique.append(item)
        return unique


def define_source(
    name: str,
    *,
    empty_policy: EmptyPolicy = EmptyPolicy.SUCCESS,
) -> Callable[[Fetcher], SourceDefinition]:
    """
    装饰器: 把 ``async def fetcher(client)`` 声明为数据源定义

    Usage:
        @define_source("bilibili.hot_search")
        async def hot_search(client):
            ...
    """
    def decorator(fetcher: Fetcher) -> SourceDefinition:
        return SourceDefinition(name=name, fetcher=fetcher, empty_policy=empty_policy)
    return decorator


def raise_for_code(
    payload: Any,
    *,
    source: str,
    ok: Any = 0,
    code_key: str = "code",
    message_key: Optional[str] = "message",
) -> Mapping[str, Any]:
    """
    校验上游响应体中内嵌的状态码

    Returns:
        payload 本身 (确认是 dict)
    """
    if not payload:
        raise UpstreamProtocolError("Upstream response is empty", source=source)
    if not isinstance(payload, Mapping):
        raise UpstreamProtocolError(
            f"Upstream response is not an object: {type(payload).__name__}",
            source=source,
        )

    code = payload.get(code_key)
    if code != ok:
        detail = payload.get(message_key) if message_key else None
        message = f"Upstream error code: {code}"
        if detail:
            message = f"{message} ({detail})"
        raise UpstreamProtocolError(message, source=source, code=code)
    return payload
