"""
Cache
抓取结果缓存模块
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import logging
import time

from core import FetchResult


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """一次成功抓取的缓存条目, 写入后不再修改"""
    key: str
    result: FetchResult
    expires_at: float
    created_at: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class BaseCache(ABC):
    """
    缓存抽象基类
    """

    def __init__(self, ttl: int = 600, clock: Callable[[], float] = time.time):
        """
        初始化缓存

        Args:
            ttl: 默认新鲜期 (秒)
            clock: 时间来源 (测试时可替换)
        """
        self.ttl = ttl
        self.clock = clock

    @abstractmethod
    def get(self, key: str) -> Optional[CacheEntry]:
        """获取未过期的缓存条目"""
        pass

    @abstractmethod
    def set(self, key: str, result: FetchResult, ttl: Optional[int] = None) -> CacheEntry:
        """写入缓存条目"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """删除缓存"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """清空缓存"""
        pass

    def exists(self, key: str) -> bool:
        """检查键是否存在且未过期"""
        return self.get(key) is not None


class MemoryCache(BaseCache):
    """
    内存缓存
    单事件循环内使用, 条目整体替换, 读取方不会看到写了一半的值
    """

    def __init__(self, ttl: int = 600, max_size: int = 1000, clock: Callable[[], float] = time.time):
        """
        初始化内存缓存

        Args:
            ttl: 默认新鲜期 (秒)
            max_size: 最大缓存条目数
            clock: 时间来源
        """
        super().__init__(ttl, clock)
        self.max_size = max_size
        self._cache: Dict[str, CacheEntry] = {}

    def _cleanup(self, now: float):
        """清理过期条目"""
        expired_keys = [k for k, v in self._cache.items() if v.is_expired(now)]
        for key in expired_keys:
            del self._cache[key]

        # 如果仍然超过限制，删除最旧的
        overflow = len(self._cache) - self.max_size + 1
        if overflow > 0:
            oldest = sorted(self._cache, key=lambda k: self._cache[k].created_at)[:overflow]
            for key in oldest:
                logger.debug(f"Evicting cache entry {key}")
                del self._cache[key]

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        if entry.is_expired(self.clock()):
            del self._cache[key]
            return None

        return entry

    def set(self, key: str, result: FetchResult, ttl: Optional[int] = None) -> CacheEntry:
        now = self.clock()
        if key not in self._cache:
            self._cleanup(now)

        ttl = self.ttl if ttl is None else ttl
        entry = CacheEntry(key=key, result=result, expires_at=now + ttl, created_at=now)
        self._cache[key] = entry
        return entry

    def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def size(self) -> int:
        """返回缓存大小"""
        return len(self._cache)
