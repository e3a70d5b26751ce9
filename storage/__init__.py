"""
Storage Module
存储模块 - 抓取结果缓存
"""
from .cache import (
    BaseCache,
    CacheEntry,
    MemoryCache,
)

__all__ = [
    "BaseCache",
    "CacheEntry",
    "MemoryCache",
]
