"""
Custom Exceptions
自定义异常类
"""
from typing import Optional

from core import ErrorKind


class HotlistError(Exception):
    """热榜聚合基础异常类"""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(HotlistError):
    """配置错误 (重复 key / 重定向无法解析 / 重定向成环)，启动时抛出"""
    pass


class UnknownSourceError(HotlistError, KeyError):
    """未注册的数据源 ID"""

    def __init__(self, source_id: str):
        super().__init__(f"Unknown source: {source_id}", {"id": source_id})
        self.source_id = source_id

    def __str__(self):
        return self.message


class FetchError(HotlistError):
    """单个数据源抓取失败"""

    kind: ErrorKind = ErrorKind.UPSTREAM_PROTOCOL

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, kwargs)
        self.source = source


class NetworkFailure(FetchError):
    """传输层错误 / 5xx / 限流，重试耗尽后抛出"""

    kind = ErrorKind.NETWORK_FAILURE

    def __init__(self, message: str, source: Optional[str] = None, status_code: Optional[int] = None, **kwargs):
        if status_code is not None:
            kwargs["status_code"] = status_code
        super().__init__(message, source, **kwargs)
        self.status_code = status_code


class UpstreamTimeout(NetworkFailure):
    """单次请求超时"""
    pass


class UpstreamProtocolError(FetchError):
    """上游返回了响应，但内容表示失败或无法解析"""

    kind = ErrorKind.UPSTREAM_PROTOCOL

    def __init__(self, message: str, source: Optional[str] = None, code=None, **kwargs):
        if code is not None:
            kwargs["code"] = code
        super().__init__(message, source, **kwargs)
        self.code = code
