"""
Utils Module
通用工具函数
"""
from .logger import setup_logger, configure_pipeline_logging
from .exceptions import (
    HotlistError,
    ConfigurationError,
    UnknownSourceError,
    FetchError,
    NetworkFailure,
    UpstreamTimeout,
    UpstreamProtocolError,
)

__all__ = [
    "setup_logger",
    "configure_pipeline_logging",
    "HotlistError",
    "ConfigurationError",
    "UnknownSourceError",
    "FetchError",
    "NetworkFailure",
    "UpstreamTimeout",
    "UpstreamProtocolError",
]
