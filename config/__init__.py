"""
Configuration Management Module
统一配置管理
"""
from .settings import (
    Settings,
    HttpSettings,
    CacheSettings,
    ImageProxySettings,
    AuthSettings,
    get_settings,
    get_http_settings,
    get_cache_settings,
    get_image_proxy_settings,
    get_auth_settings,
)

__all__ = [
    "Settings",
    "HttpSettings",
    "CacheSettings",
    "ImageProxySettings",
    "AuthSettings",
    "get_settings",
    "get_http_settings",
    "get_cache_settings",
    "get_image_proxy_settings",
    "get_auth_settings",
]
