"""Source integrations, the shared HTTP client and the source registry."""

from typing import Mapping, Optional

from .base import EmptyPolicy, SourceDefinition, define_source, raise_for_code
from .http_client import HttpClient, HttpClientConfig
from .metadata import COLUMNS, SOURCE_METAS, SourceMeta, group_by_column
from .normalize import format_count, ms_from_seconds, proxy_picture
from .registry import RegistryBuilder, SourceRegistry
from . import bilibili, hackernews

INTEGRATIONS = (bilibili, hackernews)


def build_registry(
    client: Optional[HttpClient] = None,
    *,
    metas: Optional[Mapping[str, SourceMeta]] = None,
) -> SourceRegistry:
    """Assemble the default registry from every integration's ``SOURCES`` map."""
    metas = SOURCE_METAS if metas is None else metas
    builder = RegistryBuilder(client or HttpClient())
    for module in INTEGRATIONS:
        builder.add_source_map(module.SOURCES, metas)
    builder.add_redirects(metas)
    return builder.build()


__all__ = [
    "COLUMNS",
    "EmptyPolicy",
    "HttpClient",
    "HttpClientConfig",
    "INTEGRATIONS",
    "RegistryBuilder",
    "SOURCE_METAS",
    "SourceDefinition",
    "SourceMeta",
    "SourceRegistry",
    "build_registry",
    "define_source",
    "format_count",
    "group_by_column",
    "ms_from_seconds",
    "proxy_picture",
    "raise_for_code",
]
