"""Core contracts and shared types for the fetch pipeline."""

from .contracts import (
    ErrorKind,
    FetchResult,
    FetchStatus,
    ItemExtra,
    NormalizedItem,
    now_ms,
)

__all__ = [
    "ErrorKind",
    "FetchResult",
    "FetchStatus",
    "ItemExtra",
    "NormalizedItem",
    "now_ms",
]
