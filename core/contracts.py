"""Canonical data contracts for the hot-list fetch pipeline."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


def now_ms() -> int:
    return int(time.time() * 1000)


class FetchStatus(str, Enum):
    """Outcome of one source resolution."""

    SUCCESS = "success"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Failure categories surfaced in error envelopes."""

    NETWORK_FAILURE = "NetworkFailure"
    UPSTREAM_PROTOCOL = "UpstreamProtocolError"


class ItemExtra(BaseModel):
    """Display-only auxiliary fields. Sources may add their own stable keys."""

    model_config = ConfigDict(extra="allow", frozen=True)

    info: Optional[str] = None
    hover: Optional[str] = None
    icon: Optional[str] = None


class NormalizedItem(BaseModel):
    """Canonical item every source maps its upstream entries into."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    url: str
    pub_date: Optional[int] = Field(default=None, alias="pubDate")
    extra: Optional[ItemExtra] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        return value

    @field_validator("id", "title", "url")
    @classmethod
    def _non_empty_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("value is required")
        return value


class FetchResult(BaseModel):
    """Response envelope for one source. Immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status: FetchStatus
    items: Tuple[NormalizedItem, ...] = ()
    updated_at: int = Field(default_factory=now_ms, alias="updatedAt")
    error_kind: Optional[ErrorKind] = Field(default=None, alias="errorKind")
    message: Optional[str] = None

    @classmethod
    def success(
        cls,
        items: Iterable[NormalizedItem],
        *,
        updated_at: Optional[int] = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.SUCCESS,
            items=tuple(items),
            updated_at=updated_at if updated_at is not None else now_ms(),
        )

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        updated_at: Optional[int] = None,
    ) -> "FetchResult":
        return cls(
            status=FetchStatus.ERROR,
            error_kind=kind,
            message=message,
            updated_at=updated_at if updated_at is not None else now_ms(),
        )

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    def to_payload(self) -> Dict[str, Any]:
        """Wire shape consumed by the presentation layer."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
