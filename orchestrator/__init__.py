"""Fetch orchestration over the source registry."""

from .service import (
    FetchOrchestrator,
    get_default_orchestrator,
)

__all__ = [
    "FetchOrchestrator",
    "get_default_orchestrator",
]
