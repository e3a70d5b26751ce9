"""Shared runtime singletons for web/CLI entrypoints."""

from __future__ import annotations

from orchestrator import FetchOrchestrator, get_default_orchestrator


def get_orchestrator() -> FetchOrchestrator:
    return get_default_orchestrator()
