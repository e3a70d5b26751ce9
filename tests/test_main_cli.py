from __future__ import annotations

import json
import sys

import pytest

import main as main_module
from core import NormalizedItem
from orchestrator import FetchOrchestrator
from sources.base import define_source
from sources.metadata import SourceMeta
from sources.registry import RegistryBuilder


def _orchestrator() -> FetchOrchestrator:
    @define_source("demo.hot")
    async def hot(client):
        return [NormalizedItem(id="1", title="first", url="https://example.com/1")]

    registry = (
        RegistryBuilder(require_meta=False)
        .add("demo-hot", hot, SourceMeta(name="Demo", title="Hot", column="tech"))
        .add("demo-trending", hot, SourceMeta(name="Demo", title="Trending", column="tech"))
        .redirect("demo", "demo-hot")
        .build()
    )
    return FetchOrchestrator(registry, ttl=60)


@pytest.fixture
def cli(monkeypatch):
    orchestrator = _orchestrator()
    monkeypatch.setattr(main_module, "get_orchestrator", lambda: orchestrator)

    def run(*argv: str) -> None:
        monkeypatch.setattr(sys, "argv", ["hotlist", *argv])
        main_module.main()

    return run


def test_fetch_prints_json_envelopes_keyed_by_requested_id(cli, capsys) -> None:
    cli("fetch", "demo", "demo-hot")

    payload = json.loads(capsys.readouterr().out)
    assert list(payload) == ["demo", "demo-hot"]
    assert payload["demo"] == payload["demo-hot"]
    assert payload["demo"]["status"] == "success"
    assert payload["demo"]["items"][0]["title"] == "first"


def test_fetch_unknown_id_exits_with_usage_error(cli, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli("fetch", "demo", "nope")

    assert excinfo.value.code == 2
    assert "nope" in capsys.readouterr().err


def test_sources_lists_visible_ids_with_aliases(cli, capsys) -> None:
    cli("sources")

    out = capsys.readouterr().out
    assert "科技" in out
    assert "demo-hot" in out
    assert "demo-trending" in out
