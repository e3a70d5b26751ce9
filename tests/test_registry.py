from __future__ import annotations

import pytest

from core import NormalizedItem
from sources import SOURCE_METAS, HttpClient, HttpClientConfig, build_registry
from sources.base import define_source
from sources.metadata import SourceMeta, group_by_column
from sources.registry import RegistryBuilder
from utils.exceptions import ConfigurationError, UnknownSourceError


def _definition(name: str):
    @define_source(name)
    async def _fetch(client):
        return [NormalizedItem(id="1", title=name, url=f"https://example.com/{name}")]

    return _fetch


def _client() -> HttpClient:
    return HttpClient(HttpClientConfig(user_agent="HotlistTest/1.0"))


def test_direct_and_redirect_chain_resolve_to_terminal_definition() -> None:
    hot = _definition("hot")
    registry = (
        RegistryBuilder(_client(), require_meta=False)
        .add("site-hot", hot)
        .redirect("site", "site-legacy")
        .redirect("site-legacy", "site-hot")
        .build()
    )

    direct = registry.resolve("site-hot")
    assert direct.is_bound
    assert registry.resolve("site") is direct
    assert registry.resolve("site-legacy") is direct
    assert registry.canonical_key("site") == "site-hot"
    assert registry.is_redirect("site")
    assert not registry.is_redirect("site-hot")


def test_aliases_share_one_bound_definition() -> None:
    hot = _definition("hot")
    registry = (
        RegistryBuilder(_client(), require_meta=False)
        .add("site", hot)
        .add("site-hot-search", hot)
        .add("site-video", _definition("video"))
        .build()
    )

    assert registry.resolve("site") is registry.resolve("site-hot-search")
    assert registry.resolve("site") is not registry.resolve("site-video")
    assert registry.aliases_of("site") == ["site-hot-search"]


def test_duplicate_id_is_rejected() -> None:
    builder = RegistryBuilder(require_meta=False).add("site", _definition("a"))
    with pytest.raises(ConfigurationError):
        builder.add("site", _definition("b"))
    with pytest.raises(ConfigurationError):
        builder.redirect("site", "elsewhere")


def test_dangling_redirect_fails_at_build() -> None:
    builder = RegistryBuilder(require_meta=False).add("site", _definition("a")).redirect("old", "missing")
    with pytest.raises(ConfigurationError, match="does not resolve"):
        builder.build()


def test_redirect_cycle_fails_at_build() -> None:
    builder = (
        RegistryBuilder(require_meta=False)
        .add("site", _definition("a"))
        .redirect("x", "y")
        .redirect("y", "z")
        .redirect("z", "x")
    )
    with pytest.raises(ConfigurationError, match="cycle"):
        builder.build()


def test_missing_metadata_fails_at_build() -> None:
    builder = RegistryBuilder().add("site", _definition("a"))
    with pytest.raises(ConfigurationError, match="metadata"):
        builder.build()


def test_unknown_id_raises_unknown_source() -> None:
    registry = RegistryBuilder(require_meta=False).add("site", _definition("a")).build()
    with pytest.raises(UnknownSourceError):
        registry.resolve("nope")
    assert "nope" not in registry


def test_list_visible_skips_redirects_and_keeps_aliases() -> None:
    hot = _definition("hot")
    metas = {
        "site": SourceMeta(name="Site", redirect="site-hot"),
        "site-hot": SourceMeta(name="Site", title="Hot", column="tech"),
        "site-trending": SourceMeta(name="Site", title="Trending", column="tech"),
    }
    registry = (
        RegistryBuilder()
        .add_source_map({"site-hot": hot, "site-trending": hot}, metas)
        .add_redirects(metas)
        .build()
    )

    visible = registry.list_visible()
    assert [key for key, _ in visible] == ["site-hot", "site-trending"]
    assert visible[0][1].title == "Hot"


def test_group_by_column_puts_tech_first_and_uncategorized_last() -> None:
    entries = [
        ("a", SourceMeta(name="A")),
        ("b", SourceMeta(name="B", column="world")),
        ("c", SourceMeta(name="C", column="tech")),
        ("d", SourceMeta(name="D", column="china")),
        ("e", SourceMeta(name="E", column="not-a-column")),
    ]

    groups = group_by_column(entries)
    labels = [label for label, _ in groups]

    assert labels[0] == "科技"
    assert labels[-1] == "未分类"
    assert sorted(labels[1:-1]) == labels[1:-1]
    assert [key for key, _ in groups[-1][1]] == ["a", "e"]


def test_default_registry_wires_every_integration() -> None:
    registry = build_registry(_client())

    assert registry.resolve("bilibili") is registry.resolve("bilibili-hot-search")
    assert registry.resolve("hackernews") is registry.resolve("hackernews-front-page")
    visible = [key for key, _ in registry.list_visible()]
    assert "bilibili" not in visible
    for key in ("bilibili-hot-search", "bilibili-hot-video", "bilibili-ranking", "hackernews"):
        assert key in visible
        assert key in SOURCE_METAS


def test_distinct_definitions_with_same_name_are_rejected() -> None:
    builder = (
        RegistryBuilder(require_meta=False)
        .add("one", _definition("shared"))
        .add("two", _definition("shared"))
    )
    with pytest.raises(ConfigurationError, match="share the name"):
        builder.build()
