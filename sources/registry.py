"""Source registry: public ids -> source definitions, with aliases and redirects.

The resolution table is built once by ``RegistryBuilder.build`` and is
read-only afterwards. Configuration problems (duplicate ids, dangling or
cyclic redirects, missing display metadata) fail the build, never a request.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from utils.exceptions import ConfigurationError, UnknownSourceError

from .base import SourceDefinition
from .http_client import HttpClient
from .metadata import SourceMeta


logger = logging.getLogger(__name__)


class SourceRegistry:
    """Immutable lookup table produced by ``RegistryBuilder``."""

    def __init__(
        self,
        *,
        direct: Dict[str, SourceDefinition],
        resolved: Dict[str, str],
        metas: Dict[str, SourceMeta],
        windows: Dict[str, int],
        order: List[str],
    ) -> None:
        self._direct = direct
        self._resolved = resolved
        self._metas = metas
        self._windows = windows
        self._order = order

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._resolved

    def canonical_key(self, source_id: str) -> str:
        """Terminal direct key for ``source_id`` (itself when already direct)."""
        try:
            return self._resolved[source_id]
        except KeyError:
            raise UnknownSourceError(source_id) from None

    def resolve(self, source_id: str) -> SourceDefinition:
        return self._direct[self.canonical_key(source_id)]

    def is_redirect(self, source_id: str) -> bool:
        return self.canonical_key(source_id) != source_id

    def freshness(self, source_id: str) -> Optional[int]:
        """Freshness window of the definition behind ``source_id``, if any id for it declares one.

        Every id resolving to one definition shares its cache slot, so the
        window is the smallest interval declared across those ids.
        """
        return self._windows.get(self.resolve(source_id).name)

    def aliases_of(self, source_id: str) -> List[str]:
        """Other direct ids sharing the same definition instance."""
        definition = self.resolve(source_id)
        return [
            key for key in self._order
            if key != source_id and self._direct.get(key) is definition
        ]

    def list_visible(self) -> List[Tuple[str, SourceMeta]]:
        """Every directly fetchable id (aliases included) with its display metadata."""
        return [(key, self._metas[key]) for key in self._order if key in self._direct]


class RegistryBuilder:
    """Collects entries at startup, then validates them into a ``SourceRegistry``."""

    def __init__(self, client: Optional[HttpClient] = None, *, require_meta: bool = True) -> None:
        self._client = client
        self._require_meta = require_meta
        self._direct: Dict[str, SourceDefinition] = {}
        self._redirects: Dict[str, str] = {}
        self._metas: Dict[str, SourceMeta] = {}
        self._order: List[str] = []
        self._bound: Dict[SourceDefinition, SourceDefinition] = {}

    def _claim(self, key: str) -> None:
        key_text = str(key or "").strip()
        if not key_text or key_text != key:
            raise ConfigurationError("Source id must be a non-empty, trimmed string", {"id": key})
        if key in self._direct or key in self._redirects:
            raise ConfigurationError(f"Duplicate source id: {key}", {"id": key})
        self._order.append(key)

    def _bind(self, definition: SourceDefinition) -> SourceDefinition:
        if self._client is None or definition.is_bound:
            return definition
        # one bound instance per definition keeps aliases sharing identity
        bound = self._bound.get(definition)
        if bound is None:
            bound = definition.bind(self._client)
            self._bound[definition] = bound
        return bound

    def add(self, key: str, definition: SourceDefinition, meta: Optional[SourceMeta] = None) -> "RegistryBuilder":
        self._claim(key)
        self._direct[key] = self._bind(definition)
        if meta is not None:
            self._metas[key] = meta
        return self

    def redirect(self, key: str, target: str, meta: Optional[SourceMeta] = None) -> "RegistryBuilder":
        self._claim(key)
        self._redirects[key] = target
        if meta is not None:
            self._metas[key] = meta
        return self

    def add_source_map(
        self,
        sources: Mapping[str, SourceDefinition],
        metas: Optional[Mapping[str, SourceMeta]] = None,
    ) -> "RegistryBuilder":
        metas = metas or {}
        for key, definition in sources.items():
            self.add(key, definition, metas.get(key))
        return self

    def add_redirects(self, metas: Mapping[str, SourceMeta]) -> "RegistryBuilder":
        """Register every metadata entry that declares a redirect."""
        for key, meta in metas.items():
            if meta.redirect:
                self.redirect(key, meta.redirect, meta)
        return self

    def _follow(self, key: str) -> str:
        chain = [key]
        current = key
        while current in self._redirects:
            current = self._redirects[current]
            if current in chain:
                raise ConfigurationError(
                    f"Redirect cycle: {' -> '.join(chain + [current])}",
                    {"id": key},
                )
            chain.append(current)
        if current not in self._direct:
            raise ConfigurationError(
                f"Redirect target does not resolve: {' -> '.join(chain)}",
                {"id": key, "target": current},
            )
        return current

    def build(self) -> SourceRegistry:
        resolved: Dict[str, str] = {key: key for key in self._direct}
        for key in self._redirects:
            resolved[key] = self._follow(key)

        names: Dict[str, SourceDefinition] = {}
        for definition in self._direct.values():
            other = names.setdefault(definition.name, definition)
            if other is not definition:
                raise ConfigurationError(
                    f"Two different definitions share the name {definition.name!r}",
                    {"name": definition.name},
                )

        windows: Dict[str, int] = {}
        for key, target in resolved.items():
            meta = self._metas.get(key)
            if meta is None or meta.interval is None:
                continue
            name = self._direct[target].name
            windows[name] = min(windows.get(name, meta.interval), meta.interval)

        if self._require_meta:
            missing = [key for key in self._direct if key not in self._metas]
            if missing:
                raise ConfigurationError(
                    f"Missing display metadata for: {', '.join(missing)}",
                    {"ids": missing},
                )

        logger.info(
            f"Source registry built: {len(self._direct)} direct, {len(self._redirects)} redirect entries"
        )
        return SourceRegistry(
            direct=dict(self._direct),
            resolved=resolved,
            metas={k: self._metas.get(k) or SourceMeta(name=k) for k in self._order},
            windows=windows,
            order=list(self._order),
        )
