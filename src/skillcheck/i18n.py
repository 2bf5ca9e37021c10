"""Resource-backed translator shaped after i18next resource bundles."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

DEFAULT_NAMESPACE = "translation"
_INTERPOLATION = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


class Translator:
    """Look up keys per locale with language and fallback resolution.

    Resources follow the i18next layout: ``{locale: {namespace: {key: value}}}``.
    Values may be strings, lists or nested mappings; non-string values are
    returned as-is. Strings are interpolated from ``{{name}}`` placeholders and
    ``sprintf`` positional arguments.
    """

    def __init__(
        self,
        resources: Mapping[str, Mapping[str, Any]],
        *,
        lng: str,
        fallback_lng: str | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._resources = resources
        self.language = lng
        self.fallback_lng = fallback_lng
        self.namespace = namespace

    def change_language(self, lng: str) -> None:
        self.language = lng

    def t(self, keys: str | Sequence[str], *args: Any, **params: Any) -> Any:
        """Translate the first resolvable key; unresolved keys are returned verbatim."""

        candidates = [keys] if isinstance(keys, str) else list(keys)
        lng = params.pop("lng", None) or self.language
        sprintf_args = params.pop("sprintf", None)
        if sprintf_args is None and args:
            sprintf_args = list(args)

        for key in candidates:
            value = self._lookup(key, lng)
            if value is None:
                continue
            if isinstance(value, str):
                return self._format(value, sprintf_args, params)
            return value
        return candidates[-1] if candidates else ""

    def _languages(self, lng: str) -> list[str]:
        chain = [lng]
        base = lng.split("-", 1)[0]
        if base != lng:
            chain.append(base)
        if self.fallback_lng and self.fallback_lng not in chain:
            chain.append(self.fallback_lng)
        return chain

    def _lookup(self, key: str, lng: str) -> Any:
        namespace, _, path = key.rpartition(":")
        namespace = namespace or self.namespace
        for language in self._languages(lng):
            node: Any = self._resources.get(language, {}).get(namespace)
            for part in path.split("."):
                if not isinstance(node, Mapping) or part not in node:
                    node = None
                    break
                node = node[part]
            if node is not None:
                return node
        return None

    @staticmethod
    def _format(value: str, sprintf_args: Sequence[Any] | None, params: Mapping[str, Any]) -> str:
        if params:
            value = _INTERPOLATION.sub(lambda match: str(params.get(match.group(1), match.group(0))), value)
        if sprintf_args:
            value = value % tuple(sprintf_args)
        return value
