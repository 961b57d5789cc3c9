"""
f8forge.catalog - Camel Catalog Collaborator
============================================

The Camel catalog knows which languages and data formats exist and which
artifact provides each. f8forge only consumes it through ``CamelCatalog``;
``StaticCamelCatalog`` is a list-backed implementation for hosts that ship
their catalog as data (and for tests).
"""

from __future__ import annotations

from typing import Protocol

from f8forge.facts import CAMEL_GROUP_ID
from f8forge.models import CatalogEntry, PomModel


class CamelCatalog(Protocol):
    """What the language/data format commands need from a catalog."""

    def find_language_names(self) -> list[str]: ...

    def find_dataformat_names(self) -> list[str]: ...

    def language(self, name: str) -> CatalogEntry | None: ...

    def dataformat(self, name: str) -> CatalogEntry | None: ...


class StaticCamelCatalog:
    """A ``CamelCatalog`` over fixed lists of entries."""

    def __init__(
        self,
        languages: list[CatalogEntry] | None = None,
        dataformats: list[CatalogEntry] | None = None,
    ) -> None:
        self._languages = {e.name: e for e in languages or []}
        self._dataformats = {e.name: e for e in dataformats or []}

    def find_language_names(self) -> list[str]:
        return sorted(self._languages)

    def find_dataformat_names(self) -> list[str]:
        return sorted(self._dataformats)

    def language(self, name: str) -> CatalogEntry | None:
        return self._languages.get(name)

    def dataformat(self, name: str) -> CatalogEntry | None:
        return self._dataformats.get(name)


def _language_lookup_name(name: str) -> str:
    # Older catalogs list the bean language as "method"
    return "bean" if name == "method" else name


def available_languages(
    pom: PomModel,
    catalog: CamelCatalog,
    prefix: str | None = None,
) -> list[CatalogEntry]:
    """
    Languages the project could add.

    Languages whose artifact is already a dependency are left out, as are
    names not starting with ``prefix`` when one is given. Projects without
    camel-core get nothing, since there is no Camel version to align to.
    """
    if pom.find_dependency(CAMEL_GROUP_ID, "camel-core") is None:
        return []

    answer = []
    for name in catalog.find_language_names():
        if prefix is not None and not name.startswith(prefix):
            continue
        entry = catalog.language(_language_lookup_name(name))
        if entry is None:
            continue
        if pom.find_dependency(entry.group_id, entry.artifact_id) is not None:
            continue
        answer.append(entry)
    return answer


def available_dataformats(pom: PomModel, catalog: CamelCatalog) -> list[CatalogEntry]:
    """Data formats whose artifact the project does not depend on yet."""
    if pom.find_dependency(CAMEL_GROUP_ID, "camel-core") is None:
        return []

    answer = []
    for name in catalog.find_dataformat_names():
        entry = catalog.dataformat(name)
        if entry is None:
            continue
        if pom.find_dependency(entry.group_id, entry.artifact_id) is not None:
            continue
        answer.append(entry)
    return answer
