"""
Tests for f8forge.catalog
=========================

Tests for filtering the Camel catalog against a project.
"""

import pytest

from f8forge.catalog import StaticCamelCatalog, available_dataformats, available_languages
from f8forge.models import CatalogEntry, Dependency, PomModel


@pytest.fixture
def catalog() -> StaticCamelCatalog:
    """A small catalog with two languages and two data formats."""
    return StaticCamelCatalog(
        languages=[
            CatalogEntry(name="groovy", artifact_id="camel-groovy"),
            CatalogEntry(name="bean", artifact_id="camel-core"),
        ],
        dataformats=[
            CatalogEntry(name="json-jackson", artifact_id="camel-jackson"),
            CatalogEntry(name="csv", artifact_id="camel-csv"),
        ],
    )


class TestAvailableArtifacts:
    """Tests for available_languages and available_dataformats."""

    def test_requires_camel_core(self, catalog: StaticCamelCatalog, jar_pom: PomModel) -> None:
        """Without camel-core nothing is offered."""
        assert available_languages(jar_pom, catalog) == []
        assert available_dataformats(jar_pom, catalog) == []

    def test_existing_artifacts_are_left_out(
        self,
        catalog: StaticCamelCatalog,
        blueprint_camel_pom: PomModel,
    ) -> None:
        """bean comes with camel-core, so only groovy is offered."""
        names = [e.name for e in available_languages(blueprint_camel_pom, catalog)]

        assert names == ["groovy"]

    def test_language_prefix(self, catalog: StaticCamelCatalog, blueprint_camel_pom: PomModel) -> None:
        assert available_languages(blueprint_camel_pom, catalog, prefix="x") == []

    def test_dataformats(self, catalog: StaticCamelCatalog, blueprint_camel_pom: PomModel) -> None:
        blueprint_camel_pom.dependencies.append(
            Dependency(group_id="org.apache.camel", artifact_id="camel-csv"),
        )

        names = [e.name for e in available_dataformats(blueprint_camel_pom, catalog)]

        assert names == ["json-jackson"]

    def test_method_language_maps_to_bean(self) -> None:
        """Catalogs listing "method" resolve it through the bean entry."""

        class MethodCatalog(StaticCamelCatalog):
            def find_language_names(self) -> list[str]:
                return ["method"]

        catalog = MethodCatalog(languages=[CatalogEntry(name="bean", artifact_id="camel-bean")])
        pom = PomModel(
            artifact_id="demo",
            dependencies=[Dependency(group_id="org.apache.camel", artifact_id="camel-core")],
        )

        entries = available_languages(pom, catalog)

        assert [e.artifact_id for e in entries] == ["camel-bean"]
