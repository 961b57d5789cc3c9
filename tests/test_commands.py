"""
Tests for f8forge.commands
==========================

Tests for the setup commands. Each command is run against an in-memory
object model; file creating commands write into ``tmp_path``.

Test Organization
-----------------
- TestSetupOptions: Tests for option validation
- TestFabric8Setup: Tests for the Docker/fabric8 setup
- TestServiceSetup: Tests for the Kubernetes service command
- TestSiteSetup: Tests for site publishing
- TestNewCamelContextXml: Tests for CamelContext file creation
- TestCamelArtifacts: Tests for adding languages and data formats
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from f8forge.camel import find_xml_files, scan_endpoints
from f8forge.catalog import StaticCamelCatalog
from f8forge.commands import (
    Fabric8SetupOptions,
    ServiceOptions,
    add_camel_dataformat,
    add_camel_language,
    fabric8_setup,
    new_camel_context_xml,
    service_setup,
    service_setup_defaults,
    site_setup,
    xml_file_name,
)
from f8forge.errors import ValidationFailure
from f8forge.merger import fabric8_maven_plugin
from f8forge.models import CatalogEntry, Dependency, MavenProfile, PomModel
from f8forge.settings import ForgeSettings


# =============================================================================
# Option Tests
# =============================================================================

class TestSetupOptions:
    """Tests for Fabric8SetupOptions validation."""

    @pytest.mark.parametrize("main", ["com.example.Main", "Main", "${start-class}"])
    def test_valid_main(self, main: str) -> None:
        assert Fabric8SetupOptions(main=main).main == main

    @pytest.mark.parametrize("main", ["com.example.", "1Main", "not a class"])
    def test_invalid_main(self, main: str) -> None:
        with pytest.raises(ValidationError):
            Fabric8SetupOptions(main=main)

    def test_blank_main_means_default(self) -> None:
        assert Fabric8SetupOptions(main="  ").main is None

    def test_unknown_icon(self) -> None:
        with pytest.raises(ValidationError, match="Unknown icon"):
            Fabric8SetupOptions(icon="duke")


# =============================================================================
# Fabric8 Setup Tests
# =============================================================================

class TestFabric8Setup:
    """Tests for fabric8_setup."""

    def test_war_project(self, war_pom: PomModel) -> None:
        """A WAR gets Tomcat, a service on 8080 and the profiles."""
        result = fabric8_setup(war_pom, Fabric8SetupOptions())

        assert result.success
        assert result.changed
        assert "fabric8/tomcat-8.0" in result.message
        assert "f8-local-deploy" in result.message

        props = war_pom.properties
        assert props["docker.from"] == "fabric8/tomcat-8.0"
        assert props["docker.image"] == "fabric8/${project.artifactId}:${project.version}"
        assert "docker.env.MAIN" not in props
        assert props["fabric8.label.container"] == "tomcat"
        assert props["fabric8.iconRef"] == "icons/tomcat"
        assert props["fabric8.service.containerPort"] == "8080"
        assert props["fabric8.service.port"] == "80"
        assert props["fabric8.service.name"] == "webapp"
        assert props["fabric8.service.type"] == "LoadBalancer"
        assert props["fabric8.readinessProbe.httpGet.path"] == "/"
        assert props["fabric8.readinessProbe.timeoutSeconds"] == "30"
        assert props["fabric8.readinessProbe.initialDelaySeconds"] == "5"

        assert war_pom.find_plugin("io.fabric8", "fabric8-maven-plugin") is not None
        assert [p.id for p in war_pom.profiles] == ["f8-build", "f8-deploy", "f8-local-deploy"]

    def test_second_run_changes_nothing(self, war_pom: PomModel) -> None:
        """Running setup twice leaves the model as the first run left it."""
        fabric8_setup(war_pom, Fabric8SetupOptions())
        snapshot = war_pom.model_copy(deep=True)

        result = fabric8_setup(war_pom, Fabric8SetupOptions())

        assert result.success
        assert not result.changed
        assert "already present" in result.message
        assert war_pom == snapshot

    def test_existing_profile_is_kept(self, war_pom: PomModel) -> None:
        custom = MavenProfile(id="f8-build", build_default_goal="verify")
        war_pom.profiles.append(custom)

        result = fabric8_setup(war_pom, Fabric8SetupOptions())

        assert war_pom.profiles[0] == custom
        assert "[f8-deploy, f8-local-deploy]" in result.message

    def test_spring_boot(self, spring_boot_pom: PomModel) -> None:
        """Spring Boot checks readiness on /health and gains the actuator."""
        result = fabric8_setup(spring_boot_pom, Fabric8SetupOptions(main="com.example.App"))

        assert result.success
        props = spring_boot_pom.properties
        assert props["docker.from"] == "fabric8/java-jboss-openjdk8-jdk:1.0.10"
        assert props["docker.env.MAIN"] == "com.example.App"
        assert props["fabric8.iconRef"] == "icons/spring-boot"
        assert props["fabric8.readinessProbe.httpGet.path"] == "/health"
        assert spring_boot_pom.find_dependency(
            "org.springframework.boot", "spring-boot-starter-actuator",
        ) is not None

    def test_swarm_port(self, swarm_pom: PomModel) -> None:
        fabric8_setup(swarm_pom, Fabric8SetupOptions())

        assert swarm_pom.properties["fabric8.service.containerPort"] == "8181"
        assert swarm_pom.properties["fabric8.readinessProbe.httpGet.port"] == "8181"

    def test_plain_jar_has_no_service(self, jar_pom: PomModel) -> None:
        """Without a known port there is no service or readiness probe."""
        fabric8_setup(jar_pom, Fabric8SetupOptions())

        assert not any(key.startswith("fabric8.service.") for key in jar_pom.properties)
        assert not any(key.startswith("fabric8.readinessProbe.") for key in jar_pom.properties)
        assert jar_pom.properties["fabric8.label.container"] == "java"

    def test_no_service_option(self, war_pom: PomModel) -> None:
        fabric8_setup(war_pom, Fabric8SetupOptions(service=False, readiness_probe=False, profiles=False))

        assert "fabric8.service.name" not in war_pom.properties
        assert "fabric8.readinessProbe.httpGet.port" not in war_pom.properties
        assert war_pom.profiles == []

    def test_explicit_choices(self, war_pom: PomModel) -> None:
        options = Fabric8SetupOptions(
            organization="acme",
            from_image="jboss/wildfly:9.0.2.Final",
            group="shop",
            icon="wildfly",
        )

        fabric8_setup(war_pom, options)

        props = war_pom.properties
        assert props["docker.from"] == "jboss/wildfly:9.0.2.Final"
        assert props["docker.image"].startswith("acme/")
        assert props["fabric8.label.group"] == "shop"
        assert props["fabric8.iconRef"] == "icons/wildfly"

    def test_container_label_drops_image_tag(self, war_pom: PomModel) -> None:
        """The tagged image yields a ``:``-free label, which then picks the icon."""
        fabric8_setup(war_pom, Fabric8SetupOptions(from_image="jboss/wildfly:9.0.2.Final"))

        assert war_pom.properties["fabric8.label.container"] == "wildfly"
        assert war_pom.properties["fabric8.iconRef"] == "icons/wildfly"

    def test_settings_are_used(self, war_pom: PomModel) -> None:
        settings = ForgeSettings(docker_organization="ACME", fabric8_version="3.0.0")

        fabric8_setup(war_pom, Fabric8SetupOptions(import_bom=True), settings)

        assert war_pom.properties["docker.image"].startswith("acme/")
        assert war_pom.find_plugin("io.fabric8", "fabric8-maven-plugin").version == "3.0.0"
        assert war_pom.managed_dependencies[0].version == "3.0.0"

    def test_long_artifact_id(self, caplog: pytest.LogCaptureFixture) -> None:
        """The service name is clipped to 24 characters."""
        pom = PomModel(artifact_id="my-extremely-long-web-application", packaging="war")

        with caplog.at_level(logging.WARNING, logger="f8forge.inference"):
            fabric8_setup(pom, Fabric8SetupOptions())

        assert pom.properties["fabric8.service.name"] == "my-extremely-long-web-ap"
        assert any("limited to max 24" in r.getMessage() for r in caplog.records)


# =============================================================================
# Service Setup Tests
# =============================================================================

class TestServiceSetup:
    """Tests for service_setup."""

    @pytest.fixture
    def fabric8_pom(self, war_pom: PomModel) -> PomModel:
        war_pom.plugins.append(fabric8_maven_plugin("2.2.101"))
        return war_pom

    def test_update_and_repeat(self, fabric8_pom: PomModel) -> None:
        options = ServiceOptions(name="shop", port=80, container_port=8080)

        first = service_setup(fabric8_pom, options)
        second = service_setup(fabric8_pom, options)

        assert first.changed
        assert first.message == "Kubernetes service updated"
        assert not second.changed
        assert second.message == "Kubernetes service unchanged"
        assert fabric8_pom.properties["fabric8.service.containerPort"] == "8080"

    def test_none_keeps_current_value(self, fabric8_pom: PomModel) -> None:
        fabric8_pom.properties["fabric8.service.name"] = "shop"

        service_setup(fabric8_pom, ServiceOptions(port=8081))

        assert fabric8_pom.properties["fabric8.service.name"] == "shop"
        assert fabric8_pom.properties["fabric8.service.port"] == "8081"

    def test_requires_fabric8_plugin(self, war_pom: PomModel) -> None:
        """Projects without the fabric8-maven-plugin are refused untouched."""
        before = dict(war_pom.properties)

        result = service_setup(war_pom, ServiceOptions(name="shop", port=80))

        assert not result.success
        assert not result.changed
        assert "fabric8-maven-plugin" in result.message
        assert war_pom.properties == before

    def test_name_too_long(self) -> None:
        with pytest.raises(ValidationError):
            ServiceOptions(name="x" * 25)

    def test_defaults_from_properties(self, war_pom: PomModel) -> None:
        war_pom.properties.update({"fabric8.service.name": "shop", "fabric8.service.port": "80"})

        current = service_setup_defaults(war_pom)

        assert current.name == "shop"
        assert current.port == 80
        assert current.container_port is None


# =============================================================================
# Site Setup Tests
# =============================================================================

class TestSiteSetup:
    """Tests for site_setup."""

    def test_site_setup_twice(self, war_pom: PomModel) -> None:
        first = site_setup(war_pom)
        second = site_setup(war_pom)

        assert first.changed
        assert first.message == "Configured Maven site publishing"
        assert not second.changed
        assert second.message == "Maven site publishing already configured"


# =============================================================================
# CamelContext XML Tests
# =============================================================================

class TestNewCamelContextXml:
    """Tests for new_camel_context_xml."""

    def test_blueprint_file(self, blueprint_camel_pom: PomModel, tmp_path: Path) -> None:
        """A bundle gets a Blueprint file and camel-blueprint at camel-core's version."""
        result = new_camel_context_xml(blueprint_camel_pom, tmp_path, "routes")

        assert result.success
        assert result.message == "Created new XML file src/main/resources/OSGI-INF/blueprint/routes.xml"
        target = tmp_path / "OSGI-INF" / "blueprint" / "routes.xml"
        assert result.files_created == [target]
        content = target.read_text(encoding="utf-8")
        assert "http://camel.apache.org/schema/blueprint" in content
        assert 'id="camel-bundle"' in content

        dep = blueprint_camel_pom.find_dependency("org.apache.camel", "camel-blueprint")
        assert dep is not None
        assert dep.version == "2.16.0"

    def test_spring_file(self, spring_boot_pom: PomModel, tmp_path: Path) -> None:
        spring_boot_pom.dependencies.append(
            Dependency(group_id="org.apache.camel", artifact_id="camel-core", version="2.17.1"),
        )

        result = new_camel_context_xml(spring_boot_pom, tmp_path, "camel.xml", project_name="orders")

        assert result.success
        content = (tmp_path / "META-INF" / "spring" / "camel.xml").read_text(encoding="utf-8")
        assert "http://camel.apache.org/schema/spring" in content
        assert 'id="orders"' in content
        assert spring_boot_pom.find_dependency("org.apache.camel", "camel-spring").version == "2.17.1"

    def test_project_name_with_markup(self, blueprint_camel_pom: PomModel, tmp_path: Path) -> None:
        """The generated file stays well-formed and is found by the scanner."""
        result = new_camel_context_xml(blueprint_camel_pom, tmp_path, "routes", project_name="R&D <orders>")

        assert result.success
        found = scan_endpoints(find_xml_files(tmp_path), tmp_path)
        assert [(e.file_uri, e.endpoint_uri) for e in found] == [
            ("OSGI-INF/blueprint/routes.xml", "timer:foo?period=5000"),
            ("OSGI-INF/blueprint/routes.xml", "log:R&D <orders>"),
        ]

    def test_existing_camel_directory_is_reused(
        self,
        blueprint_camel_pom: PomModel,
        resources_dir: Path,
    ) -> None:
        """New files go next to the existing route files."""
        result = new_camel_context_xml(blueprint_camel_pom, resources_dir, "more")

        assert result.success
        assert (resources_dir / "META-INF" / "spring" / "more.xml").exists()

    def test_file_exists(self, blueprint_camel_pom: PomModel, tmp_path: Path) -> None:
        """An existing file is never overwritten and the model is untouched."""
        target = tmp_path / "OSGI-INF" / "blueprint" / "routes.xml"
        target.parent.mkdir(parents=True)
        target.write_text("original", encoding="utf-8")
        before = blueprint_camel_pom.model_copy(deep=True)

        result = new_camel_context_xml(blueprint_camel_pom, tmp_path, "routes")

        assert not result.success
        assert result.message == "XML file src/main/resources/OSGI-INF/blueprint/routes.xml already exists"
        assert target.read_text(encoding="utf-8") == "original"
        assert blueprint_camel_pom == before

    def test_requires_camel_core(self, tmp_path: Path) -> None:
        pom = PomModel(artifact_id="bundle", packaging="bundle")

        result = new_camel_context_xml(pom, tmp_path, "routes")

        assert not result.success
        assert result.message == "The project does not include camel-core"
        assert list(tmp_path.iterdir()) == []

    def test_requires_spring_or_blueprint(self, jar_pom: PomModel, tmp_path: Path) -> None:
        result = new_camel_context_xml(jar_pom, tmp_path, "routes")

        assert not result.success
        assert result.message == "The project must be a Spring or Blueprint project"

    def test_invalid_name(self, blueprint_camel_pom: PomModel, tmp_path: Path) -> None:
        result = new_camel_context_xml(blueprint_camel_pom, tmp_path, "a/b")

        assert not result.success
        assert "Invalid XML file name" in result.message

    def test_xml_file_name(self) -> None:
        assert xml_file_name("META-INF/spring/", "routes") == "META-INF/spring/routes.xml"
        assert xml_file_name(None, "routes.xml") == "routes.xml"
        with pytest.raises(ValidationFailure):
            xml_file_name(None, " ")


# =============================================================================
# Camel Artifact Tests
# =============================================================================

@pytest.fixture
def catalog() -> StaticCamelCatalog:
    """Catalog with one language and one data format."""
    return StaticCamelCatalog(
        languages=[CatalogEntry(name="groovy", artifact_id="camel-groovy")],
        dataformats=[CatalogEntry(name="json-jackson", artifact_id="camel-jackson")],
    )


class TestCamelArtifacts:
    """Tests for add_camel_dataformat and add_camel_language."""

    def test_add_dataformat(self, blueprint_camel_pom: PomModel, catalog: StaticCamelCatalog) -> None:
        """The artifact is added at camel-core's version, once."""
        first = add_camel_dataformat(blueprint_camel_pom, catalog, "json-jackson")
        second = add_camel_dataformat(blueprint_camel_pom, catalog, "json-jackson")

        assert first.success and first.changed
        assert first.message == "Added Camel dataformat json-jackson (camel-jackson) to the project"
        assert second.success and not second.changed
        assert blueprint_camel_pom.find_dependency("org.apache.camel", "camel-jackson").version == "2.16.0"

    def test_add_language(self, blueprint_camel_pom: PomModel, catalog: StaticCamelCatalog) -> None:
        result = add_camel_language(blueprint_camel_pom, catalog, "groovy")

        assert result.changed
        assert blueprint_camel_pom.find_dependency("org.apache.camel", "camel-groovy") is not None

    def test_unknown_entry(self, blueprint_camel_pom: PomModel, catalog: StaticCamelCatalog) -> None:
        result = add_camel_language(blueprint_camel_pom, catalog, "cobol")

        assert not result.success
        assert result.message == "Unknown Camel language"

    def test_requires_camel_core(self, war_pom: PomModel, catalog: StaticCamelCatalog) -> None:
        result = add_camel_dataformat(war_pom, catalog, "json-jackson")

        assert not result.success
        assert war_pom.dependencies == []
