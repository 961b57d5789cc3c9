"""
f8forge.models - Pydantic Models for Projects, POMs and Endpoints
=================================================================

This module defines the data models used throughout f8forge. Pydantic gives us
validation of host-supplied data, JSON round-tripping of object model
snapshots for the CLI, and frozen snapshots where a value must not change
after it has been computed.

Architecture Notes
------------------
The models fall into three groups:

    Project snapshot
    ├── Packaging (enum)
    ├── ProjectFacts (frozen)
    └── InferredDefaults (frozen)

    Maven object model (mutable, owned by the host)
    └── PomModel
        ├── properties: dict[str, str]
        ├── dependencies / managed_dependencies: Dependency
        ├── plugins: MavenPlugin -> PluginExecution
        ├── profiles: MavenProfile
        ├── extensions: Extension
        ├── report_plugins: ReportPlugin
        └── distribution_management: DistributionManagement -> Site

    Scanning and catalogs
    ├── EndpointDetail
    └── CatalogEntry

f8forge never parses ``pom.xml``. A ``PomModel`` is handed over by the host
(or loaded from a JSON snapshot by the CLI) and the merger edits it in place.

Usage Example
-------------
>>> from f8forge.models import Packaging, PomModel
>>> pom = PomModel(artifact_id="demo", packaging="war")
>>> Packaging.parse(pom.packaging)
<Packaging.WAR: 'war'>
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enumerations
# =============================================================================

class Packaging(str, Enum):
    """
    Maven packaging types that drive the deployment defaults.

    Attributes
    ----------
    JAR : str
        Plain or executable JAR. Runs on a Java base image.

    WAR : str
        Web archive deployed into a servlet container.

    EAR : str
        Enterprise archive, treated like a WAR for port defaults.

    BUNDLE : str
        OSGi bundle deployed into Karaf.

    UNKNOWN : str
        No packaging declared, or one f8forge has no rules for.
    """

    JAR = "jar"
    WAR = "war"
    EAR = "ear"
    BUNDLE = "bundle"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> Packaging:
        """
        Map a raw ``<packaging>`` string onto the enum.

        Missing, blank and unrecognised values all become ``UNKNOWN``.

        Examples
        --------
        >>> Packaging.parse("WAR")
        <Packaging.WAR: 'war'>
        >>> Packaging.parse("pom")
        <Packaging.UNKNOWN: 'unknown'>
        """
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


# =============================================================================
# Maven Object Model
# =============================================================================

class Coordinate(BaseModel):
    """A bare ``groupId:artifactId:version`` triple, used for ``<parent>``."""

    group_id: str
    artifact_id: str
    version: str | None = None


class Dependency(BaseModel):
    """
    A ``<dependency>`` element.

    Attributes
    ----------
    group_id : str
        Maven groupId (e.g. ``org.apache.camel``).

    artifact_id : str
        Maven artifactId (e.g. ``camel-core``).

    version : str | None
        Explicit version, or None when managed elsewhere.

    scope : str | None
        Maven scope (``import`` for BOMs).

    type : str | None
        Dependency type (``pom`` for BOMs).
    """

    group_id: str
    artifact_id: str
    version: str | None = None
    scope: str | None = None
    type: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """The ``(groupId, artifactId)`` identity of the dependency."""
        return (self.group_id, self.artifact_id)


class PluginExecution(BaseModel):
    """An ``<execution>`` of a build plugin."""

    id: str
    phase: str | None = None
    goals: list[str] = Field(default_factory=list)


class MavenPlugin(BaseModel):
    """
    A ``<build><plugins><plugin>`` element.

    ``configuration`` is the plugin's ``<configuration>`` block as nested
    dictionaries, e.g. ``{"properties": {"swarm.http.port": "8081"}}``.
    """

    group_id: str
    artifact_id: str
    version: str | None = None
    executions: list[PluginExecution] = Field(default_factory=list)
    configuration: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)


class MavenProfile(BaseModel):
    """
    A ``<profile>`` element.

    Identity is the ``id``; a POM never holds two profiles with the same id.

    Attributes
    ----------
    id : str
        Profile id, e.g. ``f8-build``.

    properties : dict[str, str]
        Profile scoped properties.

    build_default_goal : str
        ``<build><defaultGoal>`` run when the profile is activated with
        a plain ``mvn -P<id>``.
    """

    id: str = Field(min_length=1)
    properties: dict[str, str] = Field(default_factory=dict)
    build_default_goal: str = ""


class Extension(BaseModel):
    """A ``<build><extensions><extension>`` element."""

    group_id: str
    artifact_id: str
    version: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)


class ReportPlugin(BaseModel):
    """A ``<reporting><plugins><plugin>`` element."""

    group_id: str
    artifact_id: str
    version: str | None = None
    configuration: dict[str, str] = Field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)


class Site(BaseModel):
    """The ``<site>`` of a distribution management section."""

    id: str | None = None
    url: str | None = None


class DistributionManagement(BaseModel):
    """A ``<distributionManagement>`` element (only the site matters here)."""

    site: Site | None = None


class PomModel(BaseModel):
    """
    In-memory Maven project object model supplied by the host.

    A thin mirror of the handful of POM sections the
    commands read or write. Collections are plain lists and dicts so the
    merger can edit them in place; the host persists the model afterwards.

    Attributes
    ----------
    group_id, artifact_id, version : str | None
        Project coordinates.

    packaging : str | None
        Raw ``<packaging>`` value (see ``Packaging.parse``).

    parent : Coordinate | None
        ``<parent>`` coordinates, if the POM inherits from one.

    properties : dict[str, str]
        ``<properties>``; insertion order is kept for stable diffs.

    dependencies, managed_dependencies : list[Dependency]
        Direct dependencies and ``<dependencyManagement>`` entries.

    plugins : list[MavenPlugin]
        Build plugins.

    profiles : list[MavenProfile]
        Build profiles.

    extensions : list[Extension]
        Build extensions.

    report_plugins : list[ReportPlugin]
        Reporting plugins.

    distribution_management : DistributionManagement | None
        Site distribution settings.
    """

    group_id: str | None = None
    artifact_id: str = Field(min_length=1)
    version: str | None = None
    packaging: str | None = None
    parent: Coordinate | None = None
    properties: dict[str, str] = Field(default_factory=dict)
    dependencies: list[Dependency] = Field(default_factory=list)
    managed_dependencies: list[Dependency] = Field(default_factory=list)
    plugins: list[MavenPlugin] = Field(default_factory=list)
    profiles: list[MavenProfile] = Field(default_factory=list)
    extensions: list[Extension] = Field(default_factory=list)
    report_plugins: list[ReportPlugin] = Field(default_factory=list)
    distribution_management: DistributionManagement | None = None

    def find_dependency(self, group_id: str, artifact_id: str) -> Dependency | None:
        """Return the direct dependency with the given coordinates, if any."""
        for dep in self.dependencies:
            if dep.key == (group_id, artifact_id):
                return dep
        return None

    def find_plugin(self, group_id: str, artifact_id: str) -> MavenPlugin | None:
        """Return the build plugin with the given coordinates, if any."""
        for plugin in self.plugins:
            if plugin.key == (group_id, artifact_id):
                return plugin
        return None

    def dependencies_in_group(self, group_id: str) -> list[Dependency]:
        return [d for d in self.dependencies if d.group_id == group_id]


# =============================================================================
# Project Snapshot
# =============================================================================

class ProjectFacts(BaseModel):
    """
    Immutable snapshot of the facts the inference engine decides on.

    A fresh snapshot is built for every command invocation (see
    ``f8forge.facts.facts_from_pom``); nothing outlives the call.

    Attributes
    ----------
    packaging : Packaging
        Project packaging.

    has_spring_boot : bool
        Any ``org.springframework.boot`` dependency, plugin or parent.

    has_spring_boot_web : bool
        ``spring-boot-starter-web`` is a dependency.

    has_wildfly_swarm : bool
        Any ``org.wildfly.swarm`` dependency or plugin.

    swarm_http_port : str | None
        ``swarm.http.port`` from the wildfly-swarm-plugin configuration.

    existing_properties : dict[str, str]
        POM properties at snapshot time.

    existing_profiles : frozenset[str]
        Ids of profiles already in the POM.

    existing_plugins : frozenset[tuple[str, str]]
        ``(groupId, artifactId)`` of build plugins already in the POM.

    artifact_id : str | None
        Project artifactId; the default Kubernetes service name.

    has_camel : bool
        Any ``org.apache.camel`` dependency.

    camel_version : str | None
        Version of ``camel-core``; None when camel-core is absent.

    has_vertx : bool
        Any ``io.vertx`` dependency.

    has_camel_blueprint, has_camel_spring : bool
        The project already depends on ``camel-blueprint`` / ``camel-spring``.

    has_parent : bool
        The POM declares a ``<parent>``.
    """

    model_config = ConfigDict(frozen=True)

    packaging: Packaging = Packaging.UNKNOWN
    has_spring_boot: bool = False
    has_spring_boot_web: bool = False
    has_wildfly_swarm: bool = False
    swarm_http_port: str | None = None
    existing_properties: dict[str, str] = Field(default_factory=dict)
    existing_profiles: frozenset[str] = frozenset()
    existing_plugins: frozenset[tuple[str, str]] = frozenset()
    artifact_id: str | None = None
    has_camel: bool = False
    has_camel_core: bool = False
    camel_version: str | None = None
    has_vertx: bool = False
    has_camel_blueprint: bool = False
    has_camel_spring: bool = False
    has_parent: bool = False

    @field_validator("packaging", mode="before")
    @classmethod
    def coerce_packaging(cls, v: Any) -> Any:
        """Accept raw packaging strings and fold unknown ones."""
        if isinstance(v, Packaging):
            return v
        if v is None or isinstance(v, str):
            return Packaging.parse(v)
        return v

    @property
    def docker_from_image(self) -> str | None:
        """The base image currently configured in the POM, if any."""
        value = self.existing_properties.get("docker.from", "").strip()
        return value or None

    @property
    def is_blueprint_project(self) -> bool:
        """Camel XML goes into ``OSGI-INF/blueprint``."""
        return self.packaging == Packaging.BUNDLE or self.has_camel_blueprint

    @property
    def is_spring_project(self) -> bool:
        """Camel XML goes into ``META-INF/spring``."""
        return self.has_camel_spring or self.has_spring_boot


class InferredDefaults(BaseModel):
    """
    Defaults derived from ``ProjectFacts``; never mutated once created.

    The first entry of ``default_base_image_choices`` is the preselected
    base image.
    """

    model_config = ConfigDict(frozen=True)

    default_service_port: str | None = None
    default_icon: str = "java"
    default_main_class: str | None = None
    default_container_name: str | None = None
    default_base_image_choices: tuple[str, ...] = ()


# =============================================================================
# Scanning and Catalogs
# =============================================================================

class EndpointDetail(BaseModel):
    """
    A Camel endpoint found in an XML file.

    Attributes
    ----------
    file_uri : str
        File the endpoint was found in, relative to the scanned root.

    line_number : int | None
        1-based line of the declaring element, when known.

    endpoint_uri : str
        The endpoint URI, e.g. ``timer:foo?period=5000``.

    endpoint_instance_name : str | None
        ``id`` of an ``<endpoint>`` declaration; None for route steps.
    """

    file_uri: str
    line_number: int | None = None
    endpoint_uri: str
    endpoint_instance_name: str | None = None

    @property
    def component_name(self) -> str | None:
        """URI scheme, i.e. the Camel component (``timer``, ``jms``...)."""
        scheme, sep, _ = self.endpoint_uri.partition(":")
        return scheme if sep else None


class CatalogEntry(BaseModel):
    """A language or data format offered by the Camel catalog."""

    name: str
    group_id: str = "org.apache.camel"
    artifact_id: str
    description: str | None = None
