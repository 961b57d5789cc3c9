"""
f8forge.commands - Project Setup Commands
=========================================

Each command is a plain function: it takes the project object model and the
user's choices explicitly, edits the model through ``f8forge.merger`` and
returns a ``CommandResult``. Nothing is injected and nothing is kept between
calls. The host (or the CLI) persists the model when ``result.changed`` is
True.

Commands
--------
- ``fabric8_setup``: Docker and Kubernetes metadata, fabric8-maven-plugin and
  the ``f8-*`` build profiles
- ``service_setup``: edit the Kubernetes service properties
- ``site_setup``: Maven site publishing over WebDAV
- ``new_camel_context_xml``: create a Spring or Blueprint CamelContext file
- ``add_camel_dataformat`` / ``add_camel_language``: add Camel artifacts
  aligned to the project's camel-core version

Failure Handling
----------------
Precondition failures are raised internally as ``ValidationFailure`` and come
back as ``CommandResult(success=False)`` with a one-line message. They are
always detected before the model or the file system is touched, so a failed
command leaves no partial state behind.

Usage Example
-------------
>>> from f8forge.models import PomModel
>>> pom = PomModel(artifact_id="demo", packaging="war")
>>> result = fabric8_setup(pom, Fabric8SetupOptions())
>>> result.message
'Added Fabric8 Maven support with base Docker image: fabric8/tomcat-8.0. ...'
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from f8forge.camel import camel_xml_directories, find_xml_files, scan_camel_files
from f8forge.catalog import CamelCatalog
from f8forge.errors import ValidationFailure
from f8forge.facts import CAMEL_GROUP_ID, SPRING_BOOT_GROUP_ID, facts_from_pom
from f8forge.inference import (
    ICON_CHOICES,
    canonicalize_service_name,
    derive_container_label_from_image,
    infer_default_icon,
    infer_defaults,
    infer_service_port,
    is_jar_image,
    main_class_applicable,
    readiness_probe_path,
)
from f8forge.merger import (
    FABRIC8_GROUP_ID,
    FABRIC8_PLUGIN_ARTIFACT_ID,
    FABRIC8_PROFILES,
    fabric8_bom,
    fabric8_maven_plugin,
    setup_site_plugin,
    upsert_dependency,
    upsert_fabric8_profiles,
    upsert_managed_dependency,
    upsert_plugin,
    upsert_properties,
    upsert_property,
)
from f8forge.models import CatalogEntry, Dependency, PomModel, ProjectFacts
from f8forge.rendering import JinjaTemplateRenderer, TemplateRenderer
from f8forge.settings import ForgeSettings


logger = logging.getLogger(__name__)

# A Java class name, or a ${maven.property} that resolves to one
_CLASS_NAME_OR_PROPERTY = re.compile(
    r"^(?:\$\{[\w.-]+\}|[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)$"
)

BLUEPRINT_DIRECTORY = "OSGI-INF/blueprint"
SPRING_DIRECTORY = "META-INF/spring"
RESOURCES_PATH = "src/main/resources"


# =============================================================================
# Result
# =============================================================================


@dataclass
class CommandResult:
    """
    Outcome of a command.

    Attributes
    ----------
    success : bool
        Whether the command did its job.

    message : str
        What changed, or the single-line reason for failing.

    changed : bool
        Whether the POM model was modified and should be persisted.

    files_created : list[Path]
        Files written to disk.
    """

    success: bool
    message: str
    changed: bool = False
    files_created: list[Path] = field(default_factory=list)

    @classmethod
    def fail(cls, message: str) -> CommandResult:
        return cls(success=False, message=message)


# =============================================================================
# Fabric8 Setup
# =============================================================================


class Fabric8SetupOptions(BaseModel):
    """
    User choices for ``fabric8_setup``. None means "use the inferred default".

    Attributes
    ----------
    organization : str | None
        Docker organization; defaults to ``ForgeSettings.docker_organization``.

    from_image : str | None
        Docker base image.

    main : str | None
        Java main class (or ``${property}``) for JAR images.

    container : str | None
        Container label; derived from the base image by default.

    group : str | None
        Group label.

    icon : str | None
        Console icon, one of ``ICON_CHOICES``.

    service : bool
        Create Kubernetes service properties when a service port is known.

    readiness_probe : bool
        Create readiness probe properties when a service port is known.

    profiles : bool
        Add the ``f8-build``, ``f8-deploy`` and ``f8-local-deploy`` profiles.

    import_bom : bool
        Import the fabric8-project BOM into dependency management.
    """

    organization: str | None = None
    from_image: str | None = None
    main: str | None = None
    container: str | None = None
    group: str | None = None
    icon: str | None = None
    service: bool = True
    readiness_probe: bool = True
    profiles: bool = True
    import_bom: bool = False

    @field_validator("main")
    @classmethod
    def validate_main(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip()
        if not _CLASS_NAME_OR_PROPERTY.match(v):
            msg = f"'{v}' is not a valid Java class name or Maven property expression"
            raise ValueError(msg)
        return v

    @field_validator("icon")
    @classmethod
    def validate_icon(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        if v not in ICON_CHOICES:
            msg = f"Unknown icon '{v}'. Choose one of: {', '.join(ICON_CHOICES)}"
            raise ValueError(msg)
        return v


def setup_docker_properties(
    pom: PomModel,
    facts: ProjectFacts,
    organization: str,
    from_image: str,
    main: str | None,
) -> bool:
    """
    Write the docker-maven-plugin properties.

    ``docker.env.MAIN`` is only written for JAR packaged projects running on
    a Java image; servlet containers and Karaf start the app themselves.
    """
    values = {
        "docker.from": from_image,
        "docker.image": f"{organization}/${{project.artifactId}}:${{project.version}}",
    }
    if main and main_class_applicable(facts) and is_jar_image(from_image):
        values["docker.env.MAIN"] = main
    return upsert_properties(pom.properties, values)


def setup_fabric8_properties(
    pom: PomModel,
    facts: ProjectFacts,
    service: bool,
    readiness_probe: bool,
    group: str | None,
    container: str | None,
    icon: str | None,
) -> bool:
    """
    Write the ``fabric8.*`` labels, service and readiness probe properties.

    Service and readiness probe properties need a service port; without one
    (e.g. a plain JAR) they are skipped silently.

    Returns
    -------
    bool
        True if any property changed.
    """
    properties = pom.properties
    updated = upsert_property(properties, "fabric8.label.container", container, False)
    if icon and icon.strip():
        updated = upsert_property(properties, "fabric8.iconRef", f"icons/{icon}", updated)
    updated = upsert_property(properties, "fabric8.label.group", group, updated)

    service_port = infer_service_port(facts)
    if service and service_port is not None:
        name = canonicalize_service_name(pom.artifact_id)
        updated = upsert_properties(properties, {
            "fabric8.service.containerPort": service_port,
            "fabric8.service.port": "80",
            "fabric8.service.name": name,
            "fabric8.service.type": "LoadBalancer",
        }, updated)

    if readiness_probe and service_port is not None:
        updated = upsert_properties(properties, {
            "fabric8.readinessProbe.httpGet.port": service_port,
            "fabric8.readinessProbe.httpGet.path": readiness_probe_path(facts),
            "fabric8.readinessProbe.timeoutSeconds": "30",
            "fabric8.readinessProbe.initialDelaySeconds": "5",
        }, updated)

    if updated:
        logger.debug("Updated fabric8 properties of %s", pom.artifact_id)
    return updated


def fabric8_setup(
    pom: PomModel,
    options: Fabric8SetupOptions,
    settings: ForgeSettings | None = None,
) -> CommandResult:
    """
    Configure Docker and fabric8 support for a project.

    Steps, each idempotent:

    1. Docker properties (base image, image name, main class).
    2. fabric8-maven-plugin, plus the fabric8 BOM when requested.
    3. Spring Boot actuator when a readiness probe will point at ``/health``.
    4. ``fabric8.*`` labels, service and readiness probe properties.
    5. The ``f8-*`` shortcut profiles, when requested.

    Parameters
    ----------
    pom : PomModel
        Project object model; edited in place.

    options : Fabric8SetupOptions
        User choices.

    settings : ForgeSettings | None
        Installation settings; defaults when None.

    Returns
    -------
    CommandResult
        Success with a summary, or failure when no base image can be chosen.
    """
    settings = settings or ForgeSettings()
    logger.debug("Starting to setup fabric8 project %s", pom.artifact_id)

    facts = facts_from_pom(pom)
    defaults = infer_defaults(facts, settings)

    from_image = options.from_image
    if not from_image and defaults.default_base_image_choices:
        from_image = defaults.default_base_image_choices[0]
    if not from_image:
        return CommandResult.fail(
            f"Cannot choose a Docker base image for packaging '{facts.packaging.value}'; "
            "specify one explicitly"
        )

    organization = options.organization or settings.docker_organization
    main = options.main if options.main is not None else defaults.default_main_class
    container = options.container or derive_container_label_from_image(from_image)
    icon = options.icon or infer_default_icon(facts, container)

    changed = setup_docker_properties(pom, facts, organization, from_image, main)
    changed = upsert_plugin(pom.plugins, fabric8_maven_plugin(settings.fabric8_version)) or changed
    logger.debug("fabric8-maven-plugin now setup")
    if options.import_bom:
        changed = upsert_managed_dependency(pom, fabric8_bom(settings.fabric8_version)) or changed

    if options.readiness_probe and defaults.default_service_port is not None and facts.has_spring_boot:
        actuator = Dependency(group_id=SPRING_BOOT_GROUP_ID, artifact_id="spring-boot-starter-actuator")
        changed = upsert_dependency(pom.dependencies, actuator) or changed

    logger.debug("setting up fabric8 properties")
    changed = setup_fabric8_properties(
        pom,
        facts,
        service=options.service,
        readiness_probe=options.readiness_probe,
        group=options.group,
        container=container,
        icon=icon,
    ) or changed

    message = f"Added Fabric8 Maven support with base Docker image: {from_image}"
    if options.profiles:
        logger.debug("setting up fabric8 maven profiles")
        added = upsert_fabric8_profiles(pom)
        changed = changed or bool(added)
        if added:
            message += (
                f". Added the following Maven profiles [{', '.join(added)}] to make "
                "building the project easier, e.g. mvn -Pf8-local-deploy"
            )
        else:
            message += f". Maven profiles [{', '.join(FABRIC8_PROFILES)}] already present"

    return CommandResult(success=True, message=message, changed=changed)


# =============================================================================
# Kubernetes Service
# =============================================================================


class ServiceOptions(BaseModel):
    """Kubernetes service settings; None leaves the current value alone."""

    name: str | None = Field(default=None, min_length=1, max_length=24)
    port: int | None = Field(default=None, ge=0, le=65535)
    container_port: int | None = Field(default=None, ge=0, le=65535)


def _int_property(properties: dict[str, str], key: str) -> int | None:
    value = properties.get(key, "").strip()
    return int(value) if value.isdigit() else None


def service_setup_defaults(pom: PomModel) -> ServiceOptions:
    """Current service settings, for prefilling prompts."""
    properties = pom.properties
    name = properties.get("fabric8.service.name", "").strip() or None
    return ServiceOptions.model_construct(
        name=name,
        port=_int_property(properties, "fabric8.service.port"),
        container_port=_int_property(properties, "fabric8.service.containerPort"),
    )


def service_setup(pom: PomModel, options: ServiceOptions) -> CommandResult:
    """
    Add or update the Kubernetes service properties.

    Only fabric8 projects (those using the fabric8-maven-plugin) have a
    service to edit; others fail and are left untouched.
    """
    if pom.find_plugin(FABRIC8_GROUP_ID, FABRIC8_PLUGIN_ARTIFACT_ID) is None:
        return CommandResult.fail(
            "The project does not use the fabric8-maven-plugin; run the fabric8 setup first"
        )

    values = {
        "fabric8.service.name": options.name,
        "fabric8.service.port": None if options.port is None else str(options.port),
        "fabric8.service.containerPort": (
            None if options.container_port is None else str(options.container_port)
        ),
    }
    changed = upsert_properties(pom.properties, values)
    message = "Kubernetes service updated" if changed else "Kubernetes service unchanged"
    return CommandResult(success=True, message=message, changed=changed)


# =============================================================================
# Maven Site
# =============================================================================


def site_setup(pom: PomModel, settings: ForgeSettings | None = None) -> CommandResult:
    """Add the WebDAV wagon, javadoc report and site distribution if missing."""
    changed = setup_site_plugin(pom, settings)
    message = (
        "Configured Maven site publishing" if changed
        else "Maven site publishing already configured"
    )
    return CommandResult(success=True, message=message, changed=changed)


# =============================================================================
# CamelContext XML
# =============================================================================


def default_xml_directory(facts: ProjectFacts, existing_directories: set[str]) -> str | None:
    """
    Directory to offer for a new CamelContext file.

    A single directory already holding Camel XML wins; otherwise the
    convention for the project flavour.
    """
    if len(existing_directories) == 1:
        return next(iter(existing_directories))
    if facts.is_blueprint_project:
        return BLUEPRINT_DIRECTORY
    if facts.is_spring_project:
        return SPRING_DIRECTORY
    return None


def xml_file_name(directory: str | None, name: str) -> str:
    """
    Resource path of the new file, e.g. ``META-INF/spring/routes.xml``.

    Raises
    ------
    ValidationFailure
        If ``name`` is blank or contains a path separator.
    """
    name = name.strip()
    if not name or "/" in name or "\\" in name:
        raise ValidationFailure(f"Invalid XML file name '{name}'")
    if not name.endswith(".xml"):
        name += ".xml"
    directory = (directory or "").strip().strip("/")
    return f"{directory}/{name}" if directory else name


def existing_xml_directories(resources_dir: Path) -> set[str]:
    """Directories below ``resources_dir`` that already hold Camel XML files."""
    files = scan_camel_files(find_xml_files(resources_dir), resources_dir)
    return camel_xml_directories(files)


def new_camel_context_xml(
    pom: PomModel,
    resources_dir: Path,
    name: str,
    directory: str | None = None,
    project_name: str | None = None,
    renderer: TemplateRenderer | None = None,
) -> CommandResult:
    """
    Create a new XML file holding a CamelContext.

    Blueprint projects (bundle packaging or camel-blueprint) get a Blueprint
    file, Spring projects (camel-spring or Spring Boot) a Spring XML file.
    The matching Camel artifact is added at camel-core's version if missing.

    Parameters
    ----------
    pom : PomModel
        Project object model; may gain a dependency.

    resources_dir : Path
        The project's ``src/main/resources`` directory.

    name : str
        File name; ``.xml`` is appended when missing.

    directory : str | None
        Directory relative to ``resources_dir``; inferred when None.

    project_name : str | None
        Used as the CamelContext id; the artifactId when None.

    renderer : TemplateRenderer | None
        Template renderer; the packaged Jinja2 templates when None.

    Returns
    -------
    CommandResult
        Failure if the file exists, camel-core is missing or the project is
        neither a Spring nor a Blueprint project.
    """
    facts = facts_from_pom(pom)
    if directory is None:
        directory = default_xml_directory(facts, existing_xml_directories(resources_dir))

    try:
        if facts.is_blueprint_project:
            flavour = "blueprint"
        elif facts.is_spring_project:
            flavour = "spring"
        else:
            raise ValidationFailure("The project must be a Spring or Blueprint project")

        file_name = xml_file_name(directory, name)
        full_name = f"{RESOURCES_PATH}/{file_name}"
        target = resources_dir / file_name
        if target.exists():
            raise ValidationFailure(f"XML file {full_name} already exists")

        core = pom.find_dependency(CAMEL_GROUP_ID, "camel-core")
        if core is None:
            raise ValidationFailure("The project does not include camel-core")
    except ValidationFailure as e:
        return CommandResult.fail(str(e))

    renderer = renderer or JinjaTemplateRenderer()
    output = renderer.render(f"camel-{flavour}.xml", {"projectName": project_name or pom.artifact_id})

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(output, encoding="utf-8")
    logger.info("Created %s", target)

    dependency = Dependency(group_id=CAMEL_GROUP_ID, artifact_id=f"camel-{flavour}", version=core.version)
    changed = upsert_dependency(pom.dependencies, dependency)

    return CommandResult(
        success=True,
        message=f"Created new XML file {full_name}",
        changed=changed,
        files_created=[target],
    )


# =============================================================================
# Camel Languages and Data Formats
# =============================================================================


def _add_camel_artifact(
    pom: PomModel,
    kind: str,
    entry_name: str,
    lookup: Callable[[str], CatalogEntry | None],
) -> CommandResult:
    core = pom.find_dependency(CAMEL_GROUP_ID, "camel-core")
    if core is None:
        return CommandResult.fail("The project does not include camel-core")

    entry = lookup(entry_name)
    if entry is None:
        return CommandResult.fail(f"Unknown Camel {kind}")

    # same version as camel-core
    dependency = Dependency(group_id=entry.group_id, artifact_id=entry.artifact_id, version=core.version)
    if not upsert_dependency(pom.dependencies, dependency):
        return CommandResult(
            success=True,
            message=f"Camel {kind} {entry.name} ({entry.artifact_id}) is already in the project",
        )
    return CommandResult(
        success=True,
        message=f"Added Camel {kind} {entry.name} ({entry.artifact_id}) to the project",
        changed=True,
    )


def add_camel_dataformat(pom: PomModel, catalog: CamelCatalog, name: str) -> CommandResult:
    """Add the artifact providing data format ``name``."""
    return _add_camel_artifact(pom, "dataformat", name, catalog.dataformat)


def add_camel_language(pom: PomModel, catalog: CamelCatalog, name: str) -> CommandResult:
    """Add the artifact providing language ``name``."""
    return _add_camel_artifact(pom, "language", name, catalog.language)
