"""
f8forge.inference - Default Inference Engine
============================================

Pure functions that turn a ``ProjectFacts`` snapshot into the defaults the
setup wizard preselects: Kubernetes service port, icon, Docker base image,
container label and Java main class.

Nothing here raises for missing data. When there is no confident answer the
functions return None and the caller either prompts or skips the feature
that needs the value (e.g. no service port means no Kubernetes service).

Usage Example
-------------
>>> from f8forge.models import ProjectFacts
>>> facts = ProjectFacts(packaging="war")
>>> infer_service_port(facts)
'8080'
>>> infer_defaults(facts).default_base_image_choices
('fabric8/tomcat-8.0', 'jboss/wildfly:9.0.2.Final')
"""

from __future__ import annotations

import logging

from f8forge.models import InferredDefaults, Packaging, ProjectFacts
from f8forge.settings import ForgeSettings


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Icons known to the fabric8 console, in the order they are offered
ICON_CHOICES: tuple[str, ...] = (
    "activemq",
    "camel",
    "java",
    "jetty",
    "karaf",
    "mule",
    "spring-boot",
    "tomcat",
    "tomee",
    "vertx",
    "weld",
    "wildfly",
)

DEFAULT_ICON = "java"
DEFAULT_WEB_PORT = "8080"

# Kubernetes/OpenShift limit on service names
MAX_SERVICE_NAME_LENGTH = 24

MAIN_CLASS_PROPERTIES = ("docker.env.MAIN", "start-class")


# =============================================================================
# Service Port
# =============================================================================

def infer_service_port(facts: ProjectFacts) -> str | None:
    """
    Determine the port the application listens on inside the container.

    Rules, first match wins:

    1. WildFly Swarm with a non-blank ``swarm.http.port``: that value, verbatim.
    2. WAR or EAR packaging: ``8080``.
    3. Spring Boot web starter: ``8080``.
    4. Otherwise None. Karaf is not assumed to listen on 8181 because the web
       feature is not installed by default.

    Parameters
    ----------
    facts : ProjectFacts
        Project snapshot.

    Returns
    -------
    str | None
        The port as a string, or None when there is no confident default.
    """
    if facts.has_wildfly_swarm and facts.swarm_http_port and facts.swarm_http_port.strip():
        return facts.swarm_http_port
    if facts.packaging in (Packaging.WAR, Packaging.EAR):
        return DEFAULT_WEB_PORT
    if facts.has_spring_boot_web:
        return DEFAULT_WEB_PORT
    return None


def readiness_probe_path(facts: ProjectFacts) -> str:
    """HTTP path of the readiness probe: the actuator health endpoint for Spring Boot."""
    return "/health" if facts.has_spring_boot else "/"


def canonicalize_service_name(name: str, max_length: int = MAX_SERVICE_NAME_LENGTH) -> str:
    """
    Clip a Kubernetes service name to ``max_length`` characters.

    The cut is a plain prefix, so the result is deterministic. Clipping is
    logged as a warning because the user ends up with a different name than
    the artifactId they may expect.

    Examples
    --------
    >>> canonicalize_service_name("short-name")
    'short-name'
    >>> len(canonicalize_service_name("a-really-long-artifact-id-here"))
    24
    """
    if len(name) <= max_length:
        return name
    logger.warning(
        "The fabric8.service.name: %s is being limited to max %d chars as that is "
        "required by Kubernetes/Openshift. You can change the name of the service "
        "in the <properties> section of the Maven pom file.",
        name,
        max_length,
    )
    return name[:max_length]


# =============================================================================
# Icon
# =============================================================================

def infer_default_icon(facts: ProjectFacts, container: str | None = None) -> str:
    """
    Pick the console icon for the app.

    Camel wins over everything since it says most about what the app does,
    then the popular runtimes, then a container label that names a known
    icon, then ``java``.

    Parameters
    ----------
    facts : ProjectFacts
        Project snapshot.

    container : str | None
        Container label chosen so far (see ``derive_container_label_from_image``).

    Returns
    -------
    str
        One of ``ICON_CHOICES``.
    """
    if facts.has_camel:
        return "camel"
    if facts.has_spring_boot:
        return "spring-boot"
    if facts.has_vertx:
        return "vertx"
    if container is not None and container in ICON_CHOICES:
        return container
    return DEFAULT_ICON


# =============================================================================
# Docker Base Image
# =============================================================================

def infer_base_image_choices(
    facts: ProjectFacts,
    settings: ForgeSettings | None = None,
) -> list[str]:
    """
    List the base images that fit the project's packaging.

    The first entry is the preselected default, so order matters. When the
    packaging is unknown every family is offered.

    - JAR, unknown or Spring Boot: the currently configured ``docker.from``
      image if there is one, else the Java images.
    - bundle or unknown: the Karaf image.
    - WAR or unknown, unless Spring Boot: the servlet container images.

    Parameters
    ----------
    facts : ProjectFacts
        Project snapshot.

    settings : ForgeSettings | None
        Supplies the image names; defaults when None.

    Returns
    -------
    list[str]
        Image names in preference order.
    """
    images = (settings or ForgeSettings()).images
    packaging = facts.packaging
    unknown = packaging == Packaging.UNKNOWN
    choices: list[str] = []

    if unknown or facts.has_spring_boot or packaging == Packaging.JAR:
        current = facts.docker_from_image
        if current is not None:
            choices.append(current)
        else:
            choices.extend(images.jar_images)
    if unknown or packaging == Packaging.BUNDLE:
        choices.extend(images.bundle_images)
    if not facts.has_spring_boot and (unknown or packaging == Packaging.WAR):
        choices.extend(images.war_images)

    return choices


def derive_container_label_from_image(image: str) -> str:
    """
    Turn a Docker image name into a short container label.

    Drops the registry/organization prefix up to the last ``/`` and the
    ``:tag`` suffix, then cuts at the first ``-``. Label values
    may not contain ``:``.

    Examples
    --------
    >>> derive_container_label_from_image("fabric8/java-jboss-openjdk8-jdk:1.0")
    'java'
    >>> derive_container_label_from_image("jboss/wildfly:9.0.2.Final")
    'wildfly'
    >>> derive_container_label_from_image("plainname")
    'plainname'
    """
    if not image:
        return image
    label = image
    idx = label.rfind("/")
    if 0 < idx < len(label) - 1:
        label = label[idx + 1:]
    idx = label.find(":")
    if idx > 0:
        label = label[:idx]
    idx = label.find("-")
    if idx > 0:
        label = label[:idx]
    return label


def is_jar_image(image: str | None) -> bool:
    """Whether the image runs a plain Java main class (so a main class applies)."""
    if not image:
        return False
    name = image.lower()
    return "java" in name or "s2i" in name


# =============================================================================
# Main Class
# =============================================================================

def main_class_applicable(facts: ProjectFacts) -> bool:
    """WARs and EARs are started by their container, never by a main class."""
    return facts.packaging not in (Packaging.WAR, Packaging.EAR)


def infer_default_main_class(facts: ProjectFacts) -> str | None:
    """The main class already configured for Docker or Spring Boot, if any."""
    if not main_class_applicable(facts):
        return None
    for key in MAIN_CLASS_PROPERTIES:
        value = facts.existing_properties.get(key, "").strip()
        if value:
            return value
    return None


# =============================================================================
# All Defaults
# =============================================================================

def infer_defaults(
    facts: ProjectFacts,
    settings: ForgeSettings | None = None,
) -> InferredDefaults:
    """
    Compute every default in one go.

    The container label comes from the preselected base image and feeds
    into the icon choice, mirroring how the wizard chains the fields.
    """
    choices = infer_base_image_choices(facts, settings)
    container = derive_container_label_from_image(choices[0]) if choices else None

    return InferredDefaults(
        default_service_port=infer_service_port(facts),
        default_icon=infer_default_icon(facts, container),
        default_main_class=infer_default_main_class(facts),
        default_container_name=container,
        default_base_image_choices=tuple(choices),
    )
