"""Build ``ProjectFacts`` snapshots from a host supplied ``PomModel``."""

from __future__ import annotations

import logging

from f8forge.models import Packaging, PomModel, ProjectFacts


logger = logging.getLogger(__name__)

SPRING_BOOT_GROUP_ID = "org.springframework.boot"
SPRING_BOOT_WEB_ARTIFACT_ID = "spring-boot-starter-web"
WILDFLY_SWARM_GROUP_ID = "org.wildfly.swarm"
WILDFLY_SWARM_PLUGIN_ARTIFACT_ID = "wildfly-swarm-plugin"
CAMEL_GROUP_ID = "org.apache.camel"
VERTX_GROUP_ID = "io.vertx"


def has_spring_boot(pom: PomModel) -> bool:
    """Spring Boot parent, dependency or plugin."""
    if pom.parent is not None and pom.parent.group_id == SPRING_BOOT_GROUP_ID:
        return True
    if pom.dependencies_in_group(SPRING_BOOT_GROUP_ID):
        return True
    return any(p.group_id == SPRING_BOOT_GROUP_ID for p in pom.plugins)


def has_spring_boot_web(pom: PomModel) -> bool:
    return pom.find_dependency(SPRING_BOOT_GROUP_ID, SPRING_BOOT_WEB_ARTIFACT_ID) is not None


def has_wildfly_swarm(pom: PomModel) -> bool:
    if pom.dependencies_in_group(WILDFLY_SWARM_GROUP_ID):
        return True
    return any(p.group_id == WILDFLY_SWARM_GROUP_ID for p in pom.plugins)


def swarm_http_port(pom: PomModel) -> str | None:
    """
    ``swarm.http.port`` from the wildfly-swarm-plugin configuration.

    Blank values count as absent; anything else is returned verbatim.
    """
    plugin = pom.find_plugin(WILDFLY_SWARM_GROUP_ID, WILDFLY_SWARM_PLUGIN_ARTIFACT_ID)
    if plugin is None:
        return None
    properties = plugin.configuration.get("properties")
    if not isinstance(properties, dict):
        return None
    port = properties.get("swarm.http.port")
    if port is None or not str(port).strip():
        return None
    return str(port)


def facts_from_pom(pom: PomModel) -> ProjectFacts:
    """
    Take a snapshot of everything the inference engine needs.

    Parameters
    ----------
    pom : PomModel
        The current object model. It is only read.

    Returns
    -------
    ProjectFacts
        A frozen snapshot; later edits to ``pom`` do not show through.
    """
    camel_core = pom.find_dependency(CAMEL_GROUP_ID, "camel-core")
    facts = ProjectFacts(
        packaging=Packaging.parse(pom.packaging),
        has_spring_boot=has_spring_boot(pom),
        has_spring_boot_web=has_spring_boot_web(pom),
        has_wildfly_swarm=has_wildfly_swarm(pom),
        swarm_http_port=swarm_http_port(pom),
        existing_properties=dict(pom.properties),
        existing_profiles=frozenset(p.id for p in pom.profiles),
        existing_plugins=frozenset(p.key for p in pom.plugins),
        artifact_id=pom.artifact_id,
        has_camel=bool(pom.dependencies_in_group(CAMEL_GROUP_ID)),
        has_camel_core=camel_core is not None,
        camel_version=camel_core.version if camel_core is not None else None,
        has_vertx=bool(pom.dependencies_in_group(VERTX_GROUP_ID)),
        has_camel_blueprint=pom.find_dependency(CAMEL_GROUP_ID, "camel-blueprint") is not None,
        has_camel_spring=pom.find_dependency(CAMEL_GROUP_ID, "camel-spring") is not None,
        has_parent=pom.parent is not None,
    )
    logger.debug("Project facts for %s: %s", pom.artifact_id, facts)
    return facts
