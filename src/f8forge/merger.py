"""
f8forge.merger - Idempotent Model Merger
========================================

Find-or-create edits on a ``PomModel``. Every function here leaves existing
entries alone and reports whether it changed anything, so running a command
twice yields the same POM and the second run reports no change. The caller
persists the model once, and only when the accumulated flag is true.

Property upserts thread a ``dirty`` flag through a batch:

>>> props = {}
>>> dirty = upsert_property(props, "fabric8.service.port", "80", False)
>>> dirty = upsert_property(props, "fabric8.service.type", "LoadBalancer", dirty)
>>> dirty
True
>>> upsert_property(props, "fabric8.service.port", "80", False)
False

The merger never raises for missing optional values. It raises
``ContractViolation`` only when handed ``None`` instead of a collection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, MutableMapping

from f8forge.errors import ContractViolation
from f8forge.models import (
    Dependency,
    DistributionManagement,
    Extension,
    MavenPlugin,
    MavenProfile,
    PluginExecution,
    PomModel,
    ReportPlugin,
    Site,
)
from f8forge.settings import ForgeSettings


logger = logging.getLogger(__name__)


# =============================================================================
# Well-known Coordinates
# =============================================================================

FABRIC8_GROUP_ID = "io.fabric8"
FABRIC8_PLUGIN_ARTIFACT_ID = "fabric8-maven-plugin"
FABRIC8_BOM_ARTIFACT_ID = "fabric8-project"

EXTENSION_DAV_GROUP_ID = "org.apache.maven.wagon"
EXTENSION_DAV_ARTIFACT_ID = "wagon-webdav-jackrabbit"

PLUGIN_JAVADOC_GROUP_ID = "org.apache.maven.plugins"
PLUGIN_JAVADOC_ARTIFACT_ID = "maven-javadoc-plugin"
JAVADOC_REPORT_CONFIGURATION = {
    "detectLinks": "true",
    "detectJavaApiLink": "true",
    "linksource": "true",
}

SITE_ID = "website"


def _require(container: object, name: str) -> None:
    if container is None:
        raise ContractViolation(f"{name} must not be None")


# =============================================================================
# Properties
# =============================================================================

def upsert_property(
    props: MutableMapping[str, str],
    key: str,
    desired: str | None,
    dirty: bool,
) -> bool:
    """
    Set ``props[key]`` to ``desired`` unless it already holds that value.

    Parameters
    ----------
    props : MutableMapping[str, str]
        The POM's properties.

    key : str
        Property name.

    desired : str | None
        Wanted value. None or blank means "no opinion" and nothing is written.

    dirty : bool
        Flag accumulated over the batch so far.

    Returns
    -------
    bool
        ``dirty`` unchanged when nothing was written, else True.

    Raises
    ------
    ContractViolation
        If ``props`` is None.
    """
    _require(props, "props")
    if desired is None or not desired.strip():
        return dirty
    if props.get(key) == desired:
        return dirty
    props[key] = desired
    return True


def upsert_properties(
    props: MutableMapping[str, str],
    values: Mapping[str, str | None],
    dirty: bool = False,
) -> bool:
    """Apply ``upsert_property`` for each entry of ``values``, in order."""
    _require(props, "props")
    for key, value in values.items():
        dirty = upsert_property(props, key, value, dirty)
    return dirty


# =============================================================================
# Profiles
# =============================================================================

def find_profile(profiles: list[MavenProfile], profile_id: str) -> MavenProfile | None:
    _require(profiles, "profiles")
    for profile in profiles:
        if profile.id == profile_id:
            return profile
    return None


def upsert_profile(
    profiles: list[MavenProfile],
    profile_id: str,
    builder: Callable[[], MavenProfile],
) -> bool:
    """
    Append the profile built by ``builder`` unless ``profile_id`` exists.

    An existing profile is never touched, even if its definition differs
    from what ``builder`` would produce.

    Returns
    -------
    bool
        True if a profile was added.
    """
    if find_profile(profiles, profile_id) is not None:
        logger.debug("Profile %s already present", profile_id)
        return False
    profile = builder()
    if profile.id != profile_id:
        raise ContractViolation(
            f"Builder for profile {profile_id} produced profile {profile.id}"
        )
    profiles.append(profile)
    logger.debug("Added profile %s", profile_id)
    return True


def _f8_build_profile() -> MavenProfile:
    return MavenProfile(
        id="f8-build",
        build_default_goal="clean install docker:build fabric8:json",
    )


def _f8_deploy_profile() -> MavenProfile:
    return MavenProfile(
        id="f8-deploy",
        properties={
            "fabric8.imagePullPolicySnapshot": "Always",
            "fabric8.recreate": "true",
        },
        build_default_goal="clean install docker:build docker:push fabric8:json fabric8:apply",
    )


def _f8_local_deploy_profile() -> MavenProfile:
    return MavenProfile(
        id="f8-local-deploy",
        properties={"fabric8.recreate": "true"},
        build_default_goal="clean install docker:build fabric8:json fabric8:apply",
    )


# Shortcut profiles so `mvn -Pf8-local-deploy` builds and deploys in one go
FABRIC8_PROFILES: dict[str, Callable[[], MavenProfile]] = {
    "f8-build": _f8_build_profile,
    "f8-deploy": _f8_deploy_profile,
    "f8-local-deploy": _f8_local_deploy_profile,
}


def upsert_fabric8_profiles(pom: PomModel) -> list[str]:
    """
    Add whichever of the three fabric8 profiles are missing.

    Returns
    -------
    list[str]
        Ids of the profiles that were added, in definition order.
    """
    return [
        profile_id
        for profile_id, builder in FABRIC8_PROFILES.items()
        if upsert_profile(pom.profiles, profile_id, builder)
    ]


# =============================================================================
# Build Plugins, Extensions and Dependencies
# =============================================================================

def upsert_plugin(plugins: list[MavenPlugin], plugin: MavenPlugin) -> bool:
    """Add ``plugin`` unless a plugin with the same coordinates exists."""
    _require(plugins, "plugins")
    for existing in plugins:
        if existing.key == plugin.key:
            logger.info("Found existing %s", plugin.artifact_id)
            return False
    logger.info("Adding %s", plugin.artifact_id)
    plugins.append(plugin)
    return True


def fabric8_maven_plugin(version: str) -> MavenPlugin:
    """fabric8-maven-plugin generating ``kubernetes.json`` and attaching it."""
    return MavenPlugin(
        group_id=FABRIC8_GROUP_ID,
        artifact_id=FABRIC8_PLUGIN_ARTIFACT_ID,
        version=version,
        executions=[
            PluginExecution(id="json", phase="generate-resources", goals=["json"]),
            PluginExecution(id="attach", phase="package", goals=["attach"]),
        ],
    )


def upsert_extension(
    extensions: list[Extension],
    group_id: str,
    artifact_id: str,
    version: str | None = None,
) -> bool:
    """Add a build extension unless one with the same coordinates exists."""
    _require(extensions, "extensions")
    for extension in extensions:
        if extension.key == (group_id, artifact_id):
            return False
    extensions.append(Extension(group_id=group_id, artifact_id=artifact_id, version=version))
    return True


def upsert_report_plugin(
    report_plugins: list[ReportPlugin],
    group_id: str,
    artifact_id: str,
    version: str | None = None,
    configuration: Mapping[str, str] | None = None,
) -> bool:
    """Add a reporting plugin unless one with the same coordinates exists."""
    _require(report_plugins, "report_plugins")
    for plugin in report_plugins:
        if plugin.key == (group_id, artifact_id):
            return False
    report_plugins.append(
        ReportPlugin(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            configuration=dict(configuration or {}),
        )
    )
    return True


def upsert_dependency(dependencies: list[Dependency], dependency: Dependency) -> bool:
    """
    Add ``dependency`` unless its ``(groupId, artifactId)`` is already declared.

    The version of an existing declaration is left as it is.
    """
    _require(dependencies, "dependencies")
    for existing in dependencies:
        if existing.key == dependency.key:
            return False
    dependencies.append(dependency)
    logger.debug("Added dependency %s:%s", dependency.group_id, dependency.artifact_id)
    return True


def upsert_managed_dependency(pom: PomModel, dependency: Dependency) -> bool:
    """``upsert_dependency`` against ``<dependencyManagement>``."""
    return upsert_dependency(pom.managed_dependencies, dependency)


def fabric8_bom(version: str) -> Dependency:
    """The fabric8-project BOM import."""
    return Dependency(
        group_id=FABRIC8_GROUP_ID,
        artifact_id=FABRIC8_BOM_ARTIFACT_ID,
        version=version,
        type="pom",
        scope="import",
    )


# =============================================================================
# Site Distribution
# =============================================================================

def upsert_site_distribution(pom: PomModel, site_url: str) -> bool:
    """
    Make sure the POM says where ``mvn site-deploy`` publishes to.

    A ``<distributionManagement>`` section is only created when the POM has
    no parent, since it usually lives once in a shared parent POM. Within an
    existing section only a blank site id or URL is filled in.
    """
    distribution = pom.distribution_management
    if distribution is None:
        if pom.parent is not None:
            return False
        distribution = DistributionManagement()
        pom.distribution_management = distribution

    changed = False
    if distribution.site is None:
        distribution.site = Site()
    site = distribution.site
    if not site.id or not site.id.strip():
        site.id = SITE_ID
        changed = True
    if not site.url or not site.url.strip():
        site.url = site_url
        changed = True
    return changed


def setup_site_plugin(pom: PomModel, settings: ForgeSettings | None = None) -> bool:
    """
    Prepare a POM for publishing its Maven site over WebDAV.

    Adds the WebDAV wagon extension, the javadoc report and the site
    distribution, each only if missing.

    Returns
    -------
    bool
        True if the model changed and should be persisted.
    """
    settings = settings or ForgeSettings()
    changed = upsert_extension(
        pom.extensions,
        EXTENSION_DAV_GROUP_ID,
        EXTENSION_DAV_ARTIFACT_ID,
        settings.dav_extension_version,
    )
    changed = upsert_report_plugin(
        pom.report_plugins,
        PLUGIN_JAVADOC_GROUP_ID,
        PLUGIN_JAVADOC_ARTIFACT_ID,
        settings.javadoc_plugin_version,
        JAVADOC_REPORT_CONFIGURATION,
    ) or changed
    changed = upsert_site_distribution(pom, settings.site_url) or changed
    return changed
