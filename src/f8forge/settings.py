"""
f8forge.settings - Configuration
================================

Settings that are fixed per installation rather than per project: the Docker
organization, the fabric8 release to pin plugins to, the base image names
offered by the setup wizard and the versions of the site tooling.

Settings live in an ``f8forge.toml`` file under an ``[f8forge]`` table:

.. code-block:: toml

    [f8forge]
    docker_organization = "acme"
    fabric8_version = "2.2.101"

    [f8forge.images]
    java = "fabric8/java-jboss-openjdk8-jdk:1.0.10"

Every key is optional; missing keys keep their defaults. ``f8forge init-settings``
writes a file with all defaults filled in.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import tomlkit
from pydantic import BaseModel, Field, field_validator


SETTINGS_FILE_NAME = "f8forge.toml"
SETTINGS_TABLE = "f8forge"


class BaseImages(BaseModel):
    """
    Docker base images offered per packaging type.

    Attributes
    ----------
    java : str
        Default image for plain and executable JARs.

    s2i_java : str
        Source-to-image Java builder, the alternative JAR choice.

    karaf : str
        Image for OSGi bundles.

    tomcat : str
        First choice for WARs.

    wildfly : str
        Second choice for WARs.
    """

    java: str = "fabric8/java-jboss-openjdk8-jdk:1.0.10"
    s2i_java: str = "fabric8/s2i-java:1.2"
    karaf: str = "fabric8/karaf-2.4"
    tomcat: str = "fabric8/tomcat-8.0"
    wildfly: str = "jboss/wildfly:9.0.2.Final"

    @property
    def jar_images(self) -> list[str]:
        return [self.java, self.s2i_java]

    @property
    def bundle_images(self) -> list[str]:
        return [self.karaf]

    @property
    def war_images(self) -> list[str]:
        return [self.tomcat, self.wildfly]


class ForgeSettings(BaseModel):
    """
    Installation wide settings for the f8forge commands.

    Attributes
    ----------
    docker_organization : str
        Docker organization used in the generated ``docker.image`` name.

    fabric8_version : str
        Version of fabric8-maven-plugin and the fabric8-project BOM.

    dav_extension_version : str
        Version of the ``wagon-webdav-jackrabbit`` build extension.

    javadoc_plugin_version : str
        Version of the javadoc report plugin.

    site_url : str
        Site distribution URL written when the POM has none.

    images : BaseImages
        Base image choices.
    """

    docker_organization: str = Field(default="fabric8", min_length=1)
    fabric8_version: str = Field(default="2.2.101", min_length=1)
    dav_extension_version: str = "2.10"
    javadoc_plugin_version: str = "2.10.3"
    site_url: str = (
        "dav:http://content-repository/sites/"
        "${project.groupId}/${project.artifactId}/${project.version}"
    )
    images: BaseImages = Field(default_factory=BaseImages)

    @field_validator("docker_organization")
    @classmethod
    def normalize_organization(cls, v: str) -> str:
        """Docker repository names are lowercase."""
        return v.strip().lower()


def load_settings(path: Path | None = None) -> ForgeSettings:
    """
    Load settings from a TOML file.

    Parameters
    ----------
    path : Path | None
        Settings file. When None, ``f8forge.toml`` in the current directory
        is used if it exists.

    Returns
    -------
    ForgeSettings
        Validated settings; defaults when there is no file.

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist.
    pydantic.ValidationError
        If the file holds invalid values.
    """
    if path is None:
        path = Path.cwd() / SETTINGS_FILE_NAME
        if not path.exists():
            return ForgeSettings()
    elif not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")

    with path.open("rb") as f:
        data = tomllib.load(f)

    return ForgeSettings(**data.get(SETTINGS_TABLE, {}))


def write_settings(path: Path, settings: ForgeSettings | None = None) -> Path:
    """
    Write settings to ``path`` as an ``[f8forge]`` table.

    An existing file keeps its other tables and comments; only the
    ``[f8forge]`` table is replaced.
    """
    settings = settings or ForgeSettings()

    if path.exists():
        with path.open(encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()
        doc.add(tomlkit.comment("f8forge settings"))

    table = tomlkit.table()
    data = settings.model_dump()
    images = data.pop("images")
    for key, value in data.items():
        table.add(key, value)

    images_table = tomlkit.table()
    for key, value in images.items():
        images_table.add(key, value)
    table.add("images", images_table)

    doc[SETTINGS_TABLE] = table

    with path.open("w", encoding="utf-8") as f:
        f.write(tomlkit.dumps(doc))

    return path
