"""
pytest configuration and shared fixtures for f8forge tests.

Fixtures
--------
war_pom, jar_pom, spring_boot_pom, swarm_pom, blueprint_camel_pom : PomModel
    Object models for the common project shapes.

resources_dir : Path
    A ``src/main/resources`` directory with one Camel route file and one
    plain Spring beans file.
"""

import textwrap
from pathlib import Path

import pytest

from f8forge.models import Coordinate, Dependency, MavenPlugin, PomModel


SPRING_CAMEL_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <beans xmlns="http://www.springframework.org/schema/beans">
      <camelContext id="demo" xmlns="http://camel.apache.org/schema/spring">
        <endpoint id="ticker" uri="timer:tick?period=1000"/>
        <route id="first">
          <from uri="ref:ticker"/>
          <to uri="log:demo"/>
        </route>
      </camelContext>
    </beans>
""")

PLAIN_BEANS_XML = textwrap.dedent("""\
    <?xml version="1.0" encoding="UTF-8"?>
    <beans xmlns="http://www.springframework.org/schema/beans">
      <bean id="greeter" class="com.example.Greeter"/>
    </beans>
""")


@pytest.fixture
def war_pom() -> PomModel:
    """A WAR project without any frameworks."""
    return PomModel(group_id="com.example", artifact_id="webapp", version="1.0", packaging="war")


@pytest.fixture
def jar_pom() -> PomModel:
    """A plain JAR project."""
    return PomModel(group_id="com.example", artifact_id="tool", version="1.0", packaging="jar")


@pytest.fixture
def spring_boot_pom() -> PomModel:
    """A Spring Boot web application."""
    return PomModel(
        group_id="com.example",
        artifact_id="boot-app",
        version="1.0",
        packaging="jar",
        parent=Coordinate(
            group_id="org.springframework.boot",
            artifact_id="spring-boot-starter-parent",
            version="1.3.5.RELEASE",
        ),
        dependencies=[
            Dependency(group_id="org.springframework.boot", artifact_id="spring-boot-starter-web"),
        ],
    )


@pytest.fixture
def swarm_pom() -> PomModel:
    """A WildFly Swarm WAR with a custom HTTP port."""
    return PomModel(
        artifact_id="swarm-app",
        packaging="war",
        dependencies=[Dependency(group_id="org.wildfly.swarm", artifact_id="jaxrs")],
        plugins=[
            MavenPlugin(
                group_id="org.wildfly.swarm",
                artifact_id="wildfly-swarm-plugin",
                configuration={"properties": {"swarm.http.port": "8181"}},
            ),
        ],
    )


@pytest.fixture
def blueprint_camel_pom() -> PomModel:
    """An OSGi bundle using Camel."""
    return PomModel(
        artifact_id="camel-bundle",
        packaging="bundle",
        dependencies=[
            Dependency(group_id="org.apache.camel", artifact_id="camel-core", version="2.16.0"),
        ],
    )


@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    """Resource directory with a Camel route file and a plain beans file."""
    resources = tmp_path / "src" / "main" / "resources"
    spring_dir = resources / "META-INF" / "spring"
    spring_dir.mkdir(parents=True)
    (spring_dir / "camel-context.xml").write_text(SPRING_CAMEL_XML, encoding="utf-8")
    beans_dir = resources / "beans"
    beans_dir.mkdir()
    (beans_dir / "beans.xml").write_text(PLAIN_BEANS_XML, encoding="utf-8")
    return resources
