"""
f8forge - Fabric8 Project Setup
===============================

Wizard commands that prepare a Maven project for Docker and Kubernetes with
fabric8, and help editing Camel XML routes.

Features
--------
- **Inferred defaults**: service port, Docker base image, container label,
  icon and main class worked out from the project's packaging and frameworks
- **Idempotent POM edits**: properties, profiles, plugins, extensions and
  dependencies are only added or changed when needed, so re-running a
  command is harmless
- **Camel routes**: find Camel XML files, list their endpoints and create new
  Spring or Blueprint CamelContext files

Quick Start
-----------
```bash
f8forge infer --model pom.json
f8forge setup --model pom.json
f8forge endpoints src/main/resources
```

Example
-------
>>> from f8forge import PomModel, facts_from_pom, infer_defaults
>>> pom = PomModel(artifact_id="demo", packaging="war")
>>> infer_defaults(facts_from_pom(pom)).default_service_port
'8080'

Architecture
------------
- ``models``: Pydantic models for facts, defaults and the POM object model
- ``facts``: builds ``ProjectFacts`` snapshots from a ``PomModel``
- ``inference``: default inference engine
- ``merger``: idempotent POM merger
- ``camel``: Camel route detection and endpoint scanning
- ``catalog``: Camel catalog collaborator
- ``commands``: the setup commands
- ``rendering``: Jinja2 template rendering
- ``settings``: installation settings
- ``cli``: Typer command line interface
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "Apache-2.0"

# =============================================================================
# Public API Exports
# =============================================================================

from f8forge.camel import contains_camel_markers, parse_endpoints, scan_camel_files, scan_endpoints
from f8forge.commands import CommandResult, Fabric8SetupOptions, fabric8_setup
from f8forge.facts import facts_from_pom
from f8forge.inference import infer_defaults, infer_service_port
from f8forge.merger import upsert_profile, upsert_property
from f8forge.models import EndpointDetail, InferredDefaults, Packaging, PomModel, ProjectFacts


__all__ = [
    "CommandResult",
    "EndpointDetail",
    "Fabric8SetupOptions",
    "InferredDefaults",
    "Packaging",
    "PomModel",
    "ProjectFacts",
    "__version__",
    "contains_camel_markers",
    "fabric8_setup",
    "facts_from_pom",
    "infer_defaults",
    "infer_service_port",
    "parse_endpoints",
    "scan_camel_files",
    "scan_endpoints",
    "upsert_profile",
    "upsert_property",
]
