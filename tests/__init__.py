"""
f8forge test suite
==================

Test Modules
------------
- test_models.py: Pydantic models and packaging parsing
- test_facts.py: ProjectFacts snapshots from a PomModel
- test_inference.py: default inference engine
- test_merger.py: idempotent POM merger
- test_camel.py: Camel route detection and scanning
- test_catalog.py: Camel catalog filtering
- test_commands.py: setup commands
- test_rendering.py: Jinja2 templates
- test_settings.py: settings file handling
- test_cli.py: command-line interface

Running Tests
-------------
    pytest
    pytest tests/test_merger.py::TestUpsertProperty
"""
