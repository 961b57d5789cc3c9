"""
f8forge.templates - Jinja2 Template Files
=========================================

Jinja2 templates rendered by ``f8forge.rendering``. Templates use the ``.j2``
extension; the name without it is the logical template id.

Available Templates
-------------------
- camel-spring.xml.j2: CamelContext in a Spring XML file (``META-INF/spring``)
- camel-blueprint.xml.j2: CamelContext in an OSGi Blueprint file
  (``OSGI-INF/blueprint``)

Template Context
----------------
projectName : str
    Project name (the artifactId unless given); used as the CamelContext id.
"""

# Templates are loaded by Jinja2's PackageLoader.
