"""
f8forge.camel - Camel Route Detector
====================================

Finds Camel XML route files in a project and pulls endpoint URIs out of them.

Two levels of effort are used:

1. ``contains_camel_markers`` is a cheap text check for route/context
   markers. It does not parse anything, so a marker inside a comment counts
   as a hit. That false positive is accepted.
2. ``parse_endpoints`` runs a SAX parse over files that passed the marker
   check and records ``<endpoint>`` declarations and the ``uri`` of every
   step inside a ``<route>``, with line numbers.

Multi-file scans (``scan_camel_files``, ``scan_endpoints``) never abort on a
single bad file: unreadable or malformed files are logged and skipped.

Usage Example
-------------
>>> files = find_xml_files(Path("src/main/resources"))
>>> scan_camel_files(files, "src/main/resources")
['META-INF/spring/camel-context.xml']
"""

from __future__ import annotations

import logging
import re
import xml.sax
from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath
from xml.sax.handler import ContentHandler
from xml.sax.xmlreader import AttributesImpl, Locator

from f8forge.errors import RecoverableScanError
from f8forge.models import EndpointDetail


logger = logging.getLogger(__name__)

# Returns True to include, False to exclude, None for "no opinion" (include)
InclusionFilter = Callable[[str], bool | None]

_CAMEL_MARKERS = re.compile(
    r"<(?:[\w.-]+:)?(?:camelContext|routeContext|routes|route)[\s>/]"
    r"|camel\.apache\.org/schema/"
)


# =============================================================================
# Marker Check
# =============================================================================

def contains_camel_markers(xml_content: str | bytes) -> bool:
    """
    Whether the text looks like a Camel route file.

    Looks for ``<camelContext>``, ``<routeContext>``, ``<routes>`` or
    ``<route>`` (with or without a namespace prefix) or a Camel schema
    namespace URI. Raw bytes are decoded as UTF-8 with undecodable bytes
    replaced.
    """
    if not xml_content:
        return False
    if isinstance(xml_content, bytes):
        xml_content = xml_content.decode("utf-8", errors="replace")
    return _CAMEL_MARKERS.search(xml_content) is not None


# =============================================================================
# Endpoint Extraction
# =============================================================================

class _EndpointHandler(ContentHandler):
    """Collects endpoints while SAX walks the document."""

    def __init__(self, file_uri: str) -> None:
        super().__init__()
        self.file_uri = file_uri
        self.endpoints: list[EndpointDetail] = []
        self._route_depth = 0
        self._locator: Locator | None = None

    def setDocumentLocator(self, locator: Locator) -> None:
        self._locator = locator

    def _line(self) -> int | None:
        if self._locator is None:
            return None
        return self._locator.getLineNumber()

    def startElement(self, name: str, attrs: AttributesImpl) -> None:
        local = name.rpartition(":")[2]
        if local == "route":
            self._route_depth += 1
            return

        uri = attrs.get("uri")
        if not uri:
            return
        if local == "endpoint":
            self.endpoints.append(EndpointDetail(
                file_uri=self.file_uri,
                line_number=self._line(),
                endpoint_uri=uri,
                endpoint_instance_name=attrs.get("id"),
            ))
        elif self._route_depth > 0:
            self.endpoints.append(EndpointDetail(
                file_uri=self.file_uri,
                line_number=self._line(),
                endpoint_uri=uri,
            ))

    def endElement(self, name: str) -> None:
        if name.rpartition(":")[2] == "route":
            self._route_depth -= 1


def parse_endpoints(
    xml_content: str | bytes,
    file_uri: str,
    base_uri: str | None = None,
) -> list[EndpointDetail]:
    """
    Extract endpoint URIs from a Camel XML document.

    Only ``<endpoint uri="...">`` declarations and ``uri`` attributes of
    elements nested in a ``<route>`` are recognised.

    Parameters
    ----------
    xml_content : str | bytes
        The document. Raw bytes are decoded by the parser according to the
        XML declaration; text is parsed as UTF-8.

    file_uri : str
        Path of the document; recorded on each endpoint.

    base_uri : str | None
        Root to make ``file_uri`` relative to (see ``relative_to_root``).

    Returns
    -------
    list[EndpointDetail]
        Endpoints in document order. Empty if the document is malformed;
        the problem is logged as a warning rather than raised.
    """
    if base_uri is not None:
        file_uri = relative_to_root(file_uri, base_uri)
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")

    handler = _EndpointHandler(file_uri)
    try:
        xml.sax.parseString(xml_content, handler)
    except xml.sax.SAXException as e:
        logger.warning("%s", RecoverableScanError(file_uri, str(e)))
        return []

    return handler.endpoints


# =============================================================================
# File Scanning
# =============================================================================

def relative_to_root(path: str, root: str) -> str:
    """
    Strip ``root`` from the front of ``path``.

    This is a plain string prefix match. A path outside ``root`` comes back
    unchanged.

    Examples
    --------
    >>> relative_to_root("/p/src/main/resources/META-INF/spring/a.xml", "/p/src/main/resources")
    'META-INF/spring/a.xml'
    >>> relative_to_root("/elsewhere/a.xml", "/p/src/main/resources")
    '/elsewhere/a.xml'
    """
    if not root or not path.startswith(root):
        return path
    rest = path[len(root):]
    if rest.startswith(("/", "\\")):
        rest = rest[1:]
    return rest


def find_xml_files(directory: Path) -> list[Path]:
    """All ``*.xml`` files below ``directory``, sorted for stable output."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.rglob("*.xml") if p.is_file())


def _is_included(path: str, include: InclusionFilter | None) -> bool:
    if include is None:
        return True
    out = include(path)
    return out is None or out


def _read_candidate(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise RecoverableScanError(path, str(e)) from e


def _candidates(
    files: Iterable[Path | str],
    include: InclusionFilter | None,
) -> Iterable[tuple[str, bytes]]:
    """Yield ``(path, raw bytes)`` for XML files that pass filter and marker check."""
    for file in files:
        path = str(file)
        if not path.endswith(".xml"):
            continue
        if not _is_included(path, include):
            logger.debug("Filter excluded %s", path)
            continue
        try:
            content = _read_candidate(path)
        except RecoverableScanError as e:
            logger.warning("%s", e)
            continue
        if contains_camel_markers(content):
            yield path, content


def scan_camel_files(
    files: Iterable[Path | str],
    resource_root: Path | str,
    include: InclusionFilter | None = None,
) -> list[str]:
    """
    List the Camel route files among ``files``.

    Parameters
    ----------
    files : Iterable[Path | str]
        Candidate files; anything not ending in ``.xml`` is ignored.

    resource_root : Path | str
        Resource directory the recorded paths are made relative to.

    include : InclusionFilter | None
        Path based allow/deny predicate applied before reading a file.

    Returns
    -------
    list[str]
        Matching paths relative to ``resource_root``, e.g.
        ``META-INF/spring/camel-context.xml``.
    """
    root = str(resource_root)
    return [relative_to_root(path, root) for path, _ in _candidates(files, include)]


def scan_endpoints(
    files: Iterable[Path | str],
    resource_root: Path | str,
    include: InclusionFilter | None = None,
) -> list[EndpointDetail]:
    """Endpoints of all Camel route files among ``files``, file by file."""
    root = str(resource_root)
    endpoints: list[EndpointDetail] = []
    for path, content in _candidates(files, include):
        endpoints.extend(parse_endpoints(content, path, root))
    return endpoints


def camel_xml_directories(relative_files: Iterable[str]) -> set[str]:
    """Directories (relative to the resource root) holding Camel XML files."""
    directories = set()
    for file in relative_files:
        parent = str(PurePosixPath(file.replace("\\", "/")).parent)
        if parent != ".":
            directories.add(parent)
    return directories


# =============================================================================
# Endpoint Helpers
# =============================================================================

def endpoint_by_instance_name(
    endpoints: Iterable[EndpointDetail],
    instance_name: str,
) -> EndpointDetail | None:
    for detail in endpoints:
        if detail.endpoint_instance_name is not None and detail.endpoint_instance_name == instance_name:
            return detail
    return None


def default_new_instance_name(endpoints: list[EndpointDetail]) -> str:
    """
    First free ``endpointN`` name, starting at ``len(endpoints) + 1``.

    Examples
    --------
    >>> default_new_instance_name([])
    'endpoint1'
    """
    count = len(endpoints) + 1
    while endpoint_by_instance_name(endpoints, f"endpoint{count}") is not None:
        count += 1
    return f"endpoint{count}"
