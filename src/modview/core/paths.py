"""Module path parsing and URL construction.

Request paths come in two shapes that map to the same handler:

    /x/<name>[@<version>]/<path...>     third party modules
    /std[@<version>]/<path...>          standard library alias

Only the version token is percent-decoded. Name and path segments are kept in
their raw URL form so they can be placed back into URLs unchanged.
"""

import re
from dataclasses import dataclass
from urllib.parse import quote, unquote

from modview.core.types import STD_MODULE, ModuleRef, URLPath

LEGACY_PREFIX = "/x"

# "<file>:<line>" or "<file>:<line>:<column>" at the end of a path
_ALT_LINE_REFERENCE_RE = re.compile(r"^(?P<rest>.*?[^/:]):(?P<line>\d+)(?::\d+)?$")


@dataclass(frozen=True)
class ParsedPath:
    """Result of splitting a request path."""

    ref: ModuleRef
    legacy_prefix: bool


@dataclass(frozen=True)
class LineReference:
    """Line number found at the end of a path, and the path without it."""

    rest: str
    line: int


def parse_module_path(raw_path: str) -> ParsedPath:
    """Split a raw request path into a module reference.

    Name validity is not checked here; the metadata service decides whether
    a module exists.

    Args:
        raw_path: Percent-encoded URL path (no query string)

    Returns:
        ParsedPath with the module reference and whether the /x prefix was used

    Raises:
        ValueError: If the path has no module name segment
    """
    legacy_prefix = raw_path == LEGACY_PREFIX or raw_path.startswith(LEGACY_PREFIX + "/")
    rest = raw_path[len(LEGACY_PREFIX) :] if legacy_prefix else raw_path

    segments = [segment for segment in rest.split("/") if segment]
    if not segments:
        raise ValueError(f"No module name in path: {raw_path!r}")

    head, *tail = segments
    name, _, version = head.partition("@")
    if not name:
        raise ValueError(f"No module name in path: {raw_path!r}")

    ref = ModuleRef(
        name=name,
        version=unquote(version) or None,
        path=tuple(tail),
    )
    return ParsedPath(ref=ref, legacy_prefix=legacy_prefix)


def quote_version(version: str) -> str:
    return quote(version, safe="+")


def quote_path(path: str) -> str:
    """Percent-encode a decoded module path for use in a URL."""
    return quote(path, safe="/@:+")


def get_base_path(name: str, version: str | None = None) -> str:
    """URL path of a module (version), e.g. /x/oak@0.1.0 or /std@0.1.0."""
    prefix = "" if name == STD_MODULE else LEGACY_PREFIX
    suffix = f"@{quote_version(version)}" if version else ""
    return f"{prefix}/{name}{suffix}"


def get_module_path(name: str, version: str | None = None, path: str = "") -> str:
    """URL path of a file or directory inside a module.

    Args:
        name: Module name
        version: Concrete version, or None for the unversioned URL
        path: Path below the module with a leading slash, or ""
    """
    if path and not path.startswith("/"):
        path = "/" + path
    return get_base_path(name, version) + path


def get_source_url(storage_url: str, name: str, version: str, path: URLPath) -> str:
    """Storage URL of a raw file of a published module version."""
    return f"{storage_url.rstrip('/')}/{name}/versions/{quote_version(version)}/raw{path}"


def get_version_list_url(cdn_url: str, name: str) -> str:
    return f"{cdn_url.rstrip('/')}/{name}/meta/versions.json"


def extract_alt_line_number_reference(path: str) -> LineReference | None:
    """Extract a legacy ``file.ts:123`` line reference from a URL path.

    Anything that does not parse as a positive line number is treated as
    absent.
    """
    match = _ALT_LINE_REFERENCE_RE.match(path)
    if match is None:
        return None

    line = int(match.group("line"))
    if line < 1:
        return None
    return LineReference(rest=match.group("rest"), line=line)
