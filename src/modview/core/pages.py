"""Page results returned by the metadata service.

A page result is a closed union of page kinds. Every consumer is expected to
handle all of them (see ``assert_never`` at the match sites), so a new kind
added upstream fails loudly in ``parse_page`` instead of being rendered as
something else.
"""

import base64
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Literal


@dataclass(frozen=True)
class UploadOptions:
    """Where a module version was uploaded from."""

    type: str
    repository: str
    ref: str
    subdir: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "repository": self.repository,
            "ref": self.ref,
            "subdir": self.subdir,
        }


@dataclass(frozen=True)
class Tag:
    kind: str
    value: str

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "value": self.value}


@dataclass(frozen=True)
class DirEntry:
    """Entry of a directory listing (also used for readme and config references)."""

    path: str
    kind: Literal["file", "dir"]
    size: int = 0
    docable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "size": self.size,
            "docable": self.docable,
        }


@dataclass(frozen=True)
class RawFile:
    """Raw file content attached to a page.

    ``content`` is text for UTF-8 files and bytes otherwise.
    """

    content: str | bytes
    highlight: bool
    canonical_path: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.content, bytes):
            content = base64.b64encode(self.content).decode("ascii")
            encoding = "base64"
        else:
            content = self.content
            encoding = "utf-8"
        return {
            "content": content,
            "encoding": encoding,
            "highlight": self.highlight,
            "canonical_path": self.canonical_path,
            "url": self.url,
        }


@dataclass(frozen=True)
class FileError:
    """File content that could not be fetched, shown in place of the file."""

    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class _Page:
    kind: ClassVar[str]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"kind": self.kind}
        for item in fields(self):  # type: ignore[arg-type]
            result[item.name] = _jsonable(getattr(self, item.name))
        return result


@dataclass(frozen=True, kw_only=True)
class NoVersionsPage(_Page):
    """Module name is registered but nothing was uploaded yet."""

    kind: ClassVar[str] = "no-versions"
    module: str


@dataclass(frozen=True, kw_only=True)
class InvalidVersionPage(_Page):
    kind: ClassVar[str] = "invalid-version"
    module: str
    description: str | None = None
    versions: list[str] = field(default_factory=list)
    latest_version: str | None = None


@dataclass(frozen=True, kw_only=True)
class PageBase(_Page):
    """Fields shared by every page of an existing module version."""

    module: str
    version: str
    description: str | None = None
    versions: list[str] = field(default_factory=list)
    latest_version: str | None = None
    uploaded_at: str | None = None
    upload_options: UploadOptions
    tags: list[Tag] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class NotFoundPage(PageBase):
    kind: ClassVar[str] = "notfound"


@dataclass(frozen=True, kw_only=True)
class DirPage(PageBase):
    kind: ClassVar[str] = "dir"
    entries: list[DirEntry] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class FilePage(PageBase):
    """A file that is not a documentable module.

    ``file`` is filled by the enricher for the source view.
    """

    kind: ClassVar[str] = "file"
    file: RawFile | FileError | None = None


@dataclass(frozen=True, kw_only=True)
class IndexPage(PageBase):
    kind: ClassVar[str] = "index"
    items: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class ModulePage(PageBase):
    kind: ClassVar[str] = "module"
    doc_nodes: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class SymbolPage(PageBase):
    kind: ClassVar[str] = "symbol"
    name: str
    doc_nodes: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class ModInfoPage(PageBase):
    """Module overview. ``readme_file`` is filled by the enricher."""

    kind: ClassVar[str] = "modinfo"
    readme: DirEntry | None = None
    config: DirEntry | None = None
    readme_file: RawFile | None = None


PageResult = (
    NoVersionsPage
    | InvalidVersionPage
    | NotFoundPage
    | DirPage
    | FilePage
    | IndexPage
    | ModulePage
    | SymbolPage
    | ModInfoPage
)

# Kinds rendered with a 404 status
NOT_FOUND_KINDS = frozenset({InvalidVersionPage.kind, NotFoundPage.kind})

_PAGE_TYPES: tuple[type[_Page], ...] = (
    NoVersionsPage,
    InvalidVersionPage,
    NotFoundPage,
    DirPage,
    FilePage,
    IndexPage,
    ModulePage,
    SymbolPage,
    ModInfoPage,
)
PAGE_KINDS = frozenset(page_type.kind for page_type in _PAGE_TYPES)


def parse_page(data: object) -> PageResult:
    """Build a page result from the metadata service JSON payload.

    Raises:
        ValueError: If the payload is not a known page kind or misses fields
    """
    if not isinstance(data, dict):
        raise ValueError("Page payload must be an object")

    kind = data.get("kind")
    if not isinstance(kind, str) or kind not in PAGE_KINDS:
        raise ValueError(f"Unknown page kind: {kind!r}")

    if kind == NoVersionsPage.kind:
        return NoVersionsPage(module=_require_str(data, "module"))
    if kind == InvalidVersionPage.kind:
        return InvalidVersionPage(
            module=_require_str(data, "module"),
            description=_optional_str(data, "description"),
            versions=_str_list(data, "versions"),
            latest_version=_optional_str(data, "latest_version"),
        )

    base = _parse_base(data)
    if kind == NotFoundPage.kind:
        return NotFoundPage(**base)
    if kind == DirPage.kind:
        return DirPage(**base, entries=[_parse_entry(item) for item in _list(data, "entries")])
    if kind == FilePage.kind:
        return FilePage(**base)
    if kind == IndexPage.kind:
        return IndexPage(**base, items=_object_list(data, "items"))
    if kind == ModulePage.kind:
        return ModulePage(**base, doc_nodes=_object_list(data, "docNodes"))
    if kind == SymbolPage.kind:
        return SymbolPage(
            **base,
            name=_require_str(data, "name"),
            doc_nodes=_object_list(data, "docNodes"),
        )
    if kind == ModInfoPage.kind:
        return ModInfoPage(
            **base,
            readme=_optional_entry(data, "readme"),
            config=_optional_entry(data, "config"),
        )
    raise AssertionError(f"Unhandled page kind: {kind!r}")


def _parse_base(data: dict[str, Any]) -> dict[str, Any]:
    upload_options = data.get("upload_options")
    if not isinstance(upload_options, dict):
        raise ValueError("upload_options must be an object")

    return {
        "module": _require_str(data, "module"),
        "version": _require_str(data, "version"),
        "description": _optional_str(data, "description"),
        "versions": _str_list(data, "versions"),
        "latest_version": _optional_str(data, "latest_version"),
        "uploaded_at": _optional_str(data, "uploaded_at"),
        "upload_options": UploadOptions(
            type=_require_str(upload_options, "type"),
            repository=_require_str(upload_options, "repository"),
            ref=_require_str(upload_options, "ref"),
            subdir=_optional_str(upload_options, "subdir"),
        ),
        "tags": [
            Tag(kind=_require_str(tag, "kind"), value=str(tag.get("value", "")))
            for tag in _object_list(data, "tags")
        ],
    }


def _parse_entry(data: object) -> DirEntry:
    if not isinstance(data, dict):
        raise ValueError("Directory entry must be an object")
    kind = data.get("kind")
    if kind not in ("file", "dir"):
        raise ValueError(f"Unknown entry kind: {kind!r}")
    size = data.get("size", 0)
    if not isinstance(size, int):
        raise ValueError("entry size must be an integer")
    return DirEntry(
        path=_require_str(data, "path"),
        kind=kind,
        size=size,
        docable=bool(data.get("docable", False)),
    )


def _optional_entry(data: dict[str, Any], key: str) -> DirEntry | None:
    value = data.get(key)
    if value is None:
        return None
    return _parse_entry(value)


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _list(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    items = _list(data, key)
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"{key} items must be strings")
    return items


def _object_list(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = _list(data, key)
    if not all(isinstance(item, dict) for item in items):
        raise ValueError(f"{key} items must be objects")
    return items


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    return value
