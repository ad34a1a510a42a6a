"""Core type definitions."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, NewType

# URL path below a module version (e.g., "", "/mod.ts", "/fmt/colors.ts")
# Distinct from plain strings to catch mixing with module names or full URLs
URLPath = NewType("URLPath", str)

STD_MODULE = "std"


class View(StrEnum):
    """Page view requested for a module."""

    DOC = "doc"
    SOURCE = "source"
    INFO = "info"


@dataclass(frozen=True)
class ModuleRef:
    """Module reference decoded from the request URL.

    A missing version means the caller wants the latest one.
    """

    name: str
    version: str | None = None
    path: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("module name must not be empty")
        if any(segment == "" for segment in self.path):
            raise ValueError("path segments must not be empty")

    @property
    def is_std(self) -> bool:
        return self.name == STD_MODULE

    @property
    def subpath(self) -> URLPath:
        """Path below the module version with a leading slash, or ""."""
        if not self.path:
            return URLPath("")
        return URLPath("/" + "/".join(self.path))


@dataclass(frozen=True)
class RedirectDecision:
    """Redirect emitted for a request. At most one exists per request."""

    location: str
    status: Literal[301, 302]
    warning: str | None = None
