"""Links shown around a module page: breadcrumbs, versions, repository."""

from dataclasses import dataclass
from typing import Literal, TypedDict

from modview.core.pages import UploadOptions
from modview.core.paths import LEGACY_PREFIX, get_module_path, quote_version
from modview.core.types import STD_MODULE, URLPath, View


class BreadcrumbDict(TypedDict):
    segment: str
    url: str


@dataclass(frozen=True)
class Breadcrumb:
    segment: str
    url: str

    def to_dict(self) -> BreadcrumbDict:
        return {"segment": self.segment, "url": self.url}


def get_breadcrumbs(name: str, version: str, path: URLPath, view: View) -> list[Breadcrumb]:
    """Build breadcrumbs for a module path.

    Third party modules start with an ``x`` crumb. In the source view every
    crumb links to the source listing.
    """
    crumbs: list[Breadcrumb] = []
    url = ""
    if name != STD_MODULE:
        url = LEGACY_PREFIX
        crumbs.append(Breadcrumb(segment=LEGACY_PREFIX.lstrip("/"), url=url))

    url += f"/{name}@{quote_version(version)}"
    crumbs.append(Breadcrumb(segment=name, url=url))

    for segment in path.split("/"):
        if not segment:
            continue
        url += f"/{segment}"
        crumbs.append(Breadcrumb(segment=segment, url=url))

    if view is View.SOURCE:
        crumbs = [Breadcrumb(segment=c.segment, url=f"{c.url}?source") for c in crumbs]
    return crumbs


def get_version_links(name: str, versions: list[str], path: URLPath) -> dict[str, str]:
    """Map every version to the URL of the same path in that version."""
    return {version: get_module_path(name, version, path) for version in versions}


def get_latest_url(name: str, versions: list[str], selected: str, path: URLPath) -> str | None:
    """URL of the newest version, unless it is already selected."""
    if not versions or versions[0] == selected:
        return None
    return get_module_path(name, versions[0], path)


def get_repository_url(
    upload_options: UploadOptions,
    path: URLPath,
    kind: Literal["blob", "tree"] = "blob",
) -> str | None:
    """Link to the uploaded source in its repository, if the host is known."""
    if upload_options.type != "github":
        return None

    subdir = (upload_options.subdir or "").strip("/")
    prefix = f"/{subdir}" if subdir else ""
    return (
        f"https://github.com/{upload_options.repository}/{kind}/"
        f"{upload_options.ref}{prefix}{path}"
    )
