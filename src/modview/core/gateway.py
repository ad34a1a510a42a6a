"""Metadata service gateway.

Fetches page metadata for a module view and turns the service's answer into
one of four outcomes. Redirect answers are not followed: they carry the
information the redirect resolver needs.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from modview.core.errors import UpstreamError
from modview.core.pages import PageResult, parse_page
from modview.core.paths import quote_version
from modview.core.types import URLPath, View

logger = logging.getLogger(__name__)

LATEST_VERSION_SENTINEL = "__latest__"
LATEST_VERSION_HEADER = "X-Deno-Latest-Version"
MODULE_PATH_HEADER = "X-Deno-Module-Path"


@dataclass(frozen=True)
class NotExists:
    """Module or version does not exist."""


@dataclass(frozen=True)
class ImplicitLatest:
    """No version was requested; the service picked one."""

    version: str


@dataclass(frozen=True)
class CanonicalPathRedirect:
    """Directory whose documentation lives at another path (its index module)."""

    path: URLPath


@dataclass(frozen=True)
class Success:
    page: PageResult


GatewayOutcome = NotExists | ImplicitLatest | CanonicalPathRedirect | Success


class MetadataGateway(Protocol):
    """What the resolver needs from the metadata service."""

    async def fetch_page(
        self,
        view: View,
        name: str,
        version: str | None,
        path: URLPath,
        symbol: str | None = None,
    ) -> GatewayOutcome: ...


class PageGateway:
    """Metadata gateway backed by the registry pages API."""

    def __init__(self, client: httpx.AsyncClient, api_url: str):
        """Initialize gateway.

        Args:
            client: Shared httpx AsyncClient
            api_url: Pages API base URL (e.g., https://apiland.deno.dev)
        """
        self.client = client
        self.api_url = api_url.rstrip("/")

    def page_url(self, view: View, name: str, version: str | None, path: URLPath) -> str:
        version_token = quote_version(version) if version else LATEST_VERSION_SENTINEL
        return f"{self.api_url}/v2/pages/mod/{view}/{name}/{version_token}/{path.lstrip('/')}"

    async def fetch_page(
        self,
        view: View,
        name: str,
        version: str | None,
        path: URLPath,
        symbol: str | None = None,
    ) -> GatewayOutcome:
        """Fetch page metadata.

        Args:
            view: Requested view
            name: Module name
            version: Concrete version, or None for the latest one
            path: Path below the module
            symbol: Symbol filter (doc view only)

        Returns:
            Outcome of the lookup

        Raises:
            UpstreamError: If the service is unreachable or answers unexpectedly
        """
        url = self.page_url(view, name, version, path)
        params = {"symbol": symbol} if symbol and view is View.DOC else None

        logger.debug(f"Fetching page metadata {url}")
        try:
            response = await self.client.get(url, params=params, follow_redirects=False)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Metadata request failed for {url}: {e}") from e

        if response.status_code == 404:
            return NotExists()

        if response.status_code == 302:
            latest = response.headers.get(LATEST_VERSION_HEADER)
            if not latest:
                raise UpstreamError(f"Latest version redirect without version for {url}")
            return ImplicitLatest(version=latest)

        if response.status_code == 301:
            module_path = response.headers.get(MODULE_PATH_HEADER)
            if module_path is None:
                raise UpstreamError(f"Module path redirect without path for {url}")
            if module_path and not module_path.startswith("/"):
                module_path = "/" + module_path
            return CanonicalPathRedirect(path=URLPath(module_path))

        if not response.is_success:
            logger.error(f"Unexpected metadata response {response.status_code} for {url}")
            raise UpstreamError(f"Metadata service returned {response.status_code} for {url}")

        try:
            return Success(page=parse_page(response.json()))
        except ValueError as e:
            raise UpstreamError(f"Malformed page payload for {url}: {e}") from e
