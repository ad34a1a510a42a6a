"""Registry content source.

Version lists come from the CDN, raw files from the storage bucket. Neither
call touches the metadata service, which keeps the raw download path
independent of it.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from urllib.parse import urlsplit

import httpx

from modview.core.errors import ContentError, UpstreamError
from modview.core.pages import DirEntry, RawFile
from modview.core.paths import get_source_url, get_version_list_url
from modview.core.types import URLPath

logger = logging.getLogger(__name__)

# Files above this size are shown without syntax highlighting
MAX_SYNTAX_HIGHLIGHT_FILE_SIZE = 512 * 1024

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".ico", ".bmp", ".avif"})

# Storage answers 403 for keys that do not exist
MISSING_STATUSES = frozenset({403, 404})


@dataclass(frozen=True)
class VersionList:
    """Published versions of a module, newest first."""

    latest: str | None
    versions: list[str] = field(default_factory=list)


class RegistryStorage:
    """Access to published module content."""

    def __init__(self, client: httpx.AsyncClient, cdn_url: str, storage_url: str):
        self.client = client
        self.cdn_url = cdn_url.rstrip("/")
        self.storage_url = storage_url.rstrip("/")

    async def get_version_list(self, name: str) -> VersionList | None:
        """Fetch the version list of a module.

        Returns:
            VersionList, or None if the module does not exist

        Raises:
            UpstreamError: If the CDN is unreachable or answers unexpectedly
        """
        url = get_version_list_url(self.cdn_url, name)
        logger.debug(f"Fetching version list {url}")
        try:
            response = await self.client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Version list request failed for {url}: {e}") from e

        if response.status_code in MISSING_STATUSES:
            return None
        if not response.is_success:
            logger.error(f"Unexpected version list response {response.status_code} for {url}")
            raise UpstreamError(f"CDN returned {response.status_code} for {url}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(f"Malformed version list for {url}: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamError(f"Malformed version list for {url}")
        latest = data.get("latest")
        versions = data.get("versions", [])
        if latest is not None and not isinstance(latest, str):
            raise UpstreamError(f"Malformed latest version for {url}")
        if not isinstance(versions, list) or not all(isinstance(v, str) for v in versions):
            raise UpstreamError(f"Malformed versions for {url}")
        return VersionList(latest=latest, versions=versions)

    @asynccontextmanager
    async def open_source(self, name: str, version: str, path: URLPath) -> AsyncIterator[httpx.Response]:
        """Open a streaming response for a raw file.

        The caller reads the body while the context is open. Status codes are
        passed through untouched.

        Raises:
            UpstreamError: If storage is unreachable
        """
        url = get_source_url(self.storage_url, name, version, path)
        logger.debug(f"Streaming source {url}")
        request = self.client.build_request("GET", url)
        try:
            response = await self.client.send(request, stream=True, follow_redirects=True)
        except httpx.HTTPError as e:
            raise UpstreamError(f"Source request failed for {url}: {e}") from e

        try:
            yield response
        finally:
            await response.aclose()

    @staticmethod
    async def iter_source(response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the body of a response from open_source().

        Transports that hand back an already read body are served from
        memory; everything else is streamed as received.
        """
        if response.is_stream_consumed:
            yield response.content
            return
        async for chunk in response.aiter_raw():
            yield chunk

    async def get_raw_file(self, name: str, version: str, path: URLPath) -> RawFile:
        """Fetch a raw file for display in the source view.

        Image bodies are not downloaded; the page links to them instead.

        Raises:
            ContentError: If the file is missing or cannot be fetched
        """
        url = get_source_url(self.storage_url, name, version, path)
        is_image = PurePosixPath(path).suffix.lower() in IMAGE_EXTENSIONS

        try:
            async with self.client.stream("GET", url, follow_redirects=True) as response:
                if response.status_code in MISSING_STATUSES:
                    raise ContentError(f"File not found: {path or '/'}")
                if not response.is_success:
                    raise ContentError(
                        f"Failed to fetch file {path or '/'} (status {response.status_code})"
                    )

                canonical_path = self._canonical_path(str(response.url), name, version, path)
                if is_image:
                    return RawFile(content="", highlight=False, canonical_path=canonical_path, url=url)
                body = await response.aread()
        except httpx.HTTPError as e:
            raise ContentError(f"Failed to fetch file {path or '/'}: {e}") from e

        content: str | bytes
        try:
            content = body.decode("utf-8")
        except UnicodeDecodeError:
            content = body

        highlight = isinstance(content, str) and len(body) <= MAX_SYNTAX_HIGHLIGHT_FILE_SIZE
        return RawFile(content=content, highlight=highlight, canonical_path=canonical_path, url=url)

    async def get_readme(self, name: str, version: str, readme: DirEntry) -> RawFile:
        """Fetch the readme file referenced by a module info page.

        Raises:
            ContentError: If the readme cannot be fetched
        """
        path = readme.path if readme.path.startswith("/") else f"/{readme.path}"
        return await self.get_raw_file(name, version, URLPath(path))

    def _canonical_path(self, final_url: str, name: str, version: str, path: URLPath) -> str:
        # Storage may redirect (e.g. directory -> index file); report where we ended up
        raw_root = urlsplit(get_source_url(self.storage_url, name, version, URLPath(""))).path
        final_path = urlsplit(final_url).path
        if final_path.startswith(raw_root + "/"):
            return final_path[len(raw_root) :]
        return path
