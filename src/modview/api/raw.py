"""Raw module downloads.

This handler serves every download of a module file by tools, which makes it
the busiest path of the service. It must only talk to the CDN and storage
(never the metadata service) and make exactly one upstream call per request.
"""

import logging

import httpx
from aiohttp import web

from modview.api.responses import redirect_response
from modview.app_keys import storage_key
from modview.core.errors import TransferError, UpstreamError
from modview.core.paths import get_module_path
from modview.core.storage import MISSING_STATUSES
from modview.core.types import ModuleRef, RedirectDecision

logger = logging.getLogger(__name__)

RAW_HEADERS = {"Access-Control-Allow-Origin": "*"}

# Upstream headers passed through with the file body
PASSTHROUGH_HEADERS = ("Content-Type", "Content-Length", "Content-Encoding", "ETag", "Last-Modified")


async def serve_raw(request: web.Request, ref: ModuleRef) -> web.StreamResponse:
    storage = request.app[storage_key]

    if ref.version is None:
        versions = await storage.get_version_list(ref.name)
        if versions is None:
            return web.Response(
                status=404,
                text=f"The module '{ref.name}' does not exist",
                headers=RAW_HEADERS,
            )
        if versions.latest is None:
            return web.Response(
                status=404,
                text=f"The module '{ref.name}' has no latest version.",
                headers=RAW_HEADERS,
            )
        decision = RedirectDecision(
            location=get_module_path(ref.name, versions.latest, ref.subpath),
            status=302,
            warning=f"Implicitly using latest version ({versions.latest}) for {request.url}",
        )
        return redirect_response(decision, RAW_HEADERS)

    async with storage.open_source(ref.name, ref.version, ref.subpath) as upstream:
        if upstream.status_code in MISSING_STATUSES:
            return web.Response(status=404, text="404 Not Found", headers=RAW_HEADERS)
        if not upstream.is_success:
            raise UpstreamError(f"Storage returned {upstream.status_code} for {upstream.url}")

        headers = dict(RAW_HEADERS)
        for name in PASSTHROUGH_HEADERS:
            value = upstream.headers.get(name)
            if value is not None:
                headers[name] = value

        response = web.StreamResponse(status=upstream.status_code, headers=headers)
        await response.prepare(request)
        try:
            async for chunk in storage.iter_source(upstream):
                await response.write(chunk)
        except httpx.HTTPError as e:
            logger.error(f"Storage stream broke off for {upstream.url}: {e}")
            response.force_close()
            raise TransferError(f"Incomplete body from {upstream.url}") from e
        await response.write_eof()
        return response
