"""Response helpers shared by the module endpoints."""

from collections.abc import Mapping

from aiohttp import hdrs, web

from modview.core.types import RedirectDecision

# Diagnostic header for implicit version choices; clients must not rely on it
WARNING_HEADER = "X-Deno-Warning"


def redirect_response(
    decision: RedirectDecision, headers: Mapping[str, str] | None = None
) -> web.Response:
    response_headers = dict(headers or {})
    response_headers[hdrs.LOCATION] = decision.location
    if decision.warning is not None:
        response_headers[WARNING_HEADER] = decision.warning
    return web.Response(status=decision.status, headers=response_headers)
