"""Module page endpoint.

Resolves ``/x/<name>[@<version>]/<path>`` and ``/std[@<version>]/<path>``
into a redirect, a raw download, or page data handed to the renderer as JSON.
"""

from typing import Any

from aiohttp import hdrs, web

from modview.api.raw import serve_raw
from modview.api.responses import redirect_response
from modview.app_keys import enricher_key, gateway_key, resolver_key
from modview.core.links import (
    get_breadcrumbs,
    get_latest_url,
    get_repository_url,
    get_version_links,
)
from modview.core.negotiation import wants_html
from modview.core.pages import (
    NOT_FOUND_KINDS,
    IndexPage,
    InvalidVersionPage,
    NoVersionsPage,
    PageBase,
    PageResult,
)
from modview.core.paths import parse_module_path
from modview.core.resolver import ResolutionContext
from modview.core.types import ModuleRef, View
from modview.core.views import classify_view


def create_module_routes() -> list[web.RouteDef]:
    return [
        web.get(r"/x/{module:[^/]+}{path:(?:/.*)?}", get_module),
        web.get(r"/{module:std(?:@[^/]*)?}{path:(?:/.*)?}", get_module),
    ]


async def get_module(request: web.Request) -> web.StreamResponse:
    url = request.rel_url
    try:
        parsed = parse_module_path(url.raw_path)
    except ValueError:
        raise web.HTTPNotFound() from None

    resolver = request.app[resolver_key]
    early = resolver.before_lookup(url, parsed)
    if early is not None and early.redirect is not None:
        return redirect_response(early.redirect)

    ref = parsed.ref
    if not wants_html(request.headers.get(hdrs.ACCEPT)):
        return await serve_raw(request, ref)

    selection = classify_view(request.query, ref)
    outcome = await request.app[gateway_key].fetch_page(
        selection.view, ref.name, ref.version, ref.subpath, selection.symbol
    )
    resolution = resolver.resolve(
        ResolutionContext(url=url, parsed=parsed, view=selection.view, outcome=outcome)
    )
    if resolution.redirect is not None:
        return redirect_response(resolution.redirect)

    if resolution.page is None:
        return web.json_response(
            {
                "error": "Module not found",
                "module": ref.name,
                "message": "This module does not exist.",
            },
            status=404,
        )

    page = await request.app[enricher_key].enrich(ref, selection.view, resolution.page)
    status = 404 if page.kind in NOT_FOUND_KINDS else 200
    return web.json_response(build_page_data(ref, selection.view, page), status=status)


def build_page_data(ref: ModuleRef, view: View, page: PageResult) -> dict[str, Any]:
    """Assemble everything the renderer needs for a module page."""
    data: dict[str, Any] = {
        "view": view.value,
        "module": {
            "name": ref.name,
            "version": ref.version,
            "path": ref.subpath,
            "is_std": ref.is_std,
        },
        "page": page.to_dict(),
    }
    if isinstance(page, NoVersionsPage):
        return data

    selected = ref.version or (page.version if isinstance(page, PageBase) else None)
    if selected is not None:
        data["breadcrumbs"] = [
            crumb.to_dict() for crumb in get_breadcrumbs(ref.name, selected, ref.subpath, view)
        ]

    if isinstance(page, PageBase | InvalidVersionPage) and selected is not None:
        data["versions"] = get_version_links(ref.name, page.versions, ref.subpath)
        data["latest_url"] = get_latest_url(ref.name, page.versions, selected, ref.subpath)

    if isinstance(page, PageBase):
        kind = "tree" if isinstance(page, IndexPage) else "blob"
        data["repository_url"] = get_repository_url(page.upload_options, ref.subpath, kind)
    return data
