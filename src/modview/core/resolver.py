"""Redirect resolution for module requests.

Every logical resource has exactly one canonical URL. The resolver walks a
fixed sequence of canonicalization steps; the first step that applies emits
a redirect and ends resolution, because later steps rely on the invariants
earlier ones establish (e.g. a concrete version):

    name normalization      /x/std/...  -> /std/...                  301
    version defaulting      /x/oak/...  -> /x/oak@<latest>/...       301
    path canonicalization   directory   -> its index module path      301
    view canonicalization   doc of file -> same URL with ?source      301
    anchor canonicalization mod.ts:12   -> mod.ts?source#L12          302
    render                  no redirect

Only name normalization can run before the metadata lookup; it is checked
again (as a no-op) in the full pass so the order is explicit in one place.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import assert_never
from urllib.parse import unquote

from yarl import URL

from modview.core.errors import UpstreamError
from modview.core.gateway import (
    CanonicalPathRedirect,
    GatewayOutcome,
    ImplicitLatest,
    NotExists,
    Success,
)
from modview.core.observer import LoggingObserver, ResolutionObserver
from modview.core.pages import FilePage, NoVersionsPage, PageResult
from modview.core.paths import (
    LEGACY_PREFIX,
    ParsedPath,
    extract_alt_line_number_reference,
    get_module_path,
    quote_path,
)
from modview.core.types import ModuleRef, RedirectDecision, View
from modview.core.views import SOURCE_FLAG


class Step(StrEnum):
    NAME_NORMALIZATION = "name-normalization"
    VERSION_DEFAULTING = "version-defaulting"
    PATH_CANONICALIZATION = "path-canonicalization"
    VIEW_CANONICALIZATION = "view-canonicalization"
    ANCHOR_CANONICALIZATION = "anchor-canonicalization"
    RENDER = "render"


@dataclass(frozen=True)
class ResolutionContext:
    """Everything the resolver looks at for one request.

    ``url`` is the request-relative URL (raw path and query).
    ``view`` and ``outcome`` are None until the request has been classified
    and the metadata lookup has happened.
    """

    url: URL
    parsed: ParsedPath
    view: View | None = None
    outcome: GatewayOutcome | None = None

    @property
    def ref(self) -> ModuleRef:
        return self.parsed.ref


@dataclass(frozen=True)
class Resolution:
    """Final state of resolution.

    Either a redirect, or a render with the page to show (None when the
    module does not exist).
    """

    step: Step
    redirect: RedirectDecision | None = None
    page: PageResult | None = None


@dataclass(frozen=True)
class _StepCheck:
    step: Step
    check: Callable[[ResolutionContext], RedirectDecision | None]
    needs_outcome: bool


def _location(raw_path: str, query_string: str = "", fragment: str = "") -> str:
    return str(URL.build(path=raw_path, query_string=query_string, fragment=fragment, encoded=True))


def _normalize_name(ctx: ResolutionContext) -> RedirectDecision | None:
    if not (ctx.ref.is_std and ctx.parsed.legacy_prefix):
        return None
    path = ctx.url.raw_path[len(LEGACY_PREFIX) :]
    return RedirectDecision(location=_location(path, ctx.url.raw_query_string), status=301)


def _default_version(ctx: ResolutionContext) -> RedirectDecision | None:
    if not isinstance(ctx.outcome, ImplicitLatest):
        return None
    if ctx.ref.version is not None:
        raise UpstreamError(
            f"Latest version redirect for already versioned {ctx.ref.name}@{ctx.ref.version}"
        )
    path = get_module_path(ctx.ref.name, ctx.outcome.version, ctx.ref.subpath)
    return RedirectDecision(location=_location(path, ctx.url.raw_query_string), status=301)


def _canonicalize_path(ctx: ResolutionContext) -> RedirectDecision | None:
    if not isinstance(ctx.outcome, CanonicalPathRedirect):
        return None
    # The header carries a decoded path, the request path is still encoded
    target = quote_path(ctx.outcome.path)
    if unquote(target) == unquote(ctx.ref.subpath):
        raise UpstreamError(f"Module path redirect to itself for {ctx.ref.name}{ctx.ref.subpath}")
    path = get_module_path(ctx.ref.name, ctx.ref.version, target)
    return RedirectDecision(location=_location(path), status=301)


def _renderable_page(ctx: ResolutionContext) -> PageResult | None:
    if not isinstance(ctx.outcome, Success) or isinstance(ctx.outcome.page, NoVersionsPage):
        return None
    return ctx.outcome.page


def _canonicalize_view(ctx: ResolutionContext) -> RedirectDecision | None:
    page = _renderable_page(ctx)
    if ctx.view is not View.DOC or not isinstance(page, FilePage):
        return None
    query = ctx.url.update_query({SOURCE_FLAG: ""}).raw_query_string
    return RedirectDecision(location=_location(ctx.url.raw_path, query), status=301)


def _canonicalize_anchor(ctx: ResolutionContext) -> RedirectDecision | None:
    if _renderable_page(ctx) is None:
        return None
    reference = extract_alt_line_number_reference(ctx.url.raw_path)
    if reference is None:
        return None
    query = ctx.url.update_query({SOURCE_FLAG: ""}).raw_query_string
    return RedirectDecision(
        location=_location(reference.rest, query, f"L{reference.line}"),
        status=302,
    )


STEPS: tuple[_StepCheck, ...] = (
    _StepCheck(Step.NAME_NORMALIZATION, _normalize_name, needs_outcome=False),
    _StepCheck(Step.VERSION_DEFAULTING, _default_version, needs_outcome=True),
    _StepCheck(Step.PATH_CANONICALIZATION, _canonicalize_path, needs_outcome=True),
    _StepCheck(Step.VIEW_CANONICALIZATION, _canonicalize_view, needs_outcome=True),
    _StepCheck(Step.ANCHOR_CANONICALIZATION, _canonicalize_anchor, needs_outcome=True),
)


class RedirectResolver:
    """Runs the canonicalization steps in order."""

    def __init__(self, observer: ResolutionObserver | None = None):
        self.observer: ResolutionObserver = observer or LoggingObserver()

    def before_lookup(self, url: URL, parsed: ParsedPath) -> Resolution | None:
        """Run the steps that do not need metadata.

        Returns:
            A redirect resolution, or None to continue with the lookup
        """
        ctx = ResolutionContext(url=url, parsed=parsed)
        for item in STEPS:
            if item.needs_outcome:
                continue
            resolution = self._run(item, ctx)
            if resolution is not None:
                return resolution
        return None

    def resolve(self, ctx: ResolutionContext) -> Resolution:
        """Run all steps against the metadata lookup outcome.

        Raises:
            UpstreamError: If the outcome contradicts the request (redirect loop)
            ValueError: If called before the lookup
        """
        if ctx.view is None or ctx.outcome is None:
            raise ValueError("resolve() needs the view and the metadata lookup outcome")

        for item in STEPS:
            resolution = self._run(item, ctx)
            if resolution is not None:
                return resolution

        page: PageResult | None
        match ctx.outcome:
            case NotExists():
                page = None
            case Success(page=found):
                page = found
            case ImplicitLatest() | CanonicalPathRedirect():
                raise AssertionError(f"Redirect outcome left unresolved: {ctx.outcome!r}")
            case _:
                assert_never(ctx.outcome)

        self.observer.rendered(ctx.ref, ctx.view, page.kind if page is not None else None)
        return Resolution(step=Step.RENDER, page=page)

    def _run(self, item: _StepCheck, ctx: ResolutionContext) -> Resolution | None:
        decision = item.check(ctx)
        if decision is None:
            return None
        self.observer.redirected(item.step, ctx.ref, decision)
        return Resolution(step=item.step, redirect=decision)
