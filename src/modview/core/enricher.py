"""Page data enrichment.

Runs after resolution decided to render. Adds the content a view needs on
top of the metadata: the readme for the module overview and the raw file for
the source view. Content failures never fail the page.
"""

import logging
from dataclasses import replace
from typing import assert_never

from modview.core.errors import ContentError
from modview.core.pages import (
    DirPage,
    FileError,
    FilePage,
    IndexPage,
    InvalidVersionPage,
    ModInfoPage,
    ModulePage,
    NotFoundPage,
    NoVersionsPage,
    PageResult,
    SymbolPage,
)
from modview.core.storage import RegistryStorage
from modview.core.types import ModuleRef, View

logger = logging.getLogger(__name__)

STD_VERSION_PLACEHOLDER = "$STD_VERSION"


class PageEnricher:
    """Fetches view-specific content for a resolved page."""

    def __init__(self, storage: RegistryStorage):
        self.storage = storage

    async def enrich(self, ref: ModuleRef, view: View, page: PageResult) -> PageResult:
        match page:
            case ModInfoPage():
                return await self._with_readme(ref, page)
            case FilePage():
                if view is View.SOURCE:
                    return await self._with_file(ref, page)
                return page
            case (
                NoVersionsPage()
                | InvalidVersionPage()
                | NotFoundPage()
                | DirPage()
                | IndexPage()
                | ModulePage()
                | SymbolPage()
            ):
                return page
            case _:
                assert_never(page)

    async def _with_readme(self, ref: ModuleRef, page: ModInfoPage) -> ModInfoPage:
        if page.readme is None:
            return page

        try:
            readme = await self.storage.get_readme(ref.name, page.version, page.readme)
        except ContentError as e:
            logger.warning(f"Readme unavailable for {ref.name}@{page.version}: {e}")
            return page

        if not ref.is_std and isinstance(readme.content, str):
            readme = replace(
                readme, content=readme.content.replace(STD_VERSION_PLACEHOLDER, page.version)
            )
        return replace(page, readme_file=readme)

    async def _with_file(self, ref: ModuleRef, page: FilePage) -> FilePage:
        try:
            file = await self.storage.get_raw_file(ref.name, page.version, ref.subpath)
        except ContentError as e:
            logger.warning(f"File unavailable for {ref.name}@{page.version}{ref.subpath}: {e}")
            return replace(page, file=FileError(message=str(e)))
        return replace(page, file=file)
