"""View selection from query parameters."""

from collections.abc import Mapping
from dataclasses import dataclass

from modview.core.types import ModuleRef, View

SOURCE_FLAG = "source"
DOC_FLAG = "doc"
SYMBOL_PARAM = "s"


@dataclass(frozen=True)
class ViewSelection:
    """Requested view and, for documentation pages, the symbol filter."""

    view: View
    symbol: str | None = None


def classify_view(query: Mapping[str, str], ref: ModuleRef) -> ViewSelection:
    """Decide which view a rendered request asks for.

    Order: ``source`` flag, ``doc`` flag, module root (info), otherwise doc.
    The ``s`` symbol filter is kept only for the doc view.
    """
    if SOURCE_FLAG in query:
        view = View.SOURCE
    elif DOC_FLAG in query:
        view = View.DOC
    elif not ref.path:
        view = View.INFO
    else:
        view = View.DOC

    symbol = query.get(SYMBOL_PARAM) or None
    if view is not View.DOC:
        symbol = None
    return ViewSelection(view=view, symbol=symbol)
