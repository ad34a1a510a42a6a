"""Observation hooks for request resolution.

The resolver reports its decisions here instead of logging inline, so the
hot path stays free of output side effects and tests can record decisions.
"""

import logging
from typing import TYPE_CHECKING, Protocol

from modview.core.types import ModuleRef, RedirectDecision, View

if TYPE_CHECKING:
    from modview.core.resolver import Step

logger = logging.getLogger(__name__)


class ResolutionObserver(Protocol):
    def redirected(self, step: "Step", ref: ModuleRef, decision: RedirectDecision) -> None: ...

    def rendered(self, ref: ModuleRef, view: View, kind: str | None) -> None: ...


class LoggingObserver:
    """Default observer writing decisions to the standard logger."""

    def redirected(self, step: "Step", ref: ModuleRef, decision: RedirectDecision) -> None:
        logger.info(
            f"{step.value}: {ref.name}@{ref.version or 'latest'}{ref.subpath} "
            f"-> {decision.status} {decision.location}"
        )

    def rendered(self, ref: ModuleRef, view: View, kind: str | None) -> None:
        logger.debug(
            f"render {view} {ref.name}@{ref.version or 'latest'}{ref.subpath} ({kind or 'missing'})"
        )
