from __future__ import annotations

import structlog

from .contracts import CompletionResult, Continuation, Err
from .errors import StaleTargetError
from .surfaces import DisplaySurface, SourceSurface, Span, Workspace

log = structlog.get_logger()

DEFAULT_PANEL_NAME = "*codex*"


class ResultRouter:
    """Builds the continuations that place a completion into the editing surface."""

    def __init__(self, workspace: Workspace, *, panel_name: str = DEFAULT_PANEL_NAME):
        self.workspace = workspace
        self.panel_name = panel_name

    def to_display(self, *, interactive: bool = True, panel: DisplaySurface | None = None) -> Continuation:
        target = panel if panel is not None else self.workspace.panel(self.panel_name)

        def _deliver(result: CompletionResult) -> None:
            if isinstance(result, Err):
                self.workspace.report_error(result.error)
                return
            if not target.alive:
                log.info("continuation_target_gone", target="display")
                return
            target.show_text(result.text)
            if interactive and not target.visible:
                target.reveal()
            log.debug("completion_displayed", completion_chars=len(result.text), interactive=interactive)

        return _deliver

    def to_replace(self, document: SourceSurface, span: Span) -> Continuation:
        def _deliver(result: CompletionResult) -> None:
            if isinstance(result, Err):
                self.workspace.report_error(result.error)
                return
            if not document.alive:
                log.info("continuation_target_gone", target="document")
                return
            try:
                document.replace_span(span, result.text)
            except ValueError as e:
                self.workspace.report_error(StaleTargetError(f"Cannot apply completion: {e}"))
                return
            log.debug("completion_replaced", start=span.start, end=span.end, completion_chars=len(result.text))

        return _deliver
