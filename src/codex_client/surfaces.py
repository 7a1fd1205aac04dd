"""
Editing-surface collaborators the completion pipeline writes into.

The protocols describe what an editor host has to provide; the concrete
classes are in-memory implementations used by the terminal host and tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import structlog

from .errors import CompletionError

log = structlog.get_logger()


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid span [{self.start}, {self.end}).")


class SourceSurface(Protocol):
    comment_marker: str

    @property
    def alive(self) -> bool: ...

    def substring(self, span: Span) -> str: ...

    def replace_span(self, span: Span, text: str) -> None: ...


class DisplaySurface(Protocol):
    @property
    def alive(self) -> bool: ...

    @property
    def visible(self) -> bool: ...

    def show_text(self, text: str) -> None: ...

    def reveal(self) -> None: ...


class TextDocument:
    def __init__(self, text: str = "", *, comment_marker: str = "#", name: str | None = None):
        self.text = text
        self.comment_marker = comment_marker
        self.name = name
        self._closed = False

    @property
    def alive(self) -> bool:
        return not self._closed

    def close(self) -> None:
        self._closed = True

    def full_span(self) -> Span:
        return Span(0, len(self.text))

    def substring(self, span: Span) -> str:
        self._check_span(span)
        return self.text[span.start : span.end]

    def replace_span(self, span: Span, text: str) -> None:
        """Delete ``span`` and insert ``text`` at its start offset."""
        self._check_span(span)
        remaining = self.text[: span.start] + self.text[span.end :]
        self.text = remaining[: span.start] + text + remaining[span.start :]

    def _check_span(self, span: Span) -> None:
        if span.end > len(self.text):
            raise ValueError(f"Span [{span.start}, {span.end}) is outside the document (length {len(self.text)}).")


class ResultsPanel:
    """Shared scratch panel; every write replaces the whole contents."""

    def __init__(self, name: str):
        self.name = name
        self.text = ""
        self.read_only = False
        self._visible = False
        self._killed = False

    @property
    def alive(self) -> bool:
        return not self._killed

    @property
    def visible(self) -> bool:
        return self._visible

    def show_text(self, text: str) -> None:
        self.text = text
        self.read_only = True

    def reveal(self) -> None:
        self._visible = True

    def hide(self) -> None:
        self._visible = False

    def kill(self) -> None:
        self._killed = True
        self._visible = False


class Workspace:
    """
    The embedding environment: owns result panels and the error-notification channel.

    Panels are created on first use and recreated after being killed.
    """

    def __init__(self, *, notify: Callable[[str], None] | None = None):
        self._panels: dict[str, ResultsPanel] = {}
        self._notify = notify
        self.errors: list[str] = []

    def panel(self, name: str) -> ResultsPanel:
        panel = self._panels.get(name)
        if panel is None or not panel.alive:
            panel = ResultsPanel(name)
            self._panels[name] = panel
        return panel

    def find_panel(self, name: str) -> ResultsPanel | None:
        panel = self._panels.get(name)
        if panel is None or not panel.alive:
            return None
        return panel

    def report_error(self, error: CompletionError) -> None:
        message = f"{type(error).__name__}: {error}"
        self.errors.append(message)
        log.error("completion_error_reported", kind=error.kind.value, error=str(error))
        if self._notify is not None:
            self._notify(message)
