from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import partial

from .client import CompletionClient
from .config import CodexClientConfig
from .contracts import CompletionResult, Continuation
from .prompt import (
    EXPLAIN_INSTRUCTION,
    FIX_INSTRUCTION,
    GENERATE_TESTS_INSTRUCTION,
    REFACTOR_INSTRUCTION,
    build_prompt,
)
from .router import ResultRouter
from .surfaces import SourceSurface, Span


class Commands:
    """User-facing entry points; each one issues a single completion request."""

    def __init__(self, client: CompletionClient, cfg: CodexClientConfig, router: ResultRouter):
        self.client = client
        self.cfg = cfg
        self.router = router

    def _submit(self, prompt: str, make_continuation: Callable[[], Continuation]) -> asyncio.Task[CompletionResult]:
        # Build the continuation last: to_display creates the results panel.
        credential = self.cfg.require_api_key()
        params = self.cfg.generation_params()
        return self.client.query(prompt, params, credential, make_continuation())

    def _region_with_instruction(
        self,
        document: SourceSurface,
        span: Span,
        instruction: str,
        *,
        interactive: bool,
    ) -> asyncio.Task[CompletionResult]:
        prompt = build_prompt(document.substring(span), instruction, document.comment_marker)
        return self._submit(prompt, partial(self.router.to_display, interactive=interactive))

    def prompt_with_free_text(self, text: str, *, interactive: bool = True) -> asyncio.Task[CompletionResult]:
        return self._submit(build_prompt(text), partial(self.router.to_display, interactive=interactive))

    def fix_region(
        self, document: SourceSurface, span: Span, *, interactive: bool = True
    ) -> asyncio.Task[CompletionResult]:
        return self._region_with_instruction(document, span, FIX_INSTRUCTION, interactive=interactive)

    def explain_region(
        self, document: SourceSurface, span: Span, *, interactive: bool = True
    ) -> asyncio.Task[CompletionResult]:
        return self._region_with_instruction(document, span, EXPLAIN_INSTRUCTION, interactive=interactive)

    def generate_tests_for_region(
        self, document: SourceSurface, span: Span, *, interactive: bool = True
    ) -> asyncio.Task[CompletionResult]:
        return self._region_with_instruction(document, span, GENERATE_TESTS_INSTRUCTION, interactive=interactive)

    def refactor_region(
        self, document: SourceSurface, span: Span, *, interactive: bool = True
    ) -> asyncio.Task[CompletionResult]:
        return self._region_with_instruction(document, span, REFACTOR_INSTRUCTION, interactive=interactive)

    def prompt_with_region(
        self, document: SourceSurface, span: Span, *, interactive: bool = True
    ) -> asyncio.Task[CompletionResult]:
        prompt = build_prompt(document.substring(span))
        return self._submit(prompt, partial(self.router.to_display, interactive=interactive))

    def prompt_with_region_and_replace(self, document: SourceSurface, span: Span) -> asyncio.Task[CompletionResult]:
        prompt = build_prompt(document.substring(span))
        return self._submit(prompt, partial(self.router.to_replace, document, span))
