from __future__ import annotations

import asyncio
from typing import Any

import httpx
import structlog

from .config import OPENAI_COMPLETIONS_URL, CodexClientConfig
from .contracts import CompletionResult, Continuation, Err, GenerationParams, Ok, PendingCompletion
from .errors import ConfigurationError, ParsingError, TransportError
from .metrics import completion_request_latency_seconds, completion_requests_total, continuation_errors_total
from .wire import CompletionRequestBody, extract_completion_text

log = structlog.get_logger()


class CompletionClient:
    """
    Non-blocking client for an OpenAI-style ``/v1/completions`` endpoint.

    ``query`` schedules one POST per call on the running event loop and hands
    the decoded outcome to the caller's continuation exactly once. Nothing is
    retried, cached or de-duplicated.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        endpoint_url: str = OPENAI_COMPLETIONS_URL,
        timeout_seconds: float = 60,
    ):
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._endpoint_url = endpoint_url
        self._inflight: set[asyncio.Task[CompletionResult]] = set()

    @classmethod
    def from_config(cls, cfg: CodexClientConfig, *, client: httpx.AsyncClient | None = None) -> "CompletionClient":
        return cls(client=client, endpoint_url=cfg.endpoint_url, timeout_seconds=cfg.request_timeout_seconds)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    def query(
        self,
        prompt: str,
        params: GenerationParams,
        credential: str,
        continuation: Continuation,
    ) -> asyncio.Task[CompletionResult]:
        if not credential or not credential.strip():
            raise ConfigurationError("Missing API credential (set OPENAI_API_KEY).")

        loop = asyncio.get_running_loop()
        pending = PendingCompletion(continuation)
        pending.mark_dispatched()
        task = loop.create_task(self._run(pending, prompt, params, credential))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        log.debug("completion_dispatched", model=params.model, prompt_chars=len(prompt))
        return task

    async def _run(
        self,
        pending: PendingCompletion,
        prompt: str,
        params: GenerationParams,
        credential: str,
    ) -> CompletionResult:
        try:
            result = await self.complete(prompt, params, credential)
        except Exception as e:
            error = TransportError(f"Completion request aborted: {type(e).__name__}: {e}")
            error.__cause__ = e
            completion_requests_total.labels(status=error.kind.value).inc()
            log.exception("completion_aborted", error=str(e))
            result = Err(error)

        pending.mark_decoded(result)
        try:
            return pending.deliver()
        except Exception as e:
            continuation_errors_total.inc()
            log.exception("continuation_failed", error=str(e))
            raise

    async def complete(self, prompt: str, params: GenerationParams, credential: str) -> CompletionResult:
        try:
            text = await self._fetch(prompt, params, credential)
        except (ParsingError, TransportError) as e:
            completion_requests_total.labels(status=e.kind.value).inc()
            log.warning("completion_failed", kind=e.kind.value, error=str(e), cause=repr(e.__cause__))
            return Err(e)

        completion_requests_total.labels(status="ok").inc()
        log.debug("completion_decoded", model=params.model, completion_chars=len(text))
        return Ok(text)

    async def _fetch(self, prompt: str, params: GenerationParams, credential: str) -> str:
        body = CompletionRequestBody(
            model=params.model,
            prompt=prompt,
            max_tokens=params.max_tokens,
            temperature=params.temperature,
        )
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }

        try:
            with completion_request_latency_seconds.time():
                resp = await self._client.post(self._endpoint_url, json=body.model_dump(), headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError("Completion request timed out.") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Completion request failed: {e}") from e
        except Exception as e:
            # httpx.InvalidURL, a closed client, or a transport that raised its own error.
            raise TransportError(f"Completion request could not be sent: {type(e).__name__}: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ParsingError(f"Completion response was not valid JSON (status {resp.status_code}).") from e

        try:
            return extract_completion_text(data)
        except ParsingError as e:
            if resp.status_code >= 400:
                raise ParsingError(f"Upstream error {resp.status_code}: {e}") from e.__cause__
            raise
