from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from .errors import CompletionError, ConfigurationError, ErrorKind

DEFAULT_MAX_TOKENS = 1024


@dataclass(frozen=True)
class GenerationParams:
    model: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = 0.0

    def __post_init__(self) -> None:
        if not self.model:
            raise ConfigurationError("model must be a non-empty string.")
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
            raise ConfigurationError("max_tokens must be a positive integer.")
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            raise ConfigurationError("temperature must be a number.")
        if not math.isfinite(self.temperature):
            raise ConfigurationError("temperature must be a finite number.")


@dataclass(frozen=True)
class Ok:
    text: str


@dataclass(frozen=True)
class Err:
    error: CompletionError

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def detail(self) -> str:
        return str(self.error)


CompletionResult: TypeAlias = Ok | Err
Continuation: TypeAlias = Callable[[CompletionResult], None]


class RequestState(str, Enum):
    IDLE = "idle"
    DISPATCHED = "dispatched"
    DECODED = "decoded"
    DELIVERED = "delivered"


class PendingCompletion:
    """
    One in-flight request and the continuation waiting for it.

    Walks idle -> dispatched -> decoded -> delivered. Delivery happens once;
    the continuation reference is dropped as soon as it has been called.
    """

    def __init__(self, continuation: Continuation):
        self._continuation: Continuation | None = continuation
        self._result: CompletionResult | None = None
        self.state = RequestState.IDLE

    @property
    def result(self) -> CompletionResult | None:
        return self._result

    def mark_dispatched(self) -> None:
        if self.state is not RequestState.IDLE:
            raise RuntimeError(f"Cannot dispatch a request in state {self.state.value!r}.")
        self.state = RequestState.DISPATCHED

    def mark_decoded(self, result: CompletionResult) -> None:
        if self.state is not RequestState.DISPATCHED:
            raise RuntimeError(f"Cannot decode a request in state {self.state.value!r}.")
        self._result = result
        self.state = RequestState.DECODED

    def deliver(self) -> CompletionResult:
        if self.state is not RequestState.DECODED or self._continuation is None or self._result is None:
            raise RuntimeError(f"Cannot deliver a request in state {self.state.value!r}.")
        continuation, self._continuation = self._continuation, None
        self.state = RequestState.DELIVERED
        continuation(self._result)
        return self._result
