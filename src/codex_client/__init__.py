"""Asynchronous editor client for OpenAI-style text completion endpoints."""

from .client import CompletionClient
from .commands import Commands
from .config import CodexClientConfig
from .contracts import CompletionResult, Err, GenerationParams, Ok
from .errors import CompletionError, ConfigurationError, ParsingError, StaleTargetError, TransportError
from .prompt import build_prompt
from .router import ResultRouter
from .surfaces import ResultsPanel, Span, TextDocument, Workspace

__all__ = [
    "CodexClientConfig",
    "Commands",
    "CompletionClient",
    "CompletionError",
    "CompletionResult",
    "ConfigurationError",
    "Err",
    "GenerationParams",
    "Ok",
    "ParsingError",
    "ResultRouter",
    "ResultsPanel",
    "Span",
    "StaleTargetError",
    "TextDocument",
    "TransportError",
    "Workspace",
    "build_prompt",
]
