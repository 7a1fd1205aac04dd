from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    PARSING = "parsing"
    TRANSPORT = "transport"
    TARGET = "target"


class CompletionError(Exception):
    """Base error for completion request failures."""

    kind: ErrorKind


class ConfigurationError(CompletionError):
    """Missing or invalid client configuration. Raised before any request is sent."""

    kind = ErrorKind.CONFIGURATION


class ParsingError(CompletionError):
    """Unexpected upstream response shape / contract mismatch."""

    kind = ErrorKind.PARSING


class TransportError(CompletionError):
    """Network-level failure talking to the completion endpoint."""

    kind = ErrorKind.TRANSPORT


class StaleTargetError(CompletionError):
    """The edit target changed underneath an in-flight request."""

    kind = ErrorKind.TARGET
