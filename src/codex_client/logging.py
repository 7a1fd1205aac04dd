from __future__ import annotations

import logging
import re
import sys
from collections.abc import Callable, Mapping, MutableMapping
from typing import Any, TypeAlias, cast

import structlog


_SENSITIVE_KEYS = {
    "authorization",
    "api_key",
    "apikey",
    "credential",
    "openai_api_key",
}

_SENSITIVE_FRAGMENTS = ("key", "token", "secret", "password", "credential")

_BEARER_RE = re.compile(r"(?i)\bBearer\s+([A-Za-z0-9._-]{6,})")

ProcessorReturn: TypeAlias = Mapping[str, Any] | str | bytes | bytearray | tuple[Any, ...]
Processor: TypeAlias = Callable[[Any, str, MutableMapping[str, Any]], ProcessorReturn]


def _redact_str(value: str, *, secrets: list[str]) -> str:
    out = value
    for secret in secrets:
        if secret in out:
            out = out.replace(secret, "[REDACTED]")
    return _BEARER_RE.sub("Bearer [REDACTED]", out)


def _is_sensitive_key(key: Any) -> bool:
    key_str = str(key).lower()
    if key_str == "max_tokens":
        return False
    return key_str in _SENSITIVE_KEYS or any(s in key_str for s in _SENSITIVE_FRAGMENTS)


def redact(obj: Any, *, secrets: list[str]) -> Any:
    if isinstance(obj, str):
        return _redact_str(obj, secrets=secrets)
    if isinstance(obj, list):
        return [redact(v, secrets=secrets) for v in obj]
    if isinstance(obj, tuple):
        return tuple(redact(v, secrets=secrets) for v in obj)
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if _is_sensitive_key(k) else redact(v, secrets=secrets)
            for k, v in obj.items()
        }
    return obj


def _make_redaction_processor(*, secrets: list[str]) -> Processor:
    secrets_norm = [s for s in secrets if isinstance(s, str) and s]

    def _processor(_logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]) -> ProcessorReturn:
        return cast(dict[str, Any], redact(dict(event_dict), secrets=secrets_norm))

    return _processor


def configure_logging(level: str = "INFO", fmt: str = "console", *, secrets: list[str] | None = None) -> None:
    """
    Route structlog output to stderr.

    stdout is reserved for completion text when running from the terminal.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, stream=sys.stderr)

    processors: list[Processor] = [
        cast(Processor, structlog.contextvars.merge_contextvars),
        cast(Processor, structlog.processors.add_log_level),
        cast(Processor, structlog.processors.TimeStamper(fmt="iso")),
        _make_redaction_processor(secrets=secrets or []),
    ]

    if fmt == "json":
        processors.append(cast(Processor, structlog.processors.JSONRenderer()))
    else:
        processors.append(cast(Processor, structlog.dev.ConsoleRenderer(colors=False)))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
