from __future__ import annotations

import os

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .contracts import DEFAULT_MAX_TOKENS, GenerationParams
from .errors import ConfigurationError

OPENAI_COMPLETIONS_URL = "https://api.openai.com/v1/completions"


class CodexClientConfig(BaseModel):
    # Values taken from the environment go through the same validators as explicit ones.
    model_config = ConfigDict(validate_default=True)

    # Credential
    api_key: str | None = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))

    # Completion endpoint
    endpoint_url: str = Field(default_factory=lambda: os.getenv("CODEX_ENDPOINT_URL", OPENAI_COMPLETIONS_URL))
    model: str = Field(default_factory=lambda: os.getenv("CODEX_MODEL", "gpt-3.5-turbo-instruct"))
    max_tokens: int = Field(
        default_factory=lambda: int(os.getenv("CODEX_MAX_TOKENS", str(DEFAULT_MAX_TOKENS)))
    )
    temperature: float = Field(
        default_factory=lambda: float(os.getenv("CODEX_TEMPERATURE", "0")), allow_inf_nan=False
    )
    request_timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("CODEX_REQUEST_TIMEOUT_SECONDS", "60"))
    )

    # Editing surface
    comment_marker: str = Field(default_factory=lambda: os.getenv("CODEX_COMMENT_MARKER", "#"))
    results_panel_name: str = Field(default_factory=lambda: os.getenv("CODEX_RESULTS_PANEL", "*codex*"))

    # Observability
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: os.getenv("LOG_FORMAT", "console"))
    enable_metrics: bool = Field(
        default_factory=lambda: os.getenv("ENABLE_METRICS", "false").lower() == "true"
    )
    metrics_bind: str = Field(default_factory=lambda: os.getenv("METRICS_BIND", "127.0.0.1"))
    metrics_port: int = Field(default_factory=lambda: int(os.getenv("METRICS_PORT", "9109")))

    @field_validator("max_tokens")
    @classmethod
    def _validate_max_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_tokens must be > 0.")
        return v

    @field_validator("endpoint_url")
    @classmethod
    def _validate_endpoint_url(cls, v: str) -> str:
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"endpoint_url is not a valid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("endpoint_url must be an http(s) URL with a host.")
        return v

    def require_api_key(self) -> str:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("OPENAI_API_KEY is required to query the completion endpoint.")
        return self.api_key

    def generation_params(self) -> GenerationParams:
        return GenerationParams(model=self.model, max_tokens=self.max_tokens, temperature=self.temperature)
