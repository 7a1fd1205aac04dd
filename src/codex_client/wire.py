from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator

from .errors import ParsingError


class CompletionRequestBody(BaseModel):
    model: str
    prompt: str
    max_tokens: int
    temperature: float = Field(default=0.0, allow_inf_nan=False)

    @field_validator("max_tokens")
    @classmethod
    def _validate_max_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_tokens must be > 0.")
        return v


class CompletionChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    text: StrictStr


class CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    choices: list[CompletionChoice] = Field(min_length=1)


def _upstream_error_message(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str):
        return error
    return None


def extract_completion_text(data: Any) -> str:
    """Pull ``choices[0].text`` out of a decoded response body, trimmed."""
    if not isinstance(data, dict):
        raise ParsingError("Completion response is not a JSON object.")
    try:
        parsed = CompletionResponse.model_validate(data)
    except ValidationError as e:
        upstream = _upstream_error_message(data)
        if upstream:
            raise ParsingError(f"Unexpected completion response: {upstream}") from e
        raise ParsingError("Unexpected completion response shape.") from e
    return parsed.choices[0].text.strip()
