"""Pydantic configuration models for phaselayer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from phaselayer.constants import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_LOG_LEVEL,
    ERROR_CONTEXT_KEY,
    ERROR_HANDLER_BODY,
    ERROR_HANDLER_STATUS,
    ERROR_PHASE,
    FINAL_HANDLER_BODY,
    FINAL_HANDLER_STATUS,
    REQUEST_PHASE,
)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TerminalResponseConfig(BaseModel):
    """Fixed response written by a terminal handler."""

    status_code: int = Field(..., ge=100, le=599, description="HTTP status code.")
    body: str = Field(default="", description="Plain response body.")
    content_type: str = Field(default=DEFAULT_CONTENT_TYPE, min_length=1)


class PhaseSettings(BaseModel):
    """Names of the well-known phases and the failure context key."""

    request: str = Field(default=REQUEST_PHASE, min_length=1)
    error: str = Field(default=ERROR_PHASE, min_length=1)
    error_context_key: str = Field(
        default=ERROR_CONTEXT_KEY,
        min_length=1,
        description="Request context key holding the trapped failure.",
    )

    @model_validator(mode="after")
    def _distinct_phases(self) -> "PhaseSettings":
        if self.request == self.error:
            raise ValueError("request and error phases must have different names")
        return self


class LayerSettings(BaseModel):
    """Top-level phaselayer configuration."""

    version: Literal["1"] = "1"
    phases: PhaseSettings = Field(default_factory=PhaseSettings)
    final_handler: TerminalResponseConfig = Field(
        default_factory=lambda: TerminalResponseConfig(
            status_code=FINAL_HANDLER_STATUS, body=FINAL_HANDLER_BODY
        ),
        description="Reply used when a phase chain ends without a terminal.",
    )
    error_handler: TerminalResponseConfig = Field(
        default_factory=lambda: TerminalResponseConfig(
            status_code=ERROR_HANDLER_STATUS, body=ERROR_HANDLER_BODY
        ),
        description="Reply used when the error phase chain ends.",
    )
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, v: object) -> object:
        return str(v) if isinstance(v, int) else v

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return upper
