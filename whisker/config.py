from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .types import Delimiter


class DelimiterConfig(BaseModel):
    """Default tag markers for top-level templates and partials.

    Templates may still switch markers with a {{=<% %>=}} tag.
    """
    left: str = Field(default="{{", description="Opening tag marker")
    right: str = Field(default="}}", description="Closing tag marker")

    @field_validator("left", "right")
    @classmethod
    def _validate_marker(cls, v: str) -> str:
        if not v:
            raise ValueError("delimiter markers must not be empty")
        if any(ch.isspace() for ch in v) or "=" in v:
            raise ValueError("delimiter markers may not contain whitespace or '='")
        return v

    def to_delimiter(self) -> Delimiter:
        return Delimiter(self.left, self.right)


class RendererConfig(BaseModel):
    """Top-level configuration for a Renderer, usually loaded from YAML."""
    description: str | None = Field(default=None, description="Optional description of this configuration")
    delimiters: DelimiterConfig = Field(default_factory=DelimiterConfig)
    escape_html: bool = Field(default=True, description="HTML-escape {{name}} interpolations")
    max_depth: int = Field(default=50, ge=1, description="Maximum nesting of partial and lambda expansions")
    partials: dict[str, str] = Field(default_factory=dict, description="Map of partial name to template text")


def load_config(path: str | Path) -> RendererConfig:
    """Load YAML config from 'path' and validate into a RendererConfig."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    try:
        return RendererConfig.model_validate(data)
    except ValidationError as e:
        # Re-raise with a cleaner message for CLI users
        raise ValueError(str(e))


def load_view(path: str | Path) -> Any:
    """Load the data view for a render from a YAML or JSON file.

    '-' reads from stdin. An empty document yields an empty mapping.
    """
    if str(path) == "-":
        data = yaml.safe_load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    return {} if data is None else data
