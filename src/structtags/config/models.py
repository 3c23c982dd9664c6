"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, structtags.toml only holds overrides.
"""

from __future__ import annotations

from pydantic import BaseModel


class DecodeConfig(BaseModel):
    """[decode] section."""

    model_config = {"frozen": True}

    tag_name: str = "tag"
    cache: bool = True


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    enabled: bool = True
