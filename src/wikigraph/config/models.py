"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, wikigraph.toml only contains
overrides. An empty file (or none at all) gives a working local setup.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    url: str = "sqlite:///wikigraph.db"
    autocomplete_limit: int = Field(default=10, ge=1)


class TraversalConfig(BaseModel):
    """[traversal] section."""

    model_config = {"frozen": True}

    max_nodes: int = Field(default=100, ge=1)
    aggressive_threshold: int = Field(default=60, ge=0)
    fanout_limit: int = Field(default=20, ge=0)
    max_depth: int = Field(default=1000, ge=1)

