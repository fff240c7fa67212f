"""Shared Pydantic base model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class CycleCastBase(BaseModel):
    """Base model with shared config for all CycleCast schemas."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
