"""Base model for request, response and stored-document schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    # Stored bodies may carry fields an older or newer schema does not know.
    model_config = ConfigDict(
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )


__all__ = ["BaseSchema"]
