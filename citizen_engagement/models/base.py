# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, Field, ConfigDict
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new MongoDB ObjectId as string."""
    return str(ObjectId())


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseEntity(BaseModel):
    """
    Base entity for all domain objects.

    Entities are immutable values: changes are expressed with
    ``model_copy(update=...)`` so an aggregate is only ever replaced as a whole.
    """
    
    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Entities never change in place
        frozen=True,
        # Arbitrary types allowed
        arbitrary_types_allowed=True
    )
    
    id: str = Field(default_factory=generate_object_id, description="Unique identifier")
