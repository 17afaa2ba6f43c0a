"""Pydantic schemas for carousel products.

Learn: Separate "Create" schemas (input) from "Read" schemas (output);
"Update" has every field optional so PUT can be partial.
"""

import uuid
from datetime import datetime
from typing import Annotated, Optional

from pydantic import StringConstraints

from rentdesk.schemas.account import CamelModel

Trimmed = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ProductCreate(CamelModel):
    code: Annotated[
        str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)
    ]
    name: Trimmed
    description: Trimmed
    image_url: Trimmed
    is_active: bool = True


class ProductUpdate(CamelModel):
    code: Optional[
        Annotated[
            str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)
        ]
    ] = None
    name: Optional[Trimmed] = None
    description: Optional[Trimmed] = None
    image_url: Optional[Trimmed] = None
    is_active: Optional[bool] = None


class ProductRead(CamelModel):
    id: uuid.UUID
    code: str
    name: str
    description: str
    image_url: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductImage(CamelModel):
    image_url: str
