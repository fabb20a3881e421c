"""Flow Schemas — Pydantic models for the flow and product endpoints.

Invariants:
    - FlowCreate.form: 1-50 chars, lowercase identifier
    - SubmissionCreate.step >= 1; fields is a JSON object (values unchecked here)
    - Field-level form rules are NOT expressed here: they run in core/validate_step
      so that failures come back as Reject, not as a 400 envelope

Design Decisions:
    - fields typed dict[str, Any]: the permitted-attribute filter decides what survives
    - Decimal price in ProductResponse: serialized as a string, no float rounding
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class FlowCreate(BaseModel):
    """Start a flow. entity_id present -> update flow."""
    form: str = Field("product", min_length=1, max_length=50, pattern=r"^[a-z_]+$")
    entity_id: UUID | None = None


class SubmissionCreate(BaseModel):
    """One step's submission."""
    step: int = Field(ge=1)
    fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("fields")
    @classmethod
    def reject_empty_field_names(cls, v: dict[str, Any]) -> dict[str, Any]:
        for key in v:
            if not key.strip():
                raise ValueError("field names cannot be empty")
        return v


class FlowResponse(BaseModel):
    """Public-facing flow state."""
    flow_id: UUID
    form: str
    flow_kind: str
    status: str
    current_step: int
    step_name: str
    terminal_step: int
    entity_id: UUID | None = None
    draft: dict[str, Any] = Field(default_factory=dict)


class VariantResponse(BaseModel):
    id: UUID
    name: str
    stock: int | None = None


class ProductResponse(BaseModel):
    """Persisted product with its variants."""
    id: UUID
    kind: str
    name: str | None = None
    price: Decimal
    sku: str | None = None
    variants: list[VariantResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
