"""Flow schema tests — request envelopes only; form rules are not pydantic's job.

Invariants:
    - step must be >= 1
    - form defaults to "product" and must be a lowercase identifier
    - fields accepts any JSON object, including invalid form values
"""

from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from formflow.schemas.flow import FlowCreate, ProductResponse, SubmissionCreate


def test_flow_create_defaults_to_product():
    body = FlowCreate()
    assert body.form == "product"
    assert body.entity_id is None


def test_flow_create_rejects_odd_form_names():
    with pytest.raises(ValidationError):
        FlowCreate(form="Product Form!")


def test_submission_requires_positive_step():
    with pytest.raises(ValidationError):
        SubmissionCreate(step=0)


def test_submission_accepts_invalid_form_values():
    body = SubmissionCreate(step=2, fields={"price": -5, "variants": {"0": {"name": ""}}})
    assert body.fields["price"] == -5


def test_submission_rejects_empty_field_names():
    with pytest.raises(ValidationError):
        SubmissionCreate(step=1, fields={" ": "x"})


def test_product_response_serializes_price_exactly():
    product = ProductResponse(
        id=uuid4(), kind="standard", price=Decimal("10.00"),
        created_at="2026-10-18T10:00:00Z", updated_at="2026-10-18T10:00:00Z",
    )
    assert product.model_dump(mode="json")["price"] == "10.00"
