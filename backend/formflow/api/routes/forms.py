"""Form Routes — expose step tables so clients can render each step.

Invariants:
    - Read-only; served from the FORMS registry, never from the database
"""

from fastapi import APIRouter

from formflow.core.errors import UnknownFormError
from formflow.domain.product_form import FORMS

router = APIRouter(prefix="/api/v1/forms", tags=["forms"])


@router.get("")
async def list_forms():
    return {"forms": sorted(FORMS)}


@router.get("/{form_name}")
async def get_form(form_name: str):
    """Step table: number, name, fields, cumulative permitted fields."""
    definition = FORMS.get(form_name)
    if definition is None:
        raise UnknownFormError(form_name)
    return {
        "form": definition.name,
        "terminal_step": definition.terminal_step,
        "steps": definition.describe(),
        "nested_associations": {
            name: list(fields)
            for name, fields in definition.nested_item_fields().items()
        },
    }
