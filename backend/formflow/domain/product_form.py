"""Product Form — the two-step product listing flow and the form registry.

Invariants:
    - Step 1 (kind) must pass before pricing is accepted
    - Step 2 (pricing) is terminal and re-runs every step 1 rule
    - FORMS is the only place a form name resolves to a definition

Design Decisions:
    - Kinds limited to a closed set so downstream pricing logic can branch on them
    - Variant stock optional: a variant may be listed before inventory is known
    - Price precision checked at validation so the column never rounds a value
"""

from decimal import Decimal

from formflow.core.form_definition import FormDefinition, NestedAssociation, StepDefinition
from formflow.core.rules import inclusion, length, nested, numericality, presence

PRODUCT_KINDS = ("standard", "premium", "digital")

# bounds of the Numeric(12, 2) price column
MAX_PRICE = Decimal("9999999999.99")

VARIANT_FIELDS = ("name", "stock")

PRODUCT_FORM = FormDefinition(
    name="product",
    steps=(
        StepDefinition(
            number=1,
            name="kind",
            fields=("kind", "name"),
            rules=(
                presence("kind"),
                inclusion("kind", PRODUCT_KINDS),
                length("name", maximum=120),
            ),
        ),
        StepDefinition(
            number=2,
            name="pricing",
            fields=("price", "sku", "variants"),
            rules=(
                presence("price"),
                numericality("price", gte=0, lte=MAX_PRICE, max_decimals=2),
                length("sku", maximum=64),
                nested("variants", (
                    presence("name"),
                    length("name", maximum=80),
                    numericality("stock", gte=0, only_integer=True),
                )),
            ),
        ),
    ),
    nested_associations=(NestedAssociation("variants", VARIANT_FIELDS),),
)

FORMS: dict[str, FormDefinition] = {
    PRODUCT_FORM.name: PRODUCT_FORM,
}
