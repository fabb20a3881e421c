"""Form definition tests — cumulative rule tables and step numbering.

Invariants:
    - rules_for(k + 1) is a superset of rules_for(k) for every k < N
    - permitted_fields is cumulative the same way
    - Steps must be numbered 1..N
"""

import pytest

from formflow.core.form_definition import FormDefinition, StepDefinition
from formflow.core.rules import length, numericality, presence
from formflow.domain.product_form import FORMS, PRODUCT_FORM


def _three_step_form() -> FormDefinition:
    return FormDefinition(
        name="signup",
        steps=(
            StepDefinition(1, "account", ("email",), (presence("email"),)),
            StepDefinition(2, "profile", ("nickname",), (length("nickname", maximum=20),)),
            StepDefinition(3, "billing", ("seats",), (numericality("seats", gt=0),)),
        ),
    )


@pytest.mark.parametrize("definition", [PRODUCT_FORM, _three_step_form()])
def test_rule_sets_grow_monotonically(definition):
    for k in range(1, definition.terminal_step):
        assert set(definition.rules_for(k)) <= set(definition.rules_for(k + 1))


def test_rules_for_is_cumulative_prefix():
    form = _three_step_form()
    assert form.rules_for(2)[: len(form.rules_for(1))] == form.rules_for(1)
    assert [r.field for r in form.rules_for(3)] == ["email", "nickname", "seats"]


def test_permitted_fields_cumulative():
    form = _three_step_form()
    assert form.permitted_fields(1) == ("email",)
    assert form.permitted_fields(3) == ("email", "nickname", "seats")


def test_terminal_step():
    form = _three_step_form()
    assert form.terminal_step == 3
    assert form.is_terminal(3)
    assert not form.is_terminal(2)


def test_unknown_step_raises():
    with pytest.raises(ValueError):
        PRODUCT_FORM.rules_for(0)
    with pytest.raises(ValueError):
        PRODUCT_FORM.permitted_fields(3)


def test_non_contiguous_steps_rejected():
    with pytest.raises(ValueError):
        FormDefinition(
            name="broken",
            steps=(
                StepDefinition(1, "a", ("x",)),
                StepDefinition(3, "c", ("y",)),
            ),
        )


def test_describe_lists_each_step():
    steps = PRODUCT_FORM.describe()
    assert [s["name"] for s in steps] == ["kind", "pricing"]
    assert steps[-1]["terminal"] is True
    assert steps[1]["permitted_fields"] == ["kind", "name", "price", "sku", "variants"]


def test_product_form_registered():
    assert FORMS["product"] is PRODUCT_FORM
    assert PRODUCT_FORM.nested_item_fields() == {"variants": ("name", "stock")}
