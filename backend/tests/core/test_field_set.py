"""Field set tests — permitted attributes, nested normalization, destroy flags.

Invariants:
    - permit() drops undeclared keys at both top level and nested item level
    - Index-keyed nested mappings come back as ordered lists
    - merge_into_draft() never mutates its inputs
"""

import pytest

from formflow.core.field_set import (
    is_blank, live_items, marked_for_destruction, merge_into_draft,
    normalize_nested, permit,
)


# --- permit -------------------------------------------------------------------

def test_permit_drops_undeclared_keys():
    permitted = permit({"kind": "standard", "admin": True}, ["kind", "name"])
    assert permitted == {"kind": "standard"}


def test_permit_does_not_mutate_raw():
    raw = {"kind": "standard", "admin": True}
    permit(raw, ["kind"])
    assert raw == {"kind": "standard", "admin": True}


def test_permit_filters_nested_item_fields_but_keeps_id_and_destroy():
    raw = {"variants": [{"id": "v1", "name": "Red", "cost": 3, "_destroy": "1"}]}
    permitted = permit(raw, ["variants"], {"variants": ("name", "stock")})
    assert permitted == {"variants": [{"id": "v1", "name": "Red", "_destroy": "1"}]}


def test_permit_orders_index_keyed_nested_mapping():
    raw = {"variants": {"1": {"name": "Blue"}, "0": {"name": "Red"}, "10": {"name": "Green"}}}
    permitted = permit(raw, ["variants"], {"variants": ("name",)})
    assert [v["name"] for v in permitted["variants"]] == ["Red", "Blue", "Green"]


def test_normalize_nested_discards_non_mapping_entries():
    assert normalize_nested([{"name": "a"}, "junk", 3]) == [{"name": "a"}]


def test_normalize_nested_of_scalar_is_empty():
    assert normalize_nested("Red") == []
    assert normalize_nested(None) == []


# --- destroy flag ---------------------------------------------------------------

@pytest.mark.parametrize("flag", [True, 1, "1", "true", "TRUE", "t", "on", "yes"])
def test_truthy_destroy_flags(flag):
    assert marked_for_destruction({"_destroy": flag})


@pytest.mark.parametrize("flag", [False, 0, "0", "false", "", None, "maybe"])
def test_falsy_destroy_flags(flag):
    assert not marked_for_destruction({"_destroy": flag})


def test_live_items_excludes_destroyed():
    items = [{"name": "a"}, {"name": "b", "_destroy": "1"}]
    assert live_items(items) == [{"name": "a"}]


# --- merge / blank ----------------------------------------------------------------

def test_merge_into_draft_overrides_and_leaves_inputs_untouched():
    draft = {"kind": "standard", "name": "Mug"}
    submitted = {"kind": "premium"}
    merged = merge_into_draft(draft, submitted)
    assert merged == {"kind": "premium", "name": "Mug"}
    assert draft == {"kind": "standard", "name": "Mug"}


@pytest.mark.parametrize("value", [None, "", "   ", [], {}])
def test_blank_values(value):
    assert is_blank(value)


@pytest.mark.parametrize("value", [0, "0", False, "x", [{}]])
def test_present_values(value):
    assert not is_blank(value)
