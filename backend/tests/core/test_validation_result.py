"""ValidationResult tests — accumulation, dedup, full messages."""

from formflow.core.validation_result import ValidationResult, humanize


def test_empty_result_is_valid():
    result = ValidationResult()
    assert result.is_valid
    assert result.to_dict() == {}
    assert result.full_messages() == []


def test_duplicate_messages_collapse():
    result = ValidationResult()
    result.add("kind", "can't be blank")
    result.add("kind", "can't be blank")
    assert result.to_dict() == {"kind": ["can't be blank"]}


def test_full_messages_prefix_field_but_not_base():
    result = ValidationResult()
    result.add("price", "must be greater than or equal to 0")
    result.add_base("Product could not be saved")
    assert result.full_messages() == [
        "Price must be greater than or equal to 0",
        "Product could not be saved",
    ]


def test_humanize_nested_key():
    assert humanize("variants[0].name") == "Variants[0] name"
    assert humanize("stock_count") == "Stock count"


def test_merge_combines_fields():
    a = ValidationResult()
    a.add("kind", "can't be blank")
    b = ValidationResult()
    b.add("kind", "can't be blank")
    b.add("price", "is not a number")
    a.merge(b)
    assert a.to_dict() == {"kind": ["can't be blank"], "price": ["is not a number"]}
    assert a.fields() == ["kind", "price"]
