"""Validation Rules — explicit rule records and the builders that make them.

Invariants:
    - Every check is PURE: reads the field set and context, returns errors, no IO
    - A check returns (field_key, message) pairs; empty list means pass
    - Blank values only fail presence (and numericality with allow_blank=False);
      other rules skip blanks
    - Nested items marked for destruction are never checked
    - Rule identity is (field, code): two rules with the same code are the same rule

Design Decisions:
    - Rules are data, not methods on a form class: the step table composes them
      and cumulative rule sets are plain tuple concatenation
    - Messages match the wording clients already render ("can't be blank")
    - Decimal for numeric coercion: "9.99" stays exact, floats never leak into money
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from formflow.core.domain_types import ID_FIELD
from formflow.core.field_set import is_blank, marked_for_destruction, normalize_nested

ErrorPairs = list[tuple[str, str]]

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class RuleContext:
    """Lookups a rule may consult. known_ids: association -> ids that exist."""
    known_ids: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def resolves(self, association: str, item_id: Any) -> bool:
        return str(item_id) in self.known_ids.get(association, frozenset())


@dataclass(frozen=True)
class Rule:
    """One validation constraint on one field."""
    field: str
    code: str
    check: Callable[[Mapping[str, Any], RuleContext], ErrorPairs] = field(
        compare=False, repr=False,
    )

    def __call__(self, values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        return self.check(values, context)


# --- Builders -----------------------------------------------------------------

def presence(field_name: str) -> Rule:
    def check(values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        if is_blank(values.get(field_name)):
            return [(field_name, "can't be blank")]
        return []

    return Rule(field_name, "presence", check)


def inclusion(field_name: str, choices: Iterable[str]) -> Rule:
    allowed = tuple(choices)

    def check(values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        value = values.get(field_name)
        if is_blank(value) or value in allowed:
            return []
        return [(field_name, "is not included in the list")]

    return Rule(field_name, f"inclusion({','.join(allowed)})", check)


def numericality(
    field_name: str,
    *,
    gte: int | Decimal | None = None,
    gt: int | Decimal | None = None,
    lte: int | Decimal | None = None,
    only_integer: bool = False,
    max_decimals: int | None = None,
    allow_blank: bool = True,
) -> Rule:
    """Number check with optional bounds and scale.

    Blank values pass unless allow_blank is False, in which case they are
    reported as "is not a number".
    """

    def check(values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        raw = values.get(field_name)
        if is_blank(raw):
            return [] if allow_blank else [(field_name, "is not a number")]
        number = to_decimal(raw)
        if number is None:
            return [(field_name, "is not a number")]
        if only_integer and not _is_integer(raw, number):
            return [(field_name, "must be an integer")]
        if max_decimals is not None and _decimal_places(number) > max_decimals:
            return [(field_name, f"must have at most {max_decimals} decimal places")]
        errors: ErrorPairs = []
        if gte is not None and number < Decimal(gte):
            errors.append((field_name, f"must be greater than or equal to {gte}"))
        if gt is not None and number <= Decimal(gt):
            errors.append((field_name, f"must be greater than {gt}"))
        if lte is not None and number > Decimal(lte):
            errors.append((field_name, f"must be less than or equal to {lte}"))
        return errors

    code = (
        f"numericality(gte={gte},gt={gt},lte={lte},only_integer={only_integer},"
        f"max_decimals={max_decimals},allow_blank={allow_blank})"
    )
    return Rule(field_name, code, check)


def length(
    field_name: str, *, maximum: int | None = None, minimum: int | None = None,
) -> Rule:
    def check(values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        value = values.get(field_name)
        if is_blank(value):
            return []
        size = len(str(value))
        if maximum is not None and size > maximum:
            return [(field_name, f"is too long (maximum is {maximum} characters)")]
        if minimum is not None and size < minimum:
            return [(field_name, f"is too short (minimum is {minimum} characters)")]
        return []

    return Rule(field_name, f"length(min={minimum},max={maximum})", check)


def nested(association: str, item_rules: Iterable[Rule]) -> Rule:
    """Apply item_rules to every live item of a nested association.

    Errors are keyed "association[i].field" with i the submitted position.
    Items carrying an id must reference a row the context knows about.
    """
    rules = tuple(item_rules)

    def check(values: Mapping[str, Any], context: RuleContext) -> ErrorPairs:
        errors: ErrorPairs = []
        for index, item in enumerate(normalize_nested(values.get(association))):
            if marked_for_destruction(item):
                continue
            prefix = f"{association}[{index}]"
            item_id = item.get(ID_FIELD)
            if not is_blank(item_id) and not context.resolves(association, item_id):
                errors.append((f"{prefix}.{ID_FIELD}", "does not exist"))
            for rule in rules:
                errors.extend(
                    (f"{prefix}.{key}", message) for key, message in rule(item, context)
                )
        return errors

    code = f"nested({';'.join(f'{r.field}:{r.code}' for r in rules)})"
    return Rule(association, code, check)


# --- Coercion -----------------------------------------------------------------

def to_decimal(value: Any) -> Decimal | None:
    """Coerce a submitted value to Decimal; None when it is not a finite number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def _is_integer(raw: Any, number: Decimal) -> bool:
    if isinstance(raw, str):
        return bool(_INTEGER_PATTERN.match(raw.strip()))
    return number == number.to_integral_value()


def _decimal_places(number: Decimal) -> int:
    # trailing zeros do not count: "9.90" has one decimal place
    exponent = number.normalize().as_tuple().exponent
    return max(0, -exponent)
