"""Step Validator — checks a field set against the cumulative rules of one step.

Invariants:
    - PURE: no IO, no async, no DB, same input always yields the same result
    - Only rules of steps 1..step run; later steps' fields are ignored
    - Nested items marked for destruction are skipped (see rules.nested)
    - Unknown step numbers raise ValueError (caller bug, not user input)

Design Decisions:
    - Cross-field lookups receive known_ids from the shell instead of querying:
      the controller loads the entity once and passes its nested ids in
"""

from collections.abc import Iterable, Mapping
from typing import Any

from formflow.core.form_definition import FormDefinition
from formflow.core.rules import RuleContext
from formflow.core.validation_result import ValidationResult


def validate(
    definition: FormDefinition,
    field_set: Mapping[str, Any],
    step: int,
    known_ids: Mapping[str, Iterable[Any]] | None = None,
) -> ValidationResult:
    """Validate field_set against every rule of steps 1..step.

    Args:
        definition: The form's step table.
        field_set: Submitted values (already permitted or raw; extra keys are ignored).
        step: Step being submitted.
        known_ids: association name -> ids of nested rows that exist.
    """
    context = RuleContext(known_ids={
        name: frozenset(str(i) for i in ids)
        for name, ids in (known_ids or {}).items()
    })
    result = ValidationResult()
    for rule in definition.rules_for(step):
        for field_key, message in rule(field_set, context):
            result.add(field_key, message)
    return result
