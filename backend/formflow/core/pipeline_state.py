"""Pipeline State — per-flow step counter, draft, and the pure submission decision.

Invariants:
    - current_step only moves forward, by exactly 1, and only on a valid submission
    - A rejected submission leaves current_step and draft untouched
    - Only the current step may be submitted; earlier steps are closed once advanced
    - Nothing here persists: ReadyToCommit hands the final draft to the shell
    - A committed flow accepts no further submissions

Design Decisions:
    - In-memory dataclass, not an ORM row: no draft rows before the terminal step
    - evaluate_submission() is pure and raises only for sequencing errors;
      field errors travel inside Reject so the caller can redisplay the step
    - Outcome records carry to_dict() so routes never shape responses by hand
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar
from uuid import uuid4

from formflow.core.domain_types import (
    FIRST_STEP, EntityId, FieldSet, FlowId, FlowKind, FlowStatus, OutcomeType,
)
from formflow.core.errors import (
    ErrorContext, FlowAlreadyCommittedError, StepOutOfSequenceError,
)
from formflow.core.field_set import merge_into_draft, permit
from formflow.core.form_definition import FormDefinition
from formflow.core.validate_step import validate
from formflow.core.validation_result import ValidationResult


@dataclass
class PipelineState:
    """One end-user interaction: its step, its draft, its target entity."""

    form_name: str
    flow_kind: FlowKind = FlowKind.CREATE
    flow_id: FlowId = field(default_factory=lambda: FlowId(uuid4()))
    current_step: int = FIRST_STEP
    status: FlowStatus = FlowStatus.IN_PROGRESS
    draft: FieldSet = field(default_factory=dict)
    entity_id: EntityId | None = None
    # association name -> ids of nested rows on the persisted entity
    known_ids: dict[str, set[str]] = field(default_factory=dict)
    submission_count: int = 0

    @property
    def committed(self) -> bool:
        return self.status == FlowStatus.COMMITTED

    def error_context(self, step: int | None = None) -> ErrorContext:
        return ErrorContext(
            flow_id=str(self.flow_id),
            step=step if step is not None else self.current_step,
            entity_id=str(self.entity_id) if self.entity_id else None,
        )

    def to_dict(self, definition: FormDefinition) -> dict[str, Any]:
        return {
            "flow_id": str(self.flow_id),
            "form": self.form_name,
            "flow_kind": self.flow_kind.value,
            "status": self.status.value,
            "current_step": self.current_step,
            "step_name": definition.step_name(self.current_step),
            "terminal_step": definition.terminal_step,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "draft": _jsonable(self.draft),
        }


# --- Outcomes -----------------------------------------------------------------

@dataclass(frozen=True)
class Advance:
    """Valid, non-terminal: move to next_step."""
    outcome: ClassVar[OutcomeType] = OutcomeType.ADVANCE
    next_step: int
    field_set: FieldSet = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": self.outcome.value, "next_step": self.next_step}


@dataclass(frozen=True)
class Commit:
    """Terminal step persisted."""
    outcome: ClassVar[OutcomeType] = OutcomeType.COMMIT
    entity_id: EntityId

    def to_dict(self) -> dict[str, Any]:
        return {"outcome": self.outcome.value, "entity_id": str(self.entity_id)}


@dataclass(frozen=True)
class Reject:
    """Invalid submission (or failed commit); state unchanged."""
    outcome: ClassVar[OutcomeType] = OutcomeType.REJECT
    result: ValidationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "errors": self.result.to_dict(),
            "full_messages": self.result.full_messages(),
        }


@dataclass(frozen=True)
class ReadyToCommit:
    """Valid terminal submission; the shell must persist draft."""
    draft: FieldSet


Outcome = Advance | Commit | Reject
Decision = Advance | Reject | ReadyToCommit


# --- Pure transitions ---------------------------------------------------------

def evaluate_submission(
    state: PipelineState,
    definition: FormDefinition,
    raw: dict[str, Any],
    step: int,
) -> Decision:
    """Decide what a submission does without touching state.

    Raises:
        FlowAlreadyCommittedError: the flow already committed.
        StepOutOfSequenceError: step is not the flow's current step.
    """
    if state.committed:
        raise FlowAlreadyCommittedError(state.error_context(step))
    if step != state.current_step:
        raise StepOutOfSequenceError(step, state.current_step, state.error_context(step))

    field_set = permit(
        raw, definition.permitted_fields(step), definition.nested_item_fields(),
    )
    result = validate(definition, field_set, step, state.known_ids)
    if not result.is_valid:
        return Reject(result)
    if definition.is_terminal(step):
        return ReadyToCommit(draft=merge_into_draft(state.draft, field_set))
    return Advance(next_step=step + 1, field_set=field_set)


def apply_advance(state: PipelineState, advance: Advance) -> None:
    """Merge the accepted field set into the draft and move one step on."""
    state.draft = merge_into_draft(state.draft, advance.field_set)
    state.current_step = advance.next_step


def mark_committed(state: PipelineState, draft: FieldSet, entity_id: EntityId) -> None:
    state.draft = draft
    state.entity_id = entity_id
    state.status = FlowStatus.COMMITTED


def persistence_rejection(message: str) -> Reject:
    """Entity-level rejection for a commit the store refused."""
    result = ValidationResult()
    result.add_base(message)
    return Reject(result)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)
