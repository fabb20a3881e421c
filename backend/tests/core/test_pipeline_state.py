"""Pipeline state tests — pure submission decisions and forward-only transitions.

Invariants:
    - Reject leaves step and draft untouched
    - Advance moves exactly one step and carries only permitted fields
    - Terminal valid submission yields ReadyToCommit with the merged draft
    - Earlier steps, later steps and committed flows are refused
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from formflow.core.domain_types import EntityId, FlowStatus, OutcomeType
from formflow.core.errors import FlowAlreadyCommittedError, StepOutOfSequenceError
from formflow.core.pipeline_state import (
    Advance, Commit, PipelineState, ReadyToCommit, Reject,
    apply_advance, evaluate_submission, mark_committed, persistence_rejection,
)
from formflow.domain.product_form import PRODUCT_FORM


def _state() -> PipelineState:
    return PipelineState(form_name="product")


def test_new_state_starts_at_step_one():
    state = _state()
    assert state.current_step == 1
    assert state.status == FlowStatus.IN_PROGRESS
    assert state.draft == {}


def test_invalid_submission_rejects_without_mutation():
    state = _state()
    decision = evaluate_submission(state, PRODUCT_FORM, {}, 1)
    assert isinstance(decision, Reject)
    assert decision.result.to_dict() == {"kind": ["can't be blank"]}
    assert state.current_step == 1
    assert state.draft == {}


def test_valid_step_one_advances_with_permitted_fields_only():
    state = _state()
    decision = evaluate_submission(
        state, PRODUCT_FORM, {"kind": "standard", "admin": True}, 1,
    )
    assert isinstance(decision, Advance)
    assert decision.next_step == 2
    assert decision.field_set == {"kind": "standard"}

    apply_advance(state, decision)
    assert state.current_step == 2
    assert state.draft == {"kind": "standard"}


def test_terminal_submission_is_ready_to_commit():
    state = _state()
    apply_advance(state, evaluate_submission(state, PRODUCT_FORM, {"kind": "standard", "name": "Mug"}, 1))
    decision = evaluate_submission(state, PRODUCT_FORM, {"kind": "standard", "price": 10}, 2)
    assert isinstance(decision, ReadyToCommit)
    assert decision.draft == {"kind": "standard", "name": "Mug", "price": 10}
    # still nothing committed
    assert state.status == FlowStatus.IN_PROGRESS


def test_terminal_rejection_keeps_step():
    state = _state()
    apply_advance(state, evaluate_submission(state, PRODUCT_FORM, {"kind": "standard"}, 1))
    decision = evaluate_submission(state, PRODUCT_FORM, {"kind": "standard", "price": -5}, 2)
    assert isinstance(decision, Reject)
    assert state.current_step == 2


def test_revisiting_an_advanced_step_is_refused():
    state = _state()
    apply_advance(state, evaluate_submission(state, PRODUCT_FORM, {"kind": "standard"}, 1))
    with pytest.raises(StepOutOfSequenceError) as exc:
        evaluate_submission(state, PRODUCT_FORM, {"kind": "premium"}, 1)
    assert exc.value.http_status == 409
    assert exc.value.current == 2


def test_skipping_ahead_is_refused():
    with pytest.raises(StepOutOfSequenceError):
        evaluate_submission(_state(), PRODUCT_FORM, {"kind": "standard", "price": 1}, 2)


def test_committed_flow_refuses_submissions():
    state = _state()
    mark_committed(state, {"kind": "standard", "price": 1}, EntityId(uuid4()))
    assert state.committed
    with pytest.raises(FlowAlreadyCommittedError):
        evaluate_submission(state, PRODUCT_FORM, {"kind": "standard"}, 1)


def test_outcome_dicts():
    entity_id = EntityId(uuid4())
    assert Advance(next_step=2).to_dict() == {"outcome": "advance", "next_step": 2}
    assert Commit(entity_id=entity_id).to_dict() == {
        "outcome": "commit", "entity_id": str(entity_id),
    }
    rejection = persistence_rejection("Product could not be saved")
    assert rejection.outcome == OutcomeType.REJECT
    assert rejection.to_dict() == {
        "outcome": "reject",
        "errors": {"base": ["Product could not be saved"]},
        "full_messages": ["Product could not be saved"],
    }


def test_state_to_dict_serializes_draft():
    state = _state()
    state.draft = {"kind": "standard", "price": Decimal("9.50")}
    snapshot = state.to_dict(PRODUCT_FORM)
    assert snapshot["current_step"] == 1
    assert snapshot["step_name"] == "kind"
    assert snapshot["terminal_step"] == 2
    assert snapshot["draft"] == {"kind": "standard", "price": "9.50"}
