"""Pipeline Controller — async shell around the pure submission decision.

Invariants:
    - Reject never changes the flow (step counter, draft, status)
    - Advance increments current_step by exactly 1 and merges the accepted fields
    - Commit persists exactly once; the flow is COMMITTED only after save() returns
    - A PersistenceError at commit becomes Reject with a "base" message and
      leaves the flow at the terminal step with its draft intact
    - Update flows read the entity once, in start(), never again before commit

Design Decisions:
    - Controller depends on the EntityRepository protocol: tests pass a fake,
      routes pass SqlProductRepository bound to the request session
    - Resubmitting just the final step after a failed commit is the recovery path;
      restarting from step 1 is never required
"""

import logging
from collections.abc import Mapping
from typing import Any

from formflow.core.domain_types import EntityId, FlowKind
from formflow.core.errors import ErrorContext, PersistenceError, ResourceNotFoundError, UnknownFormError
from formflow.core.form_definition import FormDefinition
from formflow.core.pipeline_state import (
    Advance, Commit, Outcome, PipelineState, ReadyToCommit, Reject,
    apply_advance, evaluate_submission, mark_committed, persistence_rejection,
)
from formflow.core.repository_protocols import EntityRepository
from formflow.domain.product_form import FORMS

logger = logging.getLogger(__name__)


class PipelineController:
    """Starts flows and routes each submission to advance, commit, or reject."""

    def __init__(
        self,
        repository: EntityRepository,
        forms: Mapping[str, FormDefinition] = FORMS,
    ):
        self._repository = repository
        self._forms = forms

    def definition(self, form_name: str) -> FormDefinition:
        try:
            return self._forms[form_name]
        except KeyError:
            raise UnknownFormError(form_name) from None

    async def start(
        self, form_name: str, entity_id: EntityId | None = None,
    ) -> PipelineState:
        """Open a create flow, or an update flow seeded from the stored entity."""
        definition = self.definition(form_name)
        if entity_id is None:
            state = PipelineState(form_name=form_name)
        else:
            entity = await self._repository.find_by_id(entity_id)
            if entity is None:
                raise ResourceNotFoundError(
                    "Product", str(entity_id), ErrorContext(entity_id=str(entity_id)),
                )
            state = PipelineState(
                form_name=form_name,
                flow_kind=FlowKind.UPDATE,
                entity_id=entity_id,
                draft=_seed_draft(definition, entity),
                known_ids=_seed_known_ids(definition, entity),
            )
        logger.info(
            f"Flow started ({state.flow_kind.value})",
            extra={
                "flow_id": str(state.flow_id), "form": form_name,
                "entity_id": str(entity_id) if entity_id else None,
            },
        )
        return state

    async def submit(
        self, state: PipelineState, field_set: dict[str, Any], step: int,
    ) -> Outcome:
        """Validate one step's submission and apply its outcome to state."""
        definition = self.definition(state.form_name)
        decision = evaluate_submission(state, definition, field_set, step)
        state.submission_count += 1

        if isinstance(decision, Reject):
            self._log_outcome(state, step, decision)
            return decision
        if isinstance(decision, Advance):
            apply_advance(state, decision)
            self._log_outcome(state, step, decision)
            return decision
        return await self._commit(state, step, decision)

    async def _commit(
        self, state: PipelineState, step: int, ready: ReadyToCommit,
    ) -> Commit | Reject:
        try:
            entity_id = await self._repository.save(ready.draft, state.entity_id)
        except PersistenceError as e:
            logger.warning(
                f"Commit refused: {e.message}",
                extra={
                    "flow_id": str(state.flow_id), "step": step,
                    "error_code": e.code, "outcome": "reject",
                },
            )
            return persistence_rejection(e.message)
        mark_committed(state, ready.draft, entity_id)
        outcome = Commit(entity_id=entity_id)
        self._log_outcome(state, step, outcome)
        return outcome

    def _log_outcome(self, state: PipelineState, step: int, outcome: Outcome) -> None:
        extra = {
            "flow_id": str(state.flow_id), "step": step,
            "outcome": outcome.outcome.value,
        }
        if isinstance(outcome, Reject):
            extra["error_fields"] = outcome.result.fields()
        if isinstance(outcome, Commit):
            extra["entity_id"] = str(outcome.entity_id)
        logger.info(f"Submission {outcome.outcome.value}", extra=extra)


def _seed_draft(definition: FormDefinition, entity: Mapping[str, Any]) -> dict[str, Any]:
    """Entity attributes the form edits, with nested rows trimmed to item fields."""
    permitted = definition.permitted_fields(definition.terminal_step)
    nested = definition.nested_item_fields()
    draft: dict[str, Any] = {}
    for name in permitted:
        if name not in entity:
            continue
        if name in nested:
            item_fields = ("id",) + nested[name]
            draft[name] = [
                {k: item[k] for k in item_fields if k in item}
                for item in entity[name]
            ]
        else:
            draft[name] = entity[name]
    return draft


def _seed_known_ids(
    definition: FormDefinition, entity: Mapping[str, Any],
) -> dict[str, set[str]]:
    return {
        name: {str(item["id"]) for item in entity.get(name, [])}
        for name in definition.nested_item_fields()
    }
