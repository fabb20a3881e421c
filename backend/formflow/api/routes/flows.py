"""Flow Routes — start flows, submit steps, and abandon flows.

Invariants:
    - PipelineState is per-flow, in-memory (module-level dict)
    - Request envelopes validated by Pydantic before reaching the handler
    - Outcome -> status: advance 200, commit 201, reject 422
    - Sequencing errors (wrong step, committed flow) surface as 409 via FormFlowError

Design Decisions:
    - _flows as module-level dict: single-process deployment, flows lost on restart;
      nothing is persisted before commit so a lost flow loses no data
    - Committed flows stay registered so late resubmissions get a clear 409
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from formflow.core.domain_types import EntityId, FlowId, OutcomeType
from formflow.core.errors import ErrorContext, ResourceNotFoundError
from formflow.core.pipeline_state import PipelineState
from formflow.domain.product_form import FORMS
from formflow.infrastructure.database import get_db
from formflow.schemas.flow import FlowCreate, FlowResponse, SubmissionCreate
from formflow.services.pipeline_controller import PipelineController
from formflow.services.product_repository import SqlProductRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/flows", tags=["flows"])

_flows: dict[UUID, PipelineState] = {}

_OUTCOME_STATUS = {
    OutcomeType.ADVANCE: status.HTTP_200_OK,
    OutcomeType.COMMIT: status.HTTP_201_CREATED,
    OutcomeType.REJECT: 422,
}


def get_flow_or_404(flow_id: UUID) -> PipelineState:
    state = _flows.get(flow_id)
    if state is None:
        raise ResourceNotFoundError(
            "Flow", str(flow_id), ErrorContext(flow_id=str(flow_id)),
        )
    return state


def active_flow_count() -> int:
    return len(_flows)


def _controller(db: AsyncSession) -> PipelineController:
    return PipelineController(SqlProductRepository(db))


@router.post(
    "", response_model=FlowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_flow(
    body: FlowCreate, db: AsyncSession = Depends(get_db),
):
    """Start a create flow, or an update flow when entity_id is given."""
    controller = _controller(db)
    entity_id = EntityId(body.entity_id) if body.entity_id else None
    state = await controller.start(body.form, entity_id)
    _flows[state.flow_id] = state
    return state.to_dict(controller.definition(state.form_name))


@router.get("/{flow_id}", response_model=FlowResponse)
async def get_flow(flow_id: UUID):
    """Current step, status and draft of a flow."""
    state = get_flow_or_404(flow_id)
    return state.to_dict(FORMS[state.form_name])


@router.post("/{flow_id}/submissions")
async def submit_step(
    flow_id: UUID,
    body: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Submit the current step. Returns advance, commit, or reject."""
    state = get_flow_or_404(flow_id)
    outcome = await _controller(db).submit(state, body.fields, body.step)
    return JSONResponse(
        status_code=_OUTCOME_STATUS[outcome.outcome],
        content=outcome.to_dict(),
    )


@router.delete("/{flow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def abandon_flow(flow_id: UUID):
    """Drop an in-progress or committed flow from memory."""
    get_flow_or_404(flow_id)
    _flows.pop(FlowId(flow_id), None)
    logger.info("Flow abandoned", extra={"flow_id": str(flow_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
