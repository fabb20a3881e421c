"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - FlowId, EntityId wrap UUIDs — never use bare UUID in core logic
    - Step numbers start at 1; Step is an int NewType (no wrapper object)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

FlowId = NewType("FlowId", UUID)
EntityId = NewType("EntityId", UUID)
Step = NewType("Step", int)

# Raw submitted values keyed by field name
FieldSet = dict[str, Any]


# ─── Constants ───────────────────────────────────────────────────

FIRST_STEP = Step(1)
BASE_ERROR_KEY = "base"
DESTROY_FLAG = "_destroy"
ID_FIELD = "id"


# ─── Enums ───────────────────────────────────────────────────────

class FlowKind(str, Enum):
    """Create builds a new entity; update mutates one fetched by id."""
    CREATE = "create"
    UPDATE = "update"


class FlowStatus(str, Enum):
    """Flow lifecycle — only moves forward."""
    IN_PROGRESS = "in_progress"
    COMMITTED = "committed"


class OutcomeType(str, Enum):
    """The three results of a submission."""
    ADVANCE = "advance"
    COMMIT = "commit"
    REJECT = "reject"
