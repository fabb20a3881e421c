"""Form Definition — the step table that drives one validator for every step.

Invariants:
    - Steps are numbered 1..N with no gaps; step N is terminal
    - rules_for(k) is a prefix of rules_for(k + 1): validation never weakens
    - permitted_fields(k) is cumulative the same way
    - Definitions are frozen: built once at import, shared by every flow

Design Decisions:
    - Table over class chain (Step2 < Step1 < Base): one lookup answers
      "what applies at step k", no inheritance to trace
    - Nested associations declared once on the definition so permit() and the
      repository agree on item fields
"""

from dataclasses import dataclass, field

from formflow.core.domain_types import Step
from formflow.core.rules import Rule


@dataclass(frozen=True)
class NestedAssociation:
    """A has-many association edited through the form (e.g. variants)."""
    name: str
    item_fields: tuple[str, ...]


@dataclass(frozen=True)
class StepDefinition:
    """Fields a step introduces and the rules it adds on top of earlier steps."""
    number: int
    name: str
    fields: tuple[str, ...]
    rules: tuple[Rule, ...] = ()


@dataclass(frozen=True)
class FormDefinition:
    """Ordered steps plus nested association metadata for one form."""
    name: str
    steps: tuple[StepDefinition, ...]
    nested_associations: tuple[NestedAssociation, ...] = field(default=())

    def __post_init__(self) -> None:
        numbers = [s.number for s in self.steps]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(
                f"Form '{self.name}' steps must be numbered 1..N, got {numbers}",
            )

    @property
    def terminal_step(self) -> Step:
        return Step(len(self.steps))

    def is_terminal(self, step: int) -> bool:
        return step == self.terminal_step

    def has_step(self, step: int) -> bool:
        return 1 <= step <= self.terminal_step

    def step_definition(self, step: int) -> StepDefinition:
        if not self.has_step(step):
            raise ValueError(
                f"Form '{self.name}' has no step {step} (1..{self.terminal_step})",
            )
        return self.steps[step - 1]

    def step_name(self, step: int) -> str:
        return self.step_definition(step).name

    def rules_for(self, step: int) -> tuple[Rule, ...]:
        """Cumulative rules of steps 1..step."""
        self.step_definition(step)
        return tuple(rule for s in self.steps[:step] for rule in s.rules)

    def permitted_fields(self, step: int) -> tuple[str, ...]:
        """Cumulative permitted attributes of steps 1..step."""
        self.step_definition(step)
        return tuple(name for s in self.steps[:step] for name in s.fields)

    def nested_item_fields(self) -> dict[str, tuple[str, ...]]:
        return {a.name: a.item_fields for a in self.nested_associations}

    def describe(self) -> list[dict]:
        """Public step table for clients rendering the form."""
        return [
            {
                "number": s.number,
                "name": s.name,
                "fields": list(s.fields),
                "permitted_fields": list(self.permitted_fields(s.number)),
                "terminal": self.is_terminal(s.number),
            }
            for s in self.steps
        ]
