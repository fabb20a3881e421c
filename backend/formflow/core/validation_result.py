"""Validation Result — field-to-messages mapping returned by the step validator.

Invariants:
    - Valid iff no field carries a message
    - Messages per field keep insertion order and are never duplicated
    - "base" holds entity-level messages (not tied to a single field)

Design Decisions:
    - One mutable accumulator instead of Valid/Invalid classes: the validator
      adds as it walks the rule table, callers only read is_valid / to_dict()
    - full_messages() humanizes keys like form libraries do ("Price must be ...")
"""

from dataclasses import dataclass, field

from formflow.core.domain_types import BASE_ERROR_KEY


@dataclass
class ValidationResult:
    """Errors keyed by field name; empty means valid."""

    errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not any(self.errors.values())

    def add(self, field_name: str, message: str) -> None:
        messages = self.errors.setdefault(field_name, [])
        if message not in messages:
            messages.append(message)

    def add_base(self, message: str) -> None:
        self.add(BASE_ERROR_KEY, message)

    def merge(self, other: "ValidationResult") -> None:
        for field_name, messages in other.errors.items():
            for message in messages:
                self.add(field_name, message)

    def fields(self) -> list[str]:
        return [name for name, messages in self.errors.items() if messages]

    def full_messages(self) -> list[str]:
        """Human-readable sentences, base messages unprefixed."""
        sentences = []
        for field_name, messages in self.errors.items():
            for message in messages:
                if field_name == BASE_ERROR_KEY:
                    sentences.append(message)
                else:
                    sentences.append(f"{humanize(field_name)} {message}")
        return sentences

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(messages) for name, messages in self.errors.items() if messages}


def humanize(field_name: str) -> str:
    """variants[0].stock_count -> 'Variants[0] stock count'."""
    text = field_name.replace(".", " ").replace("_", " ").strip()
    return text[:1].upper() + text[1:]
