from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SchemaViolation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    property: str = ""
    message: str = Field(min_length=1)

    def render(self) -> str:
        return f'Property "{self.property or "unknown"}": {self.message}'


class ValidationOutcome(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    valid: bool
    errors: tuple[SchemaViolation, ...] = ()

    @model_validator(mode="after")
    def _validate_consistency(self) -> ValidationOutcome:
        if self.valid and self.errors:
            raise ValueError("a valid outcome cannot carry violations")
        if not self.valid and not self.errors:
            raise ValueError("an invalid outcome requires at least one violation")
        return self

    @classmethod
    def from_violations(cls, violations: Iterable[SchemaViolation]) -> ValidationOutcome:
        errors = tuple(violations)
        return cls(valid=not errors, errors=errors)


def format_violations(violations: Iterable[SchemaViolation]) -> str:
    return "; ".join(violation.render() for violation in violations)
