"""
Write-batch validation (POST/PUT).

Two levels: the envelope must hold at least one record, then every record
must pass its descriptor's `write_model`, which requires each required column
to be set (ints positive, strings non-empty, timestamps present). Validation
stops at the first violation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from core.errors import BatchValidationError

from .descriptors import ResourceDescriptor
from .schemas import Record

BLANK = "cannot be blank"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    message: str = ""
    index: int | None = None

    def raise_for_failure(self) -> None:
        if not self.ok:
            raise BatchValidationError(self.message, index=self.index)


PASSED = ValidationResult(ok=True)


def _describe(descriptor: ResourceDescriptor, err: dict[str, Any]) -> str:
    column = str(err["loc"][0])
    # 0, "" and None are unset; anything else broke a real constraint.
    unset = err.get("input") in (None, 0, "")
    return f"{descriptor.json_name(column)}: {BLANK if unset else err['msg']}"


def validate_record(descriptor: ResourceDescriptor, record: Record) -> str | None:
    values = record.model_dump(include=set(descriptor.required))
    try:
        descriptor.write_model.model_validate(values)
    except ValidationError as exc:
        return _describe(descriptor, exc.errors()[0])
    return None


def validate_batch(descriptor: ResourceDescriptor, records: Sequence[Record]) -> ValidationResult:
    if not records:
        return ValidationResult(ok=False, message=f"{descriptor.envelope}: {BLANK}")

    for index, record in enumerate(records):
        problem = validate_record(descriptor, record)
        if problem is not None:
            return ValidationResult(
                ok=False,
                message=f"{descriptor.envelope}[{index}].{problem}",
                index=index,
            )
    return PASSED
