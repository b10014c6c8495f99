"""
JSON envelope encoding/decoding.

Request bodies are `{"<envelope>": [record, ...]}` for writes and
`{"ids": [...]}` for deletes. Responses use the same shapes.

Bodies are parsed and validated by pydantic in strict mode, so a value of the
wrong JSON type (`"1"` for a number, `1` for a boolean) is rejected instead
of being coerced.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError

from core.errors import SerializationError, TransportError

from .descriptors import ResourceDescriptor
from .schemas import IdentifierSet, Record


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    location = ".".join(str(part) for part in err.get("loc", ()))
    if not location:
        return err.get("msg", "invalid value")
    return f"{location}: {err.get('msg', 'invalid value')}"


def _parse(model: type[BaseModel], body: bytes, what: str) -> BaseModel:
    if not body or not body.strip():
        raise TransportError("Request body is empty.")
    try:
        return model.model_validate_json(body, strict=True)
    except ValidationError as exc:
        raise TransportError(f"Malformed {what} body: {_first_error(exc)}") from exc


def decode_records(descriptor: ResourceDescriptor, body: bytes) -> list[Record]:
    """
    Decode a write body into the descriptor's records.

    A missing envelope key decodes to an empty list; emptiness is the
    validator's call, not the codec's.
    """
    envelope = _parse(descriptor.envelope_model, body, descriptor.envelope)
    return list(getattr(envelope, descriptor.envelope))


def decode_ids(body: bytes) -> list[int]:
    return _parse(IdentifierSet, body, "ids").ids


def rows_to_records(descriptor: ResourceDescriptor, rows: Iterable[Mapping[str, Any]]) -> list[Record]:
    try:
        return [descriptor.model.model_validate(dict(row)) for row in rows]
    except ValidationError as exc:
        raise SerializationError(
            f"Row in {descriptor.table} does not match its schema: {_first_error(exc)}"
        ) from exc


def encode_records(descriptor: ResourceDescriptor, records: Sequence[Record]) -> bytes:
    try:
        envelope = descriptor.envelope_model.model_validate({descriptor.envelope: list(records)})
        return envelope.model_dump_json(by_alias=True).encode("utf-8")
    except (ValidationError, PydanticSerializationError) as exc:
        raise SerializationError(f"Failed to encode {descriptor.envelope}: {exc}") from exc


def encode_ids(ids: Sequence[int]) -> bytes:
    try:
        return IdentifierSet(ids=list(ids)).model_dump_json().encode("utf-8")
    except (ValidationError, PydanticSerializationError) as exc:
        raise SerializationError(f"Failed to encode ids: {exc}") from exc
