"""
Collection resource flows, one per HTTP method.

Every function returns the response body as JSON bytes or raises a
`core.errors.ResourceError`; nothing here writes to the response.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import asyncpg

from core.errors import DataAccessError

from . import codec, repository
from .descriptors import ResourceDescriptor
from .validation import validate_batch

logger = logging.getLogger(__name__)


def parse_ids(descriptor: ResourceDescriptor, raw_ids: Sequence[str]) -> list[int]:
    """
    Query-string identifiers arrive as text; lookup columns are integers.
    """
    try:
        return [int(raw.strip()) for raw in raw_ids]
    except ValueError as exc:
        raise DataAccessError(f"Invalid {descriptor.key} value: {exc}") from exc


async def list_records(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    raw_ids: Sequence[str],
) -> bytes:
    ids = parse_ids(descriptor, raw_ids)
    rows = await repository.select_rows(conn, descriptor, ids)
    records = codec.rows_to_records(descriptor, rows)
    logger.debug(
        "records_listed resource=%s filter_count=%s count=%s",
        descriptor.name,
        len(ids),
        len(records),
    )
    return codec.encode_records(descriptor, records)


async def create_records(conn: asyncpg.Connection, descriptor: ResourceDescriptor, body: bytes) -> bytes:
    records = codec.decode_records(descriptor, body)
    validate_batch(descriptor, records).raise_for_failure()

    await repository.insert_records(conn, descriptor, records)
    logger.info("records_created resource=%s count=%s", descriptor.name, len(records))
    return codec.encode_records(descriptor, records)


async def update_records(conn: asyncpg.Connection, descriptor: ResourceDescriptor, body: bytes) -> bytes:
    records = codec.decode_records(descriptor, body)
    validate_batch(descriptor, records).raise_for_failure()

    await repository.update_records(conn, descriptor, records)
    logger.info("records_updated resource=%s count=%s", descriptor.name, len(records))
    return codec.encode_records(descriptor, records)


async def delete_records(conn: asyncpg.Connection, descriptor: ResourceDescriptor, body: bytes) -> bytes:
    ids = codec.decode_ids(body)
    if not ids:
        # Nothing to scope the delete to; leave the table alone.
        return codec.encode_ids(ids)

    status = await repository.delete_rows(conn, descriptor, ids)
    logger.info(
        "records_deleted resource=%s ids=%s status=%s",
        descriptor.name,
        len(ids),
        status,
    )
    return codec.encode_ids(ids)
