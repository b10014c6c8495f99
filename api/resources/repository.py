"""
Collection resource persistence (raw SQL built from descriptors).

Reads go through the membership resolver so 0/1/N identifiers each get their
own query shape. Writes run one statement per record inside a single
transaction; the first failing record aborts and rolls back the batch.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import asyncpg

from core import db
from core.errors import DataAccessError
from core.query import DOLLAR, BoundQuery, rebind, resolve_membership

from .descriptors import ResourceDescriptor
from .schemas import Record


def select_template(descriptor: ResourceDescriptor) -> str:
    columns = ", ".join(descriptor.column_names)
    ordering = ", ".join(descriptor.ordering)
    return (
        f"SELECT {columns} FROM {descriptor.table} "
        f"WHERE {descriptor.key} IN (?) ORDER BY {ordering}"
    )


def delete_template(descriptor: ResourceDescriptor) -> str:
    return f"DELETE FROM {descriptor.table} WHERE {descriptor.key} IN (?)"


def insert_statement(descriptor: ResourceDescriptor, *, style: str = DOLLAR) -> str:
    columns = descriptor.insert_columns
    markers = ", ".join("?" for _ in columns)
    return rebind(
        f"INSERT INTO {descriptor.table} ({', '.join(columns)}) VALUES ({markers})",
        style=style,
    )


def update_statement(descriptor: ResourceDescriptor, *, style: str = DOLLAR) -> str:
    assignments = ", ".join(f"{column} = ?" for column in descriptor.update_columns)
    return rebind(
        f"UPDATE {descriptor.table} SET {assignments} WHERE {descriptor.key} = ?",
        style=style,
    )


def insert_args(descriptor: ResourceDescriptor, record: Record) -> tuple[Any, ...]:
    return tuple(getattr(record, column) for column in descriptor.insert_columns)


def update_args(descriptor: ResourceDescriptor, record: Record) -> tuple[Any, ...]:
    values = [getattr(record, column) for column in descriptor.update_columns]
    values.append(getattr(record, descriptor.key))
    return tuple(values)


def select_query(descriptor: ResourceDescriptor, ids: Sequence[Any]) -> BoundQuery:
    return resolve_membership(select_template(descriptor), ids)


def delete_query(descriptor: ResourceDescriptor, ids: Sequence[Any]) -> BoundQuery:
    if not ids:
        raise DataAccessError(f"Refusing to delete from {descriptor.table} without identifiers.")
    return resolve_membership(delete_template(descriptor), ids)


async def select_rows(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    ids: Sequence[Any],
) -> list[dict[str, Any]]:
    query = select_query(descriptor, ids)
    try:
        return await db.fetch_all(conn, query.sql, *query.args)
    except db.DB_ERRORS as exc:
        raise DataAccessError(f"select from {descriptor.table} failed: {exc}") from exc


async def delete_rows(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    ids: Sequence[Any],
) -> str:
    query = delete_query(descriptor, ids)
    try:
        async with conn.transaction():
            return await db.execute(conn, query.sql, *query.args)
    except db.DB_ERRORS as exc:
        raise DataAccessError(f"delete from {descriptor.table} failed: {exc}") from exc


async def _apply_each(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    operation: str,
    sql: str,
    batch: Sequence[tuple[Any, ...]],
) -> None:
    index = 0
    try:
        async with conn.transaction():
            for index, args in enumerate(batch):
                await db.execute(conn, sql, *args)
    except db.DB_ERRORS as exc:
        raise DataAccessError(
            f"{operation} failed for {descriptor.envelope}[{index}]: {exc}",
            index=index,
        ) from exc


async def insert_records(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    records: Sequence[Record],
) -> None:
    await _apply_each(
        conn,
        descriptor,
        "insert",
        insert_statement(descriptor),
        [insert_args(descriptor, r) for r in records],
    )


async def update_records(
    conn: asyncpg.Connection,
    descriptor: ResourceDescriptor,
    records: Sequence[Record],
) -> None:
    await _apply_each(
        conn,
        descriptor,
        "update",
        update_statement(descriptor),
        [update_args(descriptor, r) for r in records],
    )
