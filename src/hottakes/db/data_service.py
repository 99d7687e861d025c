# src/hottakes/db/data_service.py
"""Relational data service.

Generic table access (select / insert / update / delete with simple filter
clauses) plus named server-side procedures. Repositories only talk to the
``DataService`` contract; ``SqlDataService`` fulfils it with SQLAlchemy.

Every backend failure surfaces as ``DataServiceError`` carrying a code:
single-row reads that match nothing report ``NO_ROWS`` and duplicate keys
report ``UNIQUE_VIOLATION``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import ColumnElement, Table, and_, delete, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from hottakes.core.errors import (
    BACKEND_FAILURE,
    INTEGRITY_VIOLATION,
    INVALID_INPUT,
    MISSING_FILTER,
    NO_ROWS,
    UNDEFINED_COLUMN,
    UNDEFINED_TABLE,
    UNIQUE_VIOLATION,
    UNKNOWN_PROCEDURE,
    DataServiceError,
)
from hottakes.db.session import Base
from hottakes.models import Post, PostVote
from hottakes.schemas.vote import VoteType, next_vote

__all__ = [
    "AllOf",
    "AnyOf",
    "DataService",
    "Order",
    "Row",
    "SqlDataService",
    "Where",
    "all_of",
    "any_of",
    "eq",
    "gt",
    "in_",
    "lt",
    "neq",
]

logger = logging.getLogger(__name__)

VOTE_ATTEMPTS = 5

Row = dict[str, Any]


@dataclass(frozen=True)
class Where:
    """Single column comparison."""

    column: str
    op: str
    value: Any


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of clauses."""

    clauses: tuple[Clause, ...]


@dataclass(frozen=True)
class AllOf:
    """Conjunction of clauses."""

    clauses: tuple[Clause, ...]


Clause = Where | AnyOf | AllOf
Filters = Mapping[str, Any] | Sequence[Clause] | None


@dataclass(frozen=True)
class Order:
    """Sort key for ``select``."""

    column: str
    descending: bool = False


def eq(column: str, value: Any) -> Where:
    return Where(column, "eq", value)


def neq(column: str, value: Any) -> Where:
    return Where(column, "neq", value)


def lt(column: str, value: Any) -> Where:
    return Where(column, "lt", value)


def gt(column: str, value: Any) -> Where:
    return Where(column, "gt", value)


def in_(column: str, values: Sequence[Any]) -> Where:
    return Where(column, "in", tuple(values))


def any_of(*clauses: Clause) -> AnyOf:
    return AnyOf(tuple(clauses))


def all_of(*clauses: Clause) -> AllOf:
    return AllOf(tuple(clauses))


def _normalize(filters: Filters) -> list[Clause]:
    if filters is None:
        return []
    if isinstance(filters, Mapping):
        clauses: list[Clause] = []
        for column, value in filters.items():
            if isinstance(value, list | tuple | set | frozenset):
                clauses.append(in_(column, list(value)))
            else:
                clauses.append(eq(column, value))
        return clauses
    return list(filters)


def _is_unique(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return "unique" in message or "duplicate" in message


class DataService(ABC):
    """Contract of the relational data service consumed by the repositories."""

    @abstractmethod
    async def select(
        self,
        table: str,
        *,
        filters: Filters = None,
        order: Sequence[Order] = (),
        limit: int | None = None,
    ) -> list[Row]:
        """Return matching rows."""

    async def select_one(self, table: str, *, filters: Filters) -> Row:
        """Return exactly one row or fail with ``NO_ROWS``."""
        rows = await self.select(table, filters=filters, limit=2)
        if len(rows) != 1:
            raise DataServiceError(
                NO_ROWS,
                f"JSON object requested, {len(rows)} rows returned from {table}",
            )
        return rows[0]

    @abstractmethod
    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        """Insert rows and return them as stored."""

    @abstractmethod
    async def update(self, table: str, patch: Mapping[str, Any], *, filters: Filters) -> int:
        """Apply ``patch`` to matching rows and return how many changed."""

    @abstractmethod
    async def delete(self, table: str, *, filters: Filters) -> int:
        """Delete matching rows and return how many were removed."""

    @abstractmethod
    async def rpc(self, name: str, params: Mapping[str, Any]) -> Any:
        """Run a named server-side procedure atomically."""

    async def close(self) -> None:
        """Release backend resources."""


class SqlDataService(DataService):
    """``DataService`` backed by a SQLAlchemy async engine."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
        self._procedures = {"toggle_vote": self._toggle_vote}

    # --- compilation -----------------------------------------------------------------
    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise DataServiceError(UNDEFINED_TABLE, f'relation "{name}" does not exist')
        return table

    def _column(self, table: Table, name: str) -> Any:
        try:
            return table.c[name]
        except KeyError as err:
            raise DataServiceError(
                UNDEFINED_COLUMN, f'column {table.name}.{name} does not exist'
            ) from err

    def _compile(self, table: Table, clause: Clause) -> ColumnElement[bool]:
        if isinstance(clause, AnyOf):
            return or_(*(self._compile(table, item) for item in clause.clauses))
        if isinstance(clause, AllOf):
            return and_(*(self._compile(table, item) for item in clause.clauses))

        column = self._column(table, clause.column)
        if clause.op == "eq":
            return column.is_(None) if clause.value is None else column == clause.value
        if clause.op == "neq":
            return column.is_not(None) if clause.value is None else column != clause.value
        if clause.op == "lt":
            return column < clause.value
        if clause.op == "lte":
            return column <= clause.value
        if clause.op == "gt":
            return column > clause.value
        if clause.op == "gte":
            return column >= clause.value
        if clause.op == "in":
            return column.in_(clause.value)
        raise DataServiceError(INVALID_INPUT, f"unsupported filter operator {clause.op!r}")

    def _where(self, table: Table, filters: Filters) -> list[ColumnElement[bool]]:
        return [self._compile(table, clause) for clause in _normalize(filters)]

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except IntegrityError as exc:
            code = UNIQUE_VIOLATION if _is_unique(exc) else INTEGRITY_VIOLATION
            raise DataServiceError(code, str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error("Data service operation %s failed", operation, exc_info=True)
            raise DataServiceError(BACKEND_FAILURE, str(exc)) from exc

    # --- table access ----------------------------------------------------------------
    async def select(
        self,
        table: str,
        *,
        filters: Filters = None,
        order: Sequence[Order] = (),
        limit: int | None = None,
    ) -> list[Row]:
        target = self._table(table)
        stmt = select(target).where(*self._where(target, filters))
        for key in order:
            column = self._column(target, key.column)
            stmt = stmt.order_by(column.desc() if key.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._translate_errors(f"select {table}"):
            async with self._sessionmaker() as session:
                result = await session.execute(stmt)
                return [dict(row) for row in result.mappings()]

    async def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[Row]:
        target = self._table(table)
        inserted: list[Row] = []
        async with self._translate_errors(f"insert {table}"):
            async with self._sessionmaker() as session, session.begin():
                for row in rows:
                    result = await session.execute(
                        insert(target).values(**row).returning(*target.c)
                    )
                    inserted.append(dict(result.mappings().one()))
        return inserted

    async def update(self, table: str, patch: Mapping[str, Any], *, filters: Filters) -> int:
        target = self._table(table)
        where = self._where(target, filters)
        if not where:
            raise DataServiceError(MISSING_FILTER, "UPDATE requires a WHERE clause")
        async with self._translate_errors(f"update {table}"):
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(update(target).where(*where).values(**patch))
                return result.rowcount

    async def delete(self, table: str, *, filters: Filters) -> int:
        target = self._table(table)
        where = self._where(target, filters)
        if not where:
            raise DataServiceError(MISSING_FILTER, "DELETE requires a WHERE clause")
        async with self._translate_errors(f"delete {table}"):
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(delete(target).where(*where))
                return result.rowcount

    async def rpc(self, name: str, params: Mapping[str, Any]) -> Any:
        procedure = self._procedures.get(name)
        if procedure is None:
            raise DataServiceError(UNKNOWN_PROCEDURE, f"Could not find the function {name}")
        return await procedure(**params)

    async def close(self) -> None:
        await self.engine.dispose()

    # --- procedures ------------------------------------------------------------------
    async def _toggle_vote(self, *, post_id: int, user_id: str, like_type: str) -> Row:
        """Apply one vote action as a sequence of single conditional statements.

        Each step either changes the row or proves the state it expects is
        absent, so concurrent casts by the same user behave as if they ran one
        after another:

        1. delete the row if it already holds the requested type (toggle-off);
        2. otherwise flip a row holding the opposite type in place;
        3. otherwise insert; a concurrent first vote makes this fail on the
           primary key and the sequence starts over.
        """
        try:
            requested = VoteType(like_type)
        except ValueError as err:
            raise DataServiceError(INVALID_INPUT, f"invalid vote type {like_type!r}") from err

        posts = Post.__table__
        votes = PostVote.__table__
        key = and_(votes.c.post_id == post_id, votes.c.user_id == user_id)
        opposite = VoteType.DISLIKE if requested is VoteType.LIKE else VoteType.LIKE

        async with self._translate_errors("toggle_vote"):
            async with self._sessionmaker() as session:
                exists = await session.scalar(select(posts.c.id).where(posts.c.id == post_id))
            if exists is None:
                raise DataServiceError(NO_ROWS, f"post {post_id} does not exist")

            for attempt in range(1, VOTE_ATTEMPTS + 1):
                removed = await self._rowcount(
                    delete(votes).where(key, votes.c.like_type == requested.value)
                )
                if removed:
                    return self._vote_result(post_id, user_id, requested, requested)

                flipped = await self._rowcount(
                    update(votes)
                    .where(key, votes.c.like_type == opposite.value)
                    .values(like_type=requested.value)
                )
                if flipped:
                    return self._vote_result(post_id, user_id, opposite, requested)

                try:
                    await self._rowcount(
                        insert(votes).values(
                            post_id=post_id, user_id=user_id, like_type=requested.value
                        )
                    )
                except IntegrityError as exc:
                    if not _is_unique(exc):
                        raise
                    logger.info(
                        "Vote race on post %s for user %s (attempt %d); starting over",
                        post_id,
                        user_id,
                        attempt,
                    )
                    continue
                return self._vote_result(post_id, user_id, None, requested)

        raise DataServiceError(
            BACKEND_FAILURE, f"vote on post {post_id} kept conflicting with concurrent votes"
        )

    async def _rowcount(self, statement: Any) -> int:
        async with self._sessionmaker() as session, session.begin():
            result = await session.execute(statement)
            return result.rowcount

    @staticmethod
    def _vote_result(
        post_id: int, user_id: str, previous: VoteType | None, requested: VoteType
    ) -> Row:
        current = next_vote(previous, requested)
        logger.debug("Vote on post %s by %s: %s -> %s", post_id, user_id, previous, current)
        return {
            "post_id": post_id,
            "previous": previous.value if previous else None,
            "current": current.value if current else None,
        }
