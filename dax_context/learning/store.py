"""
Row store for learned queries and training examples.

Every store call returns a `StoreResult` instead of raising: the store
boundary turns database and connection errors into failed results and
the learning service decides how to degrade. A failed insert caused by the
`(dataset_id, query_hash)` unique constraint is flagged as `duplicate`.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Protocol,
    TypeVar,
)

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dax_context.db.models import LearnedQuery, TrainingExample

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a store call: a value, or the error that prevented it."""

    value: Optional[T] = None
    error: Optional[BaseException] = None
    duplicate: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException, *, duplicate: bool = False) -> "StoreResult[T]":
        return cls(error=error, duplicate=duplicate)


class DuplicateKeyError(Exception):
    """A learned query with the same (dataset_id, query_hash) already exists."""


class QueryLearningStore(Protocol):
    """Collections backing the learning service."""

    async def get_learned(self, query_id: str) -> StoreResult[Optional[LearnedQuery]]: ...

    async def find_learned_by_hash(
        self, dataset_id: str, query_hash: str
    ) -> StoreResult[Optional[LearnedQuery]]: ...

    async def list_learned(
        self,
        dataset_id: str,
        *,
        intent: Optional[str] = None,
        success: Optional[bool] = None,
        limit: int = 10,
    ) -> StoreResult[List[LearnedQuery]]:
        """Ordered by times_reused desc, then last_used_at desc (nulls last)."""
        ...

    async def insert_learned(self, record: LearnedQuery) -> StoreResult[LearnedQuery]: ...

    async def increment_reuse(
        self, query_id: str, *, success: bool, used_at: dt.datetime
    ) -> StoreResult[Optional[LearnedQuery]]:
        """Atomically add one to times_reused and set success/last_used_at."""
        ...

    async def update_learned(
        self, query_id: str, changes: Dict[str, Any]
    ) -> StoreResult[bool]: ...

    async def list_training_examples(
        self, dataset_id: str, *, validated_only: bool = True, limit: int = 50
    ) -> StoreResult[List[TrainingExample]]: ...

    async def touch_training_example(
        self, example_id: str, used_at: dt.datetime
    ) -> StoreResult[bool]: ...


def _reuse_order_key(row: LearnedQuery) -> tuple:
    last = row.last_used_at.timestamp() if row.last_used_at else float("-inf")
    return (-(row.times_reused or 0), -last)


class InMemoryQueryLearningStore:
    """Dict-backed store for tests and single-process use."""

    def __init__(
        self,
        learned: Optional[List[LearnedQuery]] = None,
        training_examples: Optional[List[TrainingExample]] = None,
    ):
        self.learned: Dict[str, LearnedQuery] = {r.id: r for r in learned or []}
        self.training_examples: Dict[str, TrainingExample] = {
            e.id: e for e in training_examples or []
        }

    async def get_learned(self, query_id: str) -> StoreResult[Optional[LearnedQuery]]:
        return StoreResult.success(self.learned.get(query_id))

    async def find_learned_by_hash(
        self, dataset_id: str, query_hash: str
    ) -> StoreResult[Optional[LearnedQuery]]:
        for row in self.learned.values():
            if row.dataset_id == dataset_id and row.query_hash == query_hash:
                return StoreResult.success(row)
        return StoreResult.success(None)

    async def list_learned(
        self,
        dataset_id: str,
        *,
        intent: Optional[str] = None,
        success: Optional[bool] = None,
        limit: int = 10,
    ) -> StoreResult[List[LearnedQuery]]:
        rows = [
            r
            for r in self.learned.values()
            if r.dataset_id == dataset_id
            and (intent is None or r.intent == intent)
            and (success is None or r.success == success)
        ]
        rows.sort(key=_reuse_order_key)
        return StoreResult.success(rows[:limit])

    async def insert_learned(self, record: LearnedQuery) -> StoreResult[LearnedQuery]:
        existing = await self.find_learned_by_hash(record.dataset_id, record.query_hash)
        if existing.value is not None:
            return StoreResult.failure(
                DuplicateKeyError(f"{record.dataset_id}/{record.query_hash}"),
                duplicate=True,
            )
        self.learned[record.id] = record
        return StoreResult.success(record)

    async def increment_reuse(
        self, query_id: str, *, success: bool, used_at: dt.datetime
    ) -> StoreResult[Optional[LearnedQuery]]:
        row = self.learned.get(query_id)
        if row is None:
            return StoreResult.success(None)
        row.times_reused = (row.times_reused or 0) + 1
        row.success = success
        row.last_used_at = used_at
        return StoreResult.success(row)

    async def update_learned(self, query_id: str, changes: Dict[str, Any]) -> StoreResult[bool]:
        row = self.learned.get(query_id)
        if row is None:
            return StoreResult.success(False)
        for key, value in changes.items():
            setattr(row, key, value)
        return StoreResult.success(True)

    async def list_training_examples(
        self, dataset_id: str, *, validated_only: bool = True, limit: int = 50
    ) -> StoreResult[List[TrainingExample]]:
        rows = [
            e
            for e in self.training_examples.values()
            if e.dataset_id == dataset_id and (e.is_validated or not validated_only)
        ]
        return StoreResult.success(rows[:limit])

    async def touch_training_example(
        self, example_id: str, used_at: dt.datetime
    ) -> StoreResult[bool]:
        example = self.training_examples.get(example_id)
        if example is None:
            return StoreResult.success(False)
        example.last_used_at = used_at
        return StoreResult.success(True)


class SqlAlchemyQueryLearningStore:
    """Store over the `ai_query_learning` / `ai_training_examples` tables."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        # Rows are handed back after commit, so they must not expire on it.
        if session_factory.kw.get("expire_on_commit", True):
            kw = dict(session_factory.kw, expire_on_commit=False)
            session_factory = async_sessionmaker(class_=session_factory.class_, **kw)
        self._session_factory = session_factory

    @classmethod
    def from_env(cls) -> "SqlAlchemyQueryLearningStore":
        """Store bound to the engine configured by DATABASE_URL."""
        from dax_context.db.session import AsyncSessionLocal

        return cls(AsyncSessionLocal)

    async def _run(
        self,
        op: Callable[[AsyncSession], Awaitable[T]],
        *,
        commit: bool = False,
    ) -> StoreResult[T]:
        try:
            async with self._session_factory() as session:
                value = await op(session)
                if commit:
                    await session.commit()
                return StoreResult.success(value)
        except IntegrityError as e:
            return StoreResult.failure(e, duplicate=True)
        except (SQLAlchemyError, OSError) as e:
            # OSError: the driver could not reach the database.
            return StoreResult.failure(e)

    async def get_learned(self, query_id: str) -> StoreResult[Optional[LearnedQuery]]:
        async def op(session: AsyncSession) -> Optional[LearnedQuery]:
            return await session.get(LearnedQuery, query_id)

        return await self._run(op)

    async def find_learned_by_hash(
        self, dataset_id: str, query_hash: str
    ) -> StoreResult[Optional[LearnedQuery]]:
        async def op(session: AsyncSession) -> Optional[LearnedQuery]:
            result = await session.execute(
                select(LearnedQuery).where(
                    LearnedQuery.dataset_id == dataset_id,
                    LearnedQuery.query_hash == query_hash,
                )
            )
            return result.scalar_one_or_none()

        return await self._run(op)

    async def list_learned(
        self,
        dataset_id: str,
        *,
        intent: Optional[str] = None,
        success: Optional[bool] = None,
        limit: int = 10,
    ) -> StoreResult[List[LearnedQuery]]:
        async def op(session: AsyncSession) -> List[LearnedQuery]:
            query = select(LearnedQuery).where(LearnedQuery.dataset_id == dataset_id)
            if intent is not None:
                query = query.where(LearnedQuery.intent == intent)
            if success is not None:
                query = query.where(LearnedQuery.success == success)
            query = query.order_by(
                LearnedQuery.times_reused.desc(),
                LearnedQuery.last_used_at.desc().nulls_last(),
            ).limit(limit)
            result = await session.execute(query)
            return list(result.scalars().all())

        return await self._run(op)

    async def insert_learned(self, record: LearnedQuery) -> StoreResult[LearnedQuery]:
        async def op(session: AsyncSession) -> LearnedQuery:
            session.add(record)
            await session.flush()
            return record

        return await self._run(op, commit=True)

    async def increment_reuse(
        self, query_id: str, *, success: bool, used_at: dt.datetime
    ) -> StoreResult[Optional[LearnedQuery]]:
        async def op(session: AsyncSession) -> Optional[LearnedQuery]:
            await session.execute(
                update(LearnedQuery)
                .where(LearnedQuery.id == query_id)
                .values(
                    times_reused=LearnedQuery.times_reused + 1,
                    success=success,
                    last_used_at=used_at,
                )
            )
            await session.commit()
            return await session.get(LearnedQuery, query_id, populate_existing=True)

        return await self._run(op)

    async def update_learned(self, query_id: str, changes: Dict[str, Any]) -> StoreResult[bool]:
        async def op(session: AsyncSession) -> bool:
            result = await session.execute(
                update(LearnedQuery).where(LearnedQuery.id == query_id).values(**changes)
            )
            return result.rowcount > 0

        return await self._run(op, commit=True)

    async def list_training_examples(
        self, dataset_id: str, *, validated_only: bool = True, limit: int = 50
    ) -> StoreResult[List[TrainingExample]]:
        async def op(session: AsyncSession) -> List[TrainingExample]:
            query = select(TrainingExample).where(TrainingExample.dataset_id == dataset_id)
            if validated_only:
                query = query.where(TrainingExample.is_validated.is_(True))
            result = await session.execute(query.limit(limit))
            return list(result.scalars().all())

        return await self._run(op)

    async def touch_training_example(
        self, example_id: str, used_at: dt.datetime
    ) -> StoreResult[bool]:
        async def op(session: AsyncSession) -> bool:
            result = await session.execute(
                update(TrainingExample)
                .where(TrainingExample.id == example_id)
                .values(last_used_at=used_at)
            )
            return result.rowcount > 0

        return await self._run(op, commit=True)
