"""
Scoped Query Execution

Every screen reads data the same way: select rows from one table,
filtered to the signed-in user, optionally ordered and limited, then
reduce them to a few numbers. ScopedQuery captures that once.

GUARANTEES:
- The owner filter is always applied; a query cannot be run unscoped
- Rows are parsed into their model before anything else sees them
- Aggregates run on parsed models, never on raw backend dicts
"""

from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from financez.backend.interface import BackendError, RowQuery, RowStoreInterface


ResultT = TypeVar("ResultT")


class QueryExecutionError(BackendError):
    """Rows came back but could not be parsed into their model."""
    pass


class ScopedQuery(BaseModel):
    """
    A per-user query against one table.

    aggregate, when given, is the default reduction applied by
    ScopedQueryExecutor.aggregate().
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    table: str = Field(..., min_length=1)
    model: type[BaseModel]
    owner_column: str = Field(default="user_id")
    order_by: Optional[str] = None
    descending: bool = True
    limit: Optional[int] = Field(default=None, ge=1)
    aggregate: Optional[Callable[[list[Any]], Any]] = None

    def build(self, user_id: str, count: bool = False) -> RowQuery:
        """The RowQuery for one user."""
        if not user_id:
            raise ValueError(f"Scoped query on {self.table} needs a user id")
        return RowQuery(
            table=self.table,
            filters={self.owner_column: user_id},
            order_by=self.order_by,
            descending=self.descending,
            limit=self.limit,
            count=count,
        )

    def with_limit(self, limit: Optional[int]) -> "ScopedQuery":
        return self.model_copy(update={"limit": limit})


class ScopedQueryExecutor:
    """
    Runs ScopedQuery objects against a row store.

    This is the only path by which screens read rows.
    """

    def __init__(self, store: RowStoreInterface):
        self._store = store

    async def fetch(self, query: ScopedQuery, user_id: str) -> list:
        """All matching rows, parsed, in backend order."""
        response = await self._store.select(query.build(user_id))
        return self._parse(query, response.rows)

    async def fetch_one(self, query: ScopedQuery, user_id: str):
        """The first matching row, or None."""
        response = await self._store.select(query.with_limit(1).build(user_id))
        rows = self._parse(query, response.rows)
        return rows[0] if rows else None

    async def count(self, query: ScopedQuery, user_id: str) -> int:
        """Exact number of rows the user owns in the table."""
        response = await self._store.select(
            query.with_limit(None).build(user_id, count=True)
        )
        if response.count is not None:
            return response.count
        return len(response.rows)

    async def aggregate(
        self,
        query: ScopedQuery,
        user_id: str,
        reducer: Optional[Callable[[list], ResultT]] = None,
    ) -> ResultT:
        """
        Fetch and reduce in one step.

        Uses the query's own aggregate unless a reducer is passed.
        """
        reduce = reducer or query.aggregate
        if reduce is None:
            raise ValueError(f"No aggregate given for query on {query.table}")
        return reduce(await self.fetch(query, user_id))

    def _parse(self, query: ScopedQuery, rows: list[dict]) -> list:
        try:
            return [query.model.model_validate(row) for row in rows]
        except ValidationError as e:
            raise QueryExecutionError(
                f"Malformed {query.table} row from backend: {e.error_count()} errors"
            )
