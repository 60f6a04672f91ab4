"""
Screen Controller Base

Every screen behaves the same way:
1. On focus, fetch everything it shows for the signed-in user
2. On pull-to-refresh, fetch it all again
3. While a fetch is outstanding, `loading` (or `refreshing`) is set
4. On failure, keep the previous data and expose a message for an alert

Subclasses only implement fetch(user_id) and return a view model.

Only the most recent fetch may update the screen: if a refresh is
started while another is still running, whichever finishes first
cannot overwrite the newer one.

A view only ever holds the rows of the user it was fetched for. When
the signed-in user changes, the next reload drops the old view before
fetching, so a failed first fetch shows nothing rather than the
previous user's rows.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

import structlog

from financez.audit.logger import AuditLogger
from financez.backend.interface import BackendError, RowStoreInterface
from financez.models.audit import AuditEventBuilder
from financez.queries.scoped import ScopedQueryExecutor


logger = structlog.get_logger(__name__)

ViewT = TypeVar("ViewT")


class ScreenController(ABC, Generic[ViewT]):
    """Fetch-on-focus state shared by all screens."""

    screen_name = "screen"
    fetch_error_message = "Failed to load data."

    def __init__(
        self,
        session_manager,
        store: RowStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._session = session_manager
        self._store = store
        self._queries = ScopedQueryExecutor(store)
        self._audit = audit_logger or AuditLogger()

        self.data: Optional[ViewT] = None
        self.loading = True
        self.refreshing = False
        self.error: Optional[str] = None
        self._generation = 0
        # Whose rows `data` holds
        self._data_user_id: Optional[str] = None

    @property
    def user_id(self) -> Optional[str]:
        return self._session.user_id

    @abstractmethod
    async def fetch(self, user_id: str) -> ViewT:
        """
        Read everything the screen shows.

        Raises:
            BackendError: If any query fails
        """
        pass

    async def on_focus(self) -> Optional[ViewT]:
        """Screen became visible: full reload."""
        self.loading = True
        return await self._reload()

    async def on_refresh(self) -> Optional[ViewT]:
        """Pull-to-refresh: same queries, refreshing indicator instead."""
        self.refreshing = True
        return await self._reload()

    def dismiss_error(self) -> None:
        self.error = None

    async def _reload(self) -> Optional[ViewT]:
        self._generation += 1
        generation = self._generation

        user_id = self.user_id
        if user_id != self._data_user_id:
            self._clear()
        if user_id is None:
            self._finish()
            return self.data

        try:
            view = await self.fetch(user_id)
        except BackendError as e:
            self._audit.log(AuditEventBuilder.screen_fetch_failed(
                self.screen_name, user_id, str(e)
            ))
            if generation == self._generation:
                self.error = self.fetch_error_message
                self._finish()
            return self.data

        if generation != self._generation:
            logger.debug("stale_fetch_discarded", screen=self.screen_name)
            return self.data
        if user_id != self.user_id:
            logger.debug("fetch_for_previous_user_discarded", screen=self.screen_name)
            self._finish()
            return self.data

        self.data = view
        self._data_user_id = user_id
        self.error = None
        self._finish()
        return view

    def _clear(self) -> None:
        """Forget the view; it belongs to a user who is no longer signed in."""
        self.data = None
        self._data_user_id = None
        self.error = None

    def _finish(self) -> None:
        self.loading = False
        self.refreshing = False

    @staticmethod
    async def _gather(*reads):
        """
        Run independent reads concurrently and wait for all of them.

        Every read is awaited even when one fails; the first failure
        is then raised.
        """
        results = await asyncio.gather(*reads, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return results
