"""Incremental search-as-you-type selector.

Lets a user find and pick one item from a large, server-held catalog by
partial name. Keystrokes are debounced (trailing edge), each settled query
issues one search call, and only the response for the latest query is ever
applied to the result list.

Must be driven from inside a running event loop.
"""

import asyncio
import logging
from enum import Enum
from typing import Annotated, Awaitable, Callable

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

logger = logging.getLogger(__name__)


class SelectorState(str, Enum):
    """Observable selector states."""

    IDLE = "idle"
    SEARCHING = "searching"
    OPEN = "open"
    SELECTED = "selected"


def _id_to_str(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


# Backend ids may arrive as ints; the client always handles them as str.
Identifier = Annotated[str, BeforeValidator(_id_to_str)]


class SearchResultItem(BaseModel):
    """One search hit. Accepts the catalog's native id/name keys."""

    model_config = ConfigDict(frozen=True)

    id: Identifier = Field(
        validation_alias=AliasChoices("id", "skill_id", "cert_id", "project_id")
    )
    display_name: str = Field(validation_alias=AliasChoices("display_name", "name"))


SearchFn = Callable[[str], Awaitable[list[SearchResultItem]]]


class SearchSelector:
    """Debounced combobox state machine over an async search function.

    Args:
        search: Async callable taking the query text and returning items.
        min_query_length: Queries shorter than this never hit the backend.
        debounce: Quiet period in seconds after the last keystroke.
        cancel_superseded: Cancel the in-flight request when a newer query
            is issued. When False, superseded responses still arrive and are
            discarded.
    """

    def __init__(
        self,
        search: SearchFn,
        min_query_length: int = 2,
        debounce: float = 0.3,
        cancel_superseded: bool = True,
    ):
        self._search = search
        self.min_query_length = min_query_length
        self.debounce = debounce
        self.cancel_superseded = cancel_superseded

        self._query = ""
        self._results: tuple[SearchResultItem, ...] = ()
        self._selection: SearchResultItem | None = None
        self._state = SelectorState.IDLE
        self._open = False
        self._error: str | None = None
        self._no_results = False

        # Bumped on every edit; a response is applied only if its
        # generation is still current when it arrives.
        self._generation = 0
        self._timer: asyncio.TimerHandle | None = None
        self._inflight: set[asyncio.Task] = set()
        self._settled = asyncio.Event()
        self._settled.set()

        self.calls_issued = 0

    # =========================================================================
    # Read-only state
    # =========================================================================

    @property
    def query(self) -> str:
        return self._query

    @property
    def results(self) -> list[SearchResultItem]:
        return list(self._results)

    @property
    def selection(self) -> SearchResultItem | None:
        return self._selection

    @property
    def state(self) -> SelectorState:
        return self._state

    @property
    def is_open(self) -> bool:
        """Whether the dropdown is visible."""
        return self._open

    @property
    def error(self) -> str | None:
        """Inline message from the last failed search, if any."""
        return self._error

    @property
    def no_results(self) -> bool:
        """True when the latest settled query returned nothing."""
        return self._no_results

    # =========================================================================
    # Input events
    # =========================================================================

    def set_query(self, text: str) -> None:
        """Handle an edit of the query text.

        Invalidates any selection, restarts the debounce timer and, when the
        text is long enough, schedules a search for it.
        """
        self._query = text
        self._generation += 1
        self._cancel_timer()
        if self.cancel_superseded:
            self._cancel_inflight()

        self._selection = None
        self._open = False
        self._error = None
        self._no_results = False

        if len(text.strip()) < self.min_query_length:
            self._results = ()
            self._state = SelectorState.IDLE
            self._settled.set()
            return

        self._state = SelectorState.SEARCHING
        self._settled.clear()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self.debounce, self._fire, text.strip(), self._generation
        )

    def select(self, item: SearchResultItem | str) -> SearchResultItem:
        """Commit one of the displayed results.

        Args:
            item: A result item or its id.

        Returns:
            The selected item.

        Raises:
            ValueError: If there is no open result list or the item is not in it.
        """
        if self._state is not SelectorState.OPEN:
            raise ValueError("No search results to select from")

        item_id = item.id if isinstance(item, SearchResultItem) else str(item)
        match = next((r for r in self._results if r.id == item_id), None)
        if match is None:
            raise ValueError(f"Item {item_id!r} is not in the current results")

        # Anything still in flight belongs to an older edit.
        self._generation += 1
        self._cancel_timer()
        self._cancel_inflight()

        self._selection = match
        self._query = match.display_name
        self._open = False
        self._state = SelectorState.SELECTED
        self._settled.set()
        logger.debug("Selected %s (%s)", match.display_name, match.id)
        return match

    def dismiss(self) -> None:
        """Close the dropdown without selecting (click outside)."""
        self._open = False

    def reopen(self) -> None:
        """Show the dropdown again for results that are still selectable."""
        if self._state is SelectorState.OPEN and self._results:
            self._open = True

    def clear(self) -> None:
        self.set_query("")

    async def wait_settled(self) -> None:
        """Wait until no debounce timer or current search is pending."""
        await self._settled.wait()

    async def aclose(self) -> None:
        """Cancel pending work and wait for in-flight tasks to finish."""
        self._generation += 1
        self._cancel_timer()
        tasks = list(self._inflight)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._settled.set()

    # =========================================================================
    # Internals
    # =========================================================================

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _cancel_inflight(self) -> None:
        for task in self._inflight:
            task.cancel()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _fire(self, query: str, generation: int) -> None:
        self._timer = None
        if not self._is_current(generation):
            return
        task = asyncio.ensure_future(self._run_search(query, generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run_search(self, query: str, generation: int) -> None:
        self.calls_issued += 1
        logger.debug("Searching for %r", query)
        try:
            items = await self._search(query)
        except asyncio.CancelledError:
            logger.debug("Search for %r cancelled", query)
            raise
        except Exception as e:
            logger.warning("Search for %r failed: %s", query, e)
            if self._is_current(generation):
                self._results = ()
                self._open = False
                self._error = f"Search failed: {e}"
                self._state = SelectorState.IDLE
                self._settled.set()
            return

        if not self._is_current(generation):
            logger.debug("Discarding stale results for %r", query)
            return

        self._results = tuple(items)
        if self._results:
            self._open = True
            self._state = SelectorState.OPEN
        else:
            self._open = False
            self._no_results = True
            self._state = SelectorState.IDLE
        self._settled.set()
