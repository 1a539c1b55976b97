"""
Location autocomplete: debounced, cached, rate limited place suggestions
for one location input
"""

import asyncio
import dataclasses
import logging
from typing import Any, Coroutine, List, Optional, Set

from lib.nominatim import NominatimError, NominatimRateLimitError, SearchResponse, SearchResult

from .formatting import getLocationIcon, getShortName, toSelectedLocation
from .models import (
    AutocompleteMessage,
    AutocompleteState,
    SelectedLocationDict,
    SelectListener,
    StateListener,
)
from .service import PlaceSearchService

logger = logging.getLogger(__name__)


class LocationAutocomplete:
    """
    State holder behind a single location text input, dood!

    Every ``setQuery()`` restarts a short debounce timer. When it fires, the
    query is served from the shared cache or fetched from the geocoder
    through the shared rate limiter, with bounded retries on 429 and
    network failures. Each search takes a new generation number, and only
    the search holding the current generation may change visible state, so
    a slow answer to an old query never overwrites a newer one.

    All failures end up in ``error`` as a user-facing message, nothing is
    raised to the caller. Methods that start work (``setQuery``) must be
    called from within a running event loop.

    Usage:
        autocomplete = service.createAutocomplete(onSelect=form.setPickup)
        autocomplete.addListener(render)
        autocomplete.setQuery("Nello")
        ...
        autocomplete.selectLocation(autocomplete.suggestions[0])
        ...
        await autocomplete.destroy()
    """

    def __init__(
        self,
        service: PlaceSearchService,
        initialValue: str = "",
        onSelect: Optional[SelectListener] = None,
    ):
        """
        Initialize the autocomplete.

        Args:
            service: Shared place search service
            initialValue: Initial input text, not searched until the next setQuery()
            onSelect: Called with the SelectedLocationDict after each selectLocation()
        """
        self.service = service
        self.onSelect = onSelect

        self._state = AutocompleteState(
            query=initialValue,
            suggestions=[],
            loading=False,
            error=None,
            selectedLocation=None,
        )
        self._listeners: List[StateListener] = []

        self._generation = 0
        self._debounceTask: Optional[asyncio.Task] = None
        self._requestTask: Optional[asyncio.Task] = None
        self._waitingTask: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._destroyed = False

    ###
    # State access
    ###

    @property
    def query(self) -> str:
        return self._state.query

    @property
    def suggestions(self) -> List[SearchResult]:
        return self._state.suggestions

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def selectedLocation(self) -> Optional[SelectedLocationDict]:
        return self._state.selectedLocation

    def getState(self) -> AutocompleteState:
        """Get a snapshot of the whole visible state"""
        return self._state

    def addListener(self, listener: StateListener) -> None:
        """Subscribe to state changes, the listener gets the new AutocompleteState"""
        self._listeners.append(listener)

    def removeListener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    ###
    # Input operations
    ###

    def setQuery(self, text: str) -> None:
        """
        Update the input text and schedule a debounced search, dood!

        Editing the text of a selected location drops the selection. Setting
        exactly the selected address again keeps it and starts no search.
        """
        if self._destroyed:
            logger.warning("setQuery() called on destroyed LocationAutocomplete")
            return

        self._cancelDebounce()

        selected = self._state.selectedLocation
        if selected is not None and selected["address"] != text:
            selected = None
        self._setState(query=text, selectedLocation=selected)

        if text and selected is None:
            self._debounceTask = self._spawn(self._debounce(text))

    def selectLocation(self, result: SearchResult) -> None:
        """
        Pick one of the suggestions.

        The query becomes the full address, pending and outstanding searches
        are dropped and ``onSelect`` receives the selected location.
        """
        if self._destroyed:
            logger.warning("selectLocation() called on destroyed LocationAutocomplete")
            return

        location = toSelectedLocation(result)
        self._invalidate()
        self._setState(
            query=location["address"],
            selectedLocation=location,
            suggestions=[],
            error=None,
            loading=False,
        )

        if self.onSelect is not None:
            try:
                self.onSelect(location)
            except Exception as e:
                logger.error(f"Error in onSelect callback: {e}")
                logger.exception(e)

    def clearSelection(self) -> None:
        """Reset the input to an empty, unselected state"""
        if self._destroyed:
            logger.warning("clearSelection() called on destroyed LocationAutocomplete")
            return

        self._invalidate()
        self._setState(query="", selectedLocation=None, suggestions=[], error=None, loading=False)

    @staticmethod
    def getShortName(result: SearchResult) -> str:
        return getShortName(result)

    @staticmethod
    def getLocationIcon(categoryType: Optional[str]) -> str:
        return getLocationIcon(categoryType)

    ###
    # Lifecycle
    ###

    async def waitIdle(self) -> None:
        """Wait until no debounce timer or search of this instance is pending"""
        current = asyncio.current_task()
        while True:
            pending = [task for task in self._tasks if task is not current and not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def destroy(self) -> None:
        """
        Dispose of the autocomplete, dood!

        Cancels the pending debounce and any outstanding request. No state
        change is published afterwards.
        """
        if self._destroyed:
            return

        self._destroyed = True
        self._invalidate()
        self._listeners.clear()

        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("LocationAutocomplete destroyed")

    ###
    # Search
    ###

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _cancelDebounce(self) -> None:
        if self._debounceTask is not None and not self._debounceTask.done():
            self._debounceTask.cancel()
        self._debounceTask = None

    def _cancelRequest(self) -> None:
        task = self._requestTask
        self._requestTask = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    def _cancelWaiting(self) -> None:
        task = self._waitingTask
        self._waitingTask = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

    def _invalidate(self) -> None:
        """Make every pending and running search stale"""
        self._generation += 1
        self._cancelDebounce()
        self._cancelWaiting()
        self._cancelRequest()

    def _isCurrent(self, generation: int) -> bool:
        return not self._destroyed and generation == self._generation

    async def _debounce(self, query: str) -> None:
        await asyncio.sleep(self.service.config.debounceDelay)
        if self._debounceTask is asyncio.current_task():
            self._debounceTask = None
        await self._search(query)

    async def _search(self, query: str) -> None:
        self._generation += 1
        generation = self._generation
        # A stale search still queued in the rate limiter must not take a request slot
        self._cancelWaiting()
        text = query.strip()

        if len(text) < self.service.config.minQueryLength:
            self._applyState(generation, suggestions=[], error=None, loading=False)
            return

        try:
            cached = await self.service.getCached(text)
            if not self._isCurrent(generation):
                return
            if cached is not None:
                logger.debug(f"Serving '{text}' from cache")
                self._applyState(generation, suggestions=cached, error=None, loading=False)
                return

            results = await self._fetchWithRetries(text, generation)
            if results is None:
                return

            await self.service.storeSuggestions(text, results)
            self._applyState(
                generation,
                suggestions=results,
                error=None if results else AutocompleteMessage.NOT_FOUND.value,
            )
        except NominatimRateLimitError:
            logger.warning(f"Geocoder is still rate limiting after retries, giving up on '{text}'")
            self._applyState(generation, suggestions=[], error=AutocompleteMessage.SEARCH_BUSY.value)
        except NominatimError as e:
            logger.error(f"Error fetching location suggestions for '{text}': {e}")
            self._applyState(generation, suggestions=[], error=AutocompleteMessage.SEARCH_UNAVAILABLE.value)
        except Exception as e:
            logger.error(f"Unexpected error while searching '{text}': {e}")
            logger.exception(e)
            self._applyState(generation, suggestions=[], error=AutocompleteMessage.SEARCH_UNAVAILABLE.value)
        finally:
            if self._requestTask is asyncio.current_task():
                self._requestTask = None
            self._applyState(generation, loading=False)

    async def _fetchWithRetries(self, text: str, generation: int) -> Optional[SearchResponse]:
        """
        Fetch suggestions, retrying per the service retry policy.

        Returns:
            Results, or None if the search went stale while waiting

        Raises:
            NominatimError: The last error once no retry is left
        """
        retryPolicy = self.service.config.retryPolicy
        attempt = 0
        while True:
            self._waitingTask = asyncio.current_task()
            try:
                await self.service.waitForRateLimit()
            finally:
                if self._waitingTask is asyncio.current_task():
                    self._waitingTask = None
            if not self._isCurrent(generation):
                return None

            # Only one request of this instance may be in flight
            self._cancelRequest()
            self._requestTask = asyncio.current_task()
            self._applyState(generation, loading=True, error=None)

            try:
                return await self.service.fetchSuggestions(text)
            except NominatimError as e:
                delay = retryPolicy.getDelay(e, attempt)
                if delay is None:
                    raise
                logger.warning(
                    f"Search for '{text}' failed ({type(e).__name__}: {e}), "
                    f"retrying in {delay}s ({attempt + 1}/{retryPolicy.maxRetries})..."
                )

            await asyncio.sleep(delay)
            if not self._isCurrent(generation):
                return None
            attempt += 1

    ###
    # State updates
    ###

    def _applyState(self, generation: int, **changes: Any) -> None:
        """Apply changes on behalf of a search, ignored unless the search is current"""
        if not self._isCurrent(generation):
            return
        self._setState(**changes)

    def _setState(self, **changes: Any) -> None:
        if self._destroyed:
            return

        newState = dataclasses.replace(self._state, **changes)
        if newState == self._state:
            return
        self._state = newState
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"Error in LocationAutocomplete listener: {e}")
                logger.exception(e)
