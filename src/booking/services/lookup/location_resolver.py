"""Debounced, cached and cancellable place search per input channel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ...config import settings
from ...errors import ResolutionError
from ...models.domain import CandidateLocation, Coordinates
from ..notices import DETAILS_FAILED, SEARCH_FAILED, NoticeLog, NoticeSink
from .providers import PlaceDetailsProvider, SearchProvider
from .scheduling import CancellationToken, Debouncer, FifoCache

logger = logging.getLogger(__name__)

PICKUP = "pickup"
DESTINATION = "destination"


@dataclass(slots=True)
class ChannelState:
    query: str = ""
    results: list[CandidateLocation] = field(default_factory=list)
    loading: bool = False


StateListener = Callable[[str, ChannelState], None]


class LocationResolver:
    """Turns free-text queries into candidate locations for named channels.

    Each channel has its own debounce timer, cancellation token and
    last-issued query, while the result cache is shared between channels.
    A result is only published if its token was not cancelled in the
    meantime, so a superseded search never overwrites fresher state.
    """

    def __init__(
        self,
        search_provider: SearchProvider,
        details_provider: Optional[PlaceDetailsProvider] = None,
        *,
        notices: Optional[NoticeSink] = None,
        country_code: str | None = None,
        debounce_seconds: float | None = None,
        cache_size: int | None = None,
        min_query_length: int | None = None,
        channels: Sequence[str] = (PICKUP, DESTINATION),
    ) -> None:
        self._search_provider = search_provider
        self._details_provider = details_provider
        self.notices = notices if notices is not None else NoticeLog()
        self.country_code = country_code if country_code is not None else settings.search_country_code
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.search_debounce_seconds
        )
        self.min_query_length = min_query_length if min_query_length is not None else settings.min_query_length
        self._cache: FifoCache[str, list[CandidateLocation]] = FifoCache(
            cache_size if cache_size is not None else settings.search_cache_size
        )
        self._states: dict[str, ChannelState] = {}
        self._debouncers: dict[str, Debouncer] = {}
        self._tokens: dict[str, CancellationToken] = {}
        self._last_issued: dict[str, str] = {}
        self._listeners: list[StateListener] = []
        for channel in channels:
            self._channel(channel)

    @property
    def cache(self) -> FifoCache[str, list[CandidateLocation]]:
        return self._cache

    def state(self, channel: str) -> ChannelState:
        return self._channel(channel)

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def resolve(self, query: str, channel: str) -> Optional[list[CandidateLocation]]:
        """Request candidates for ``query`` on ``channel``.

        Returns the results when they are known immediately (short query or
        cache hit); returns None when a search was scheduled or suppressed.
        Must be called from a running event loop.
        """
        state = self._channel(channel)
        state.query = query
        self._cancel(channel)

        if len(query.strip()) < self.min_query_length:
            self._publish(channel, [])
            return []

        cached = self._cache.get(query.lower())
        if cached:
            logger.debug(f"Using cached results for '{query}' ({len(cached)} results)")
            self._publish(channel, cached)
            return cached

        if self._last_issued.get(channel) == query:
            logger.debug(f"Skipping duplicate search '{query}' on {channel}")
            return None

        token = CancellationToken()
        self._tokens[channel] = token
        self._debouncers[channel].schedule(lambda: self._search(channel, query, token))
        return None

    async def wait(self, channel: str) -> ChannelState:
        """Wait for the channel's pending and in-flight searches, then return its state."""
        await self._channel_debouncer(channel).wait()
        return self.state(channel)

    async def get_coordinates(self, place_id: str) -> Coordinates:
        """Resolve a selected candidate to coordinates or raise ``ResolutionError``."""
        if self._details_provider is None:
            raise ResolutionError("No place details provider configured.")
        try:
            coordinates = await self._details_provider.place_details(place_id)
        except Exception as exc:
            logger.warning(f"Place details lookup failed for {place_id}: {exc}")
            self.notices.error(DETAILS_FAILED)
            raise ResolutionError(f"Place details lookup failed for {place_id}") from exc
        if coordinates is None:
            self.notices.error(DETAILS_FAILED)
            raise ResolutionError(f"No coordinates for place {place_id}")
        return coordinates

    async def select(self, channel: str, candidate: CandidateLocation) -> Coordinates:
        """Resolve ``candidate`` and close the channel's result list."""
        coordinates = await self.get_coordinates(candidate.place_id)
        self._cancel(channel)
        state = self._channel(channel)
        state.query = candidate.description
        self._publish(channel, [])
        return coordinates

    def close(self) -> None:
        """Cancel every timer and abort every in-flight search."""
        for channel, debouncer in self._debouncers.items():
            token = self._tokens.pop(channel, None)
            if token is not None:
                token.cancel()
            debouncer.abort()
            self._states[channel].loading = False

    def _channel(self, channel: str) -> ChannelState:
        if channel not in self._states:
            self._states[channel] = ChannelState()
            self._debouncers[channel] = Debouncer(self.debounce_seconds, name=f"search-{channel}")
        return self._states[channel]

    def _channel_debouncer(self, channel: str) -> Debouncer:
        self._channel(channel)
        return self._debouncers[channel]

    def _cancel(self, channel: str) -> None:
        self._debouncers[channel].cancel()
        token = self._tokens.pop(channel, None)
        if token is not None and not token.cancelled:
            token.cancel()
            self._states[channel].loading = False

    def _publish(self, channel: str, results: list[CandidateLocation]) -> None:
        state = self._states[channel]
        state.results = list(results)
        for listener in self._listeners:
            listener(channel, state)

    async def _search(self, channel: str, query: str, token: CancellationToken) -> None:
        state = self._states[channel]
        self._last_issued[channel] = query
        state.loading = True
        logger.info(f"Searching {channel} location: '{query}'")
        try:
            results = await self._search_provider.search(query, self.country_code)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if token.cancelled:
                logger.debug(f"Search cancelled for '{query}'")
                return
            logger.warning(f"Error searching location '{query}': {exc}")
            state.loading = False
            self._tokens.pop(channel, None)
            self._publish(channel, [])
            self.notices.error(SEARCH_FAILED)
            return

        if token.cancelled:
            logger.debug(f"Search aborted for '{query}'")
            return

        self._cache.set(query.lower(), results)
        state.loading = False
        self._tokens.pop(channel, None)
        self._publish(channel, results)
        logger.info(f"Search results set for {channel}: {len(results)} results")
