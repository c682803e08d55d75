import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

QueryKey = Tuple[str, str]


@dataclass
class QueryState:
    data: Any = None
    error: Optional[Exception] = None
    updated_at: Optional[float] = None
    is_invalidated: bool = False
    is_fetching: bool = False
    generation: int = 0

    @property
    def has_data(self) -> bool:
        return self.updated_at is not None


class QueryCache:
    """
    In-memory query results keyed by (resource_kind, user_id).

    Invalidating a key keeps its data but marks it stale, so the next
    fetch_query re-runs the query. A failed fetch keeps the previous data.
    A fetch that was already running when its key got invalidated stores
    its result as stale.
    """

    def __init__(self, stale_time: float = 0.0, clock: Callable[[], float] = time.monotonic):
        self.stale_time = stale_time
        self._clock = clock
        self._entries: Dict[QueryKey, QueryState] = {}

    def get(self, key: QueryKey) -> Any:
        state = self._entries.get(key)
        return state.data if state else None

    def get_state(self, key: QueryKey) -> Optional[QueryState]:
        return self._entries.get(key)

    def set(self, key: QueryKey, data: Any) -> None:
        state = self._entries.setdefault(key, QueryState())
        state.data = data
        state.error = None
        state.updated_at = self._clock()
        state.is_invalidated = False

    def invalidate(self, key: QueryKey) -> None:
        state = self._entries.get(key)
        if state is not None:
            state.is_invalidated = True
            state.generation += 1
        logger.debug(f"query invalidated: {key}")

    def is_stale(self, key: QueryKey) -> bool:
        state = self._entries.get(key)
        if state is None or not state.has_data or state.is_invalidated:
            return True
        return self._clock() - state.updated_at >= self.stale_time

    def clear(self) -> None:
        self._entries.clear()

    async def fetch_query(self, key: QueryKey, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return fresh cached data for key, or run fetcher and store its result."""
        if not self.is_stale(key):
            return self._entries[key].data

        state = self._entries.setdefault(key, QueryState())
        generation = state.generation
        state.is_fetching = True
        try:
            data = await fetcher()
        except Exception as e:
            state.error = e
            raise
        finally:
            state.is_fetching = False
        self.set(key, data)
        if state.generation != generation:
            # Invalidated mid-fetch: the result may predate the write
            state.is_invalidated = True
        return data
