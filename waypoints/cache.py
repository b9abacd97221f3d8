"""
Purpose: Explicit, keyed cache for averages tables.
What it does:

- stores one averages table per AveragesKey (route, day type, lookback window)
- computes on a miss, hands out copies on every read
- invalidates per route or wholesale

Rule: Nothing is cached unless the caller passes a cache and a key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .models import WaypointAverage

logger = logging.getLogger(__name__)

AveragesTable = Dict[str, WaypointAverage]


@dataclass(frozen=True)
class AveragesKey:
    route_id: str
    day_type: str
    lookback_days: int


class AveragesCache:
    """
    Explicit cache for averages tables, keyed by (route, day type, lookback window).

    Nothing is cached implicitly: callers pass a key and a compute function,
    and must invalidate when a route's history changes (a day completed,
    a record edited or deleted).
    """
    def __init__(self):
        self._tables: Dict[AveragesKey, AveragesTable] = {}

    def __contains__(self, key: AveragesKey) -> bool:
        return key in self._tables

    def __len__(self) -> int:
        return len(self._tables)

    def get(self, key: AveragesKey) -> Optional[AveragesTable]:
        table = self._tables.get(key)
        return dict(table) if table is not None else None

    def get_or_compute(self, key: AveragesKey, compute: Callable[[], AveragesTable]) -> AveragesTable:
        """
        Return the cached table for `key`, computing and storing it on a miss.
        A copy is handed out so callers cannot mutate the cached table.
        """
        if key not in self._tables:
            logger.debug("Averages cache miss for %s", key)
            self._tables[key] = dict(compute())
        return dict(self._tables[key])

    def invalidate(self, route_id: Optional[str] = None) -> int:
        """
        Drop cached tables for one route, or everything when route_id is None.
        Returns how many tables were dropped.
        """
        if route_id is None:
            dropped = len(self._tables)
            self._tables.clear()
            return dropped

        stale = [key for key in self._tables if key.route_id == route_id]
        for key in stale:
            del self._tables[key]
        return len(stale)
