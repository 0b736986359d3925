# transit_logbook/trip_segments.py
from __future__ import annotations

import logging
from typing import AbstractSet, List

from .data_store import LogbookStore
from .models import LogbookEntry

logger = logging.getLogger(__name__)


async def find_earliest_trip_from(
    store: LogbookStore,
    stop: str,
    route: str,
    after_time: int,
    excluded_trips: AbstractSet[str],
) -> List[LogbookEntry]:
    """
    stop を after_time 以降に通過した列車のうち、最も早いもの1本の全停車記録を返す。

    返すのは列車全体（stop より上流の駅も含む）で、minimum_time の昇順。
    該当する列車がなければ空リスト。
    """
    trip_id = await store.earliest_trip_id_at(stop, route, after_time, excluded_trips)
    if trip_id is None:
        return []

    entries = await store.trip_entries(trip_id)
    logger.debug("Trip %s from %s: %d stops", trip_id, stop, len(entries))
    return entries
