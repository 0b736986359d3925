# transit_logbook/travel_time.py
"""
所要時間推定

start から end まで、実際に走った列車の記録（logbook）をつなぎ合わせて経路を作る。
乗った列車が end に着かずに終わった場合は、その終点から次の列車を探して乗り継ぐ。
"""
from __future__ import annotations

import asyncio
import logging
from typing import AbstractSet, Iterable, List, Optional, Set

from .data_store import LogbookStore
from .models import (
    STATUS_NO_TRIPS_FOUND,
    STATUS_OK,
    STATUS_POSSIBLE_SERVICE_VARIATION,
    ChainResult,
    LogbookEntry,
)
from .trip_segments import find_earliest_trip_from

logger = logging.getLogger(__name__)

# 見つかった列車の最終記録がこれ以上先なら、運行変更の可能性ありとみなす（秒）
SERVICE_VARIATION_THRESHOLD_SEC = 3600


def _truncate_at(segment: List[LogbookEntry], end: str) -> Optional[List[LogbookEntry]]:
    """segment 内で最初に end が現れる位置まで（end を含む）を返す。含まれなければ None"""
    for idx, entry in enumerate(segment):
        if entry.stop_id == end:
            return segment[: idx + 1]
    return None


async def estimate_chain(
    store: LogbookStore,
    start: str,
    end: str,
    route: str,
    reference_time: int,
    excluded_trips: Optional[AbstractSet[str]] = None,
) -> ChainResult:
    """
    reference_time 以降に start から end へ向かう経路を1本推定する。

    NOTE:
      - 一度乗った列車（trip id）は同じ推定の中で二度と選ばない。
        そのためループ回数は路線上の trip 数 + 1 以下に収まる。
      - 途中で失敗した場合、それまでにつないだ経路は捨てる。
      - 運行変更の判定には maximum_time を使う（minimum_time は欠損しうるため）。
    """
    # 呼び出し側の集合は変更しない
    excluded: Set[str] = set(excluded_trips or ())
    path: List[LogbookEntry] = []

    while True:
        logger.debug("Searching: %s %d %s %s", start, reference_time, route, sorted(excluded))
        segment = await find_earliest_trip_from(store, start, route, reference_time, excluded)

        if not segment:
            logger.info("No trips found from %s after %d on route %s", start, reference_time, route)
            return ChainResult(status=STATUS_NO_TRIPS_FOUND)

        last = segment[-1]
        if last.maximum_time - reference_time >= SERVICE_VARIATION_THRESHOLD_SEC:
            logger.info(
                "Trip %s ends %ds after %d; possible service variation",
                last.unique_trip_id,
                last.maximum_time - reference_time,
                reference_time,
            )
            return ChainResult(status=STATUS_POSSIBLE_SERVICE_VARIATION)

        truncated = _truncate_at(segment, end)
        if truncated is not None:
            return ChainResult(status=STATUS_OK, results=path + truncated)

        # end に着かずに終わる列車: 終点から次の列車を探す
        excluded.add(last.unique_trip_id)
        path.extend(segment)
        start, reference_time = last.stop_id, last.maximum_time


async def estimate_batch(
    store: LogbookStore,
    start: str,
    end: str,
    route: str,
    reference_times: Iterable[int],
) -> List[ChainResult]:
    """
    複数の基準時刻について estimate_chain を並行実行し、入力順に結果を返す。
    各推定は独立した除外集合を持つ。
    """
    chains = [
        estimate_chain(store, start, end, route, ts, excluded_trips=set())
        for ts in reference_times
    ]
    return list(await asyncio.gather(*chains))


async def poll_travel_times(
    store: LogbookStore,
    route: str,
    start: str,
    end: str,
    timestamps: Iterable[int],
) -> List[ChainResult]:
    timestamps = list(timestamps)
    logger.info(
        "Polling travel times: route=%s %s -> %s, %d timestamps",
        route, start, end, len(timestamps),
    )
    return await estimate_batch(store, start, end, route, timestamps)
