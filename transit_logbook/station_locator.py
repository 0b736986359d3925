# transit_logbook/station_locator.py
from __future__ import annotations

import logging
import math

from .data_store import LogbookStore
from .models import STATUS_OK, STATUS_TIMESTAMP_OUT_OF_RANGE, StopResult

logger = logging.getLogger(__name__)


def rewrite_heading(stop_id: str, heading: str) -> str:
    """stop_id の末尾1文字（方向）を heading に差し替える"""
    return stop_id[:-1] + heading


async def locate_station(
    store: LogbookStore,
    x: float,
    y: float,
    route: str,
    heading: str,
    time: int,
) -> StopResult:
    """
    座標 (x=経度, y=緯度)・路線・方向・時刻から駅を1つ特定する。

    NOTE:
      - テーブルには N/S 両方向の駅が同じ座標で入っているため、
        距離検索では方向を無視し、見つかった stop_id の末尾を heading で差し替える。
      - time に有効な駅設定がなければ TIMESTAMP_OUT_OF_RANGE を返す。
    """
    if len(heading) != 1:
        raise ValueError(f"heading must be a single character, got '{heading}'")
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"coordinates must be finite numbers, got x={x} y={y}")

    row = await store.nearest_active_stop(x, y, route, time)
    if row is None:
        logger.info("No stop config on route %s is active at %d", route, time)
        return StopResult(status=STATUS_TIMESTAMP_OUT_OF_RANGE)

    row["stop_id"] = rewrite_heading(row["stop_id"], heading)
    return StopResult(status=STATUS_OK, **row)
