# transit_logbook/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

Status = Literal[
    "OK",
    "NO_TRIPS_FOUND",
    "POSSIBLE_SERVICE_VARIATION",
    "TIMESTAMP_OUT_OF_RANGE",
]

STATUS_OK: Status = "OK"
STATUS_NO_TRIPS_FOUND: Status = "NO_TRIPS_FOUND"
STATUS_POSSIBLE_SERVICE_VARIATION: Status = "POSSIBLE_SERVICE_VARIATION"
STATUS_TIMESTAMP_OUT_OF_RANGE: Status = "TIMESTAMP_OUT_OF_RANGE"


@dataclass(frozen=True)
class LogbookEntry:
    """1本の列車が1駅に停車した観測記録（時刻は unix 秒）"""

    unique_trip_id: str
    stop_id: str
    route_id: str
    # 下限は欠損しうる。上限は常にある
    minimum_time: Optional[int]
    maximum_time: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trip_id": self.unique_trip_id,
            "stop_id": self.stop_id,
            "minimum_time": self.minimum_time,
            "maximum_time": self.maximum_time,
            "route_id": self.route_id,
        }


@dataclass
class StopResult:
    """
    駅位置検索の結果。

    status が TIMESTAMP_OUT_OF_RANGE の場合、駅情報のフィールドは全て None。
    """

    status: Status
    stop_id: Optional[str] = None
    stop_name: Optional[str] = None
    stop_lat: Optional[float] = None
    stop_lon: Optional[float] = None
    authority_start_time: Optional[int] = None
    authority_end_time: Optional[int] = None
    taxicab_dist: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.status != STATUS_OK:
            return {"status": self.status}
        return {
            "status": self.status,
            "stop_id": self.stop_id,
            "stop_name": self.stop_name,
            "stop_lat": self.stop_lat,
            "stop_lon": self.stop_lon,
            "authority_start_time": self.authority_start_time,
            "authority_end_time": self.authority_end_time,
            "taxicab_dist": self.taxicab_dist,
        }


@dataclass
class ChainResult:
    """所要時間推定1回分の結果。OK 以外では results は空"""

    status: Status
    results: List[LogbookEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "results": [entry.to_dict() for entry in self.results],
        }
