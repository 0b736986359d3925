# transit_logbook/data_store.py
"""
stops / logbooks テーブルへの読み取り専用クエリ層

各クエリはブロッキングな SQLAlchemy セッションで実行されるため、
asyncio.to_thread でワーカースレッドに逃がし、await 可能な形で公開する。
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import func, literal
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .database import Logbook, StopConfig
from .models import LogbookEntry

logger = logging.getLogger(__name__)


class DataStoreError(RuntimeError):
    """データストアへの問い合わせ自体が失敗した（接続断・不正なクエリなど）"""


def _to_entry(row: Logbook) -> LogbookEntry:
    return LogbookEntry(
        unique_trip_id=row.unique_trip_id,
        stop_id=row.stop_id,
        route_id=row.route_id,
        minimum_time=row.minimum_time,
        maximum_time=row.maximum_time,
    )


class LogbookStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def _run(self, name: str, query: Callable[[Session], Any]) -> Any:
        # セッションはクエリごとに生成・破棄する
        try:
            with self.session_factory() as db:
                return query(db)
        except SQLAlchemyError as e:
            logger.error("Query %s failed: %s", name, e)
            raise DataStoreError(f"{name} failed: {e}") from e

    # ========================================================================
    # stops
    # ========================================================================

    def _nearest_active_stop(
        self, x: float, y: float, route: str, time: int
    ) -> Optional[Dict[str, Any]]:
        def query(db: Session) -> Optional[Dict[str, Any]]:
            taxicab_dist = (
                func.abs(literal(x) - StopConfig.stop_lon)
                + func.abs(literal(y) - StopConfig.stop_lat)
            ).label("taxicab_dist")
            row = (
                db.query(StopConfig, taxicab_dist)
                .filter(
                    StopConfig.route_id == route,
                    StopConfig.authority_start_time <= time,
                    StopConfig.authority_end_time > time,
                )
                # 距離が同じ場合は stop_id の昇順で決める
                .order_by(taxicab_dist.asc(), StopConfig.stop_id.asc())
                .first()
            )
            if row is None:
                return None
            stop, dist = row
            return {
                "stop_id": stop.stop_id,
                "stop_name": stop.stop_name,
                "stop_lat": stop.stop_lat,
                "stop_lon": stop.stop_lon,
                "authority_start_time": stop.authority_start_time,
                "authority_end_time": stop.authority_end_time,
                "taxicab_dist": float(dist),
            }

        return self._run("nearest_active_stop", query)

    async def nearest_active_stop(
        self, x: float, y: float, route: str, time: int
    ) -> Optional[Dict[str, Any]]:
        """
        time に有効な route 上の駅のうち、(x, y) からのマンハッタン距離
        |x - lon| + |y - lat| が最小のものを返す。該当なしなら None。
        """
        return await asyncio.to_thread(self._nearest_active_stop, x, y, route, time)

    # ========================================================================
    # logbooks
    # ========================================================================

    def _earliest_trip_id_at(
        self, stop: str, route: str, after_time: int, excluded: Iterable[str]
    ) -> Optional[str]:
        excluded = list(excluded)

        def query(db: Session) -> Optional[str]:
            q = db.query(Logbook.unique_trip_id).filter(
                Logbook.stop_id == stop,
                Logbook.route_id == route,
                Logbook.maximum_time > after_time,
            )
            if excluded:
                q = q.filter(Logbook.unique_trip_id.notin_(excluded))
            row = q.order_by(
                Logbook.minimum_time.asc().nulls_first(),
                Logbook.maximum_time.asc(),
                Logbook.unique_trip_id.asc(),
            ).first()
            return row[0] if row else None

        return self._run("earliest_trip_id_at", query)

    async def earliest_trip_id_at(
        self, stop: str, route: str, after_time: int, excluded: Iterable[str] = ()
    ) -> Optional[str]:
        """
        stop を after_time より後に（maximum_time 基準）通過した列車のうち、
        excluded に含まれず minimum_time が最も早いものの trip id を返す。
        """
        return await asyncio.to_thread(
            self._earliest_trip_id_at, stop, route, after_time, tuple(excluded)
        )

    def _trip_entries(self, trip_id: str) -> List[LogbookEntry]:
        def query(db: Session) -> List[LogbookEntry]:
            rows = (
                db.query(Logbook)
                .filter(Logbook.unique_trip_id == trip_id)
                .order_by(Logbook.minimum_time.asc().nulls_first(), Logbook.maximum_time.asc())
                .all()
            )
            return [_to_entry(r) for r in rows]

        return self._run("trip_entries", query)

    async def trip_entries(self, trip_id: str) -> List[LogbookEntry]:
        """trip_id の全記録を minimum_time 昇順で返す"""
        return await asyncio.to_thread(self._trip_entries, trip_id)
