from __future__ import annotations

from typing import Iterable, Optional, Tuple

import pytest

from transit_logbook.data_store import LogbookStore
from transit_logbook.database import Logbook, StopConfig, init_db, make_engine, make_session_factory


@pytest.fixture()
def session_factory(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'logbooks.db'}")
    init_db(bind=engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def store(session_factory) -> LogbookStore:
    return LogbookStore(session_factory)


@pytest.fixture()
def add_trip(session_factory):
    """(stop_id, minimum_time, maximum_time) の列から1本の列車を登録する"""

    def _add(trip_id: str, stops: Iterable[Tuple[str, Optional[int], int]], route: str = "6") -> None:
        with session_factory() as db:
            for stop_id, minimum_time, maximum_time in stops:
                db.add(
                    Logbook(
                        unique_trip_id=trip_id,
                        stop_id=stop_id,
                        route_id=route,
                        minimum_time=minimum_time,
                        maximum_time=maximum_time,
                    )
                )
            db.commit()

    return _add


@pytest.fixture()
def add_stop(session_factory):
    def _add(
        stop_id: str,
        lat: float,
        lon: float,
        route: str = "6",
        start: int = 0,
        end: int = 2_000_000_000,
        name: str = "",
    ) -> None:
        with session_factory() as db:
            db.add(
                StopConfig(
                    stop_id=stop_id,
                    stop_name=name or stop_id,
                    stop_lat=lat,
                    stop_lon=lon,
                    route_id=route,
                    authority_start_time=start,
                    authority_end_time=end,
                )
            )
            db.commit()

    return _add
