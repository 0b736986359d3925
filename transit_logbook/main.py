# transit_logbook/main.py
from __future__ import annotations

import logging
from zoneinfo import ZoneInfo

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .data_store import DataStoreError, LogbookStore
from .database import SessionLocal, init_db
from .station_locator import locate_station
from .time_utils import parse_timestamp, parse_timestamp_list
from .travel_time import poll_travel_times

settings = get_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)
LOCAL_TZ = ZoneInfo(settings.timezone)

app = FastAPI()

store = LogbookStore(SessionLocal)


@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info("Database ready: %s", settings.database_url)


# CORS 設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_urls,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/locate-station/json")
async def get_locate_station(
    x: float = Query(..., description="経度"),
    y: float = Query(..., description="緯度"),
    line: str = Query(..., description="路線ID (route_id)"),
    heading: str = Query(..., pattern="^[NS]$"),
    time: str = Query(..., description="ISO 8601 または unix 秒"),
):
    logger.info("GET /locate-station/json x=%s y=%s line=%s heading=%s time=%s", x, y, line, heading, time)

    try:
        unix_ts = parse_timestamp(time, LOCAL_TZ)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await locate_station(store, x, y, line, heading, unix_ts)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DataStoreError as e:
        logger.error(f"Error in locate-station: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return result.to_dict()


@app.get("/poll-travel-times/json")
async def get_poll_travel_times(
    line: str = Query(..., description="路線ID (route_id)"),
    start: str = Query(..., description="出発駅の stop_id"),
    end: str = Query(..., description="到着駅の stop_id"),
    timestamps: str = Query(..., description="'|' 区切りの時刻リスト"),
):
    # 例: /poll-travel-times/json?line=2&start=201N&end=231N&timestamps=2017-01-18T12:00|2017-01-18T12:30
    logger.info("GET /poll-travel-times/json line=%s start=%s end=%s", line, start, end)

    try:
        unix_timestamps = parse_timestamp_list(timestamps, LOCAL_TZ)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        results = await poll_travel_times(store, line, start, end, unix_timestamps)
    except DataStoreError as e:
        # 一部だけ成功した結果は返さない
        logger.error(f"Error in poll-travel-times: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return [r.to_dict() for r in results]


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
