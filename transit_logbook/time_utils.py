# transit_logbook/time_utils.py
from __future__ import annotations

import math
from datetime import datetime
from typing import List
from zoneinfo import ZoneInfo

TIMESTAMP_SEPARATOR = "|"

# DB の整数カラム (signed 64bit) に収まる範囲
MIN_TIMESTAMP = -(2 ** 63)
MAX_TIMESTAMP = 2 ** 63 - 1


def parse_timestamp(value: str, tz: ZoneInfo) -> int:
    """
    時刻文字列を unix 秒に変換する。

    受け付ける形式:
      - unix 秒 ("1516253092" / "1516253092.5")
      - ISO 8601 ("2017-01-18T12:00", "2017-01-18T12:00:00-05:00")

    NOTE:
      - タイムゾーン指定のない ISO 文字列は tz のローカル時刻として解釈する。
      - 不正な形式の場合は ValueError を発生させる。
    """
    if value is None:
        raise ValueError("Empty timestamp")
    text = value.strip()
    if not text:
        raise ValueError("Empty timestamp")

    try:
        number = float(text)
    except ValueError:
        number = None
    if number is not None:
        if not math.isfinite(number):
            raise ValueError(f"Invalid timestamp '{value}': not a finite number")
        return _checked(int(number), value)

    try:
        dt = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Invalid timestamp '{value}': {e}")

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    try:
        return _checked(int(dt.timestamp()), value)
    except OverflowError as e:
        raise ValueError(f"Invalid timestamp '{value}': {e}")


def _checked(ts: int, value: str) -> int:
    if not (MIN_TIMESTAMP <= ts <= MAX_TIMESTAMP):
        raise ValueError(f"Timestamp out of range: '{value}'")
    return ts


def parse_timestamp_list(raw: str, tz: ZoneInfo) -> List[int]:
    """
    "t1|t2|..." 形式の文字列を unix 秒のリストに変換する（順序は保持）。
    """
    if not raw or not raw.strip():
        raise ValueError("No timestamps given")
    return [parse_timestamp(part, tz) for part in raw.split(TIMESTAMP_SEPARATOR)]
