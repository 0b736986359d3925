# transit_logbook/config.py
"""
アプリケーション設定モジュール

環境変数（.env があればそこから）を読み込み、Settings にまとめる。
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# プロジェクトルート（transit_logbook/ の1つ上）
BASE_DIR = Path(__file__).resolve().parent.parent
DEFAULT_DB_PATH = BASE_DIR / "logbooks.db"


class Settings(BaseModel):
    """実行時設定"""
    database_url: str = f"sqlite:///{DEFAULT_DB_PATH}"
    # タイムゾーン指定のない時刻文字列をこのタイムゾーンで解釈する
    timezone: str = "America/New_York"
    frontend_urls: List[str] = ["http://localhost:5173"]
    log_level: str = "INFO"


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    環境変数から Settings を構築する。

    Returns:
        キャッシュされた Settings インスタンス
    """
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        timezone=os.getenv("TIMEZONE", defaults.timezone),
        frontend_urls=_split_origins(os.getenv("FRONTEND_URL", ",".join(defaults.frontend_urls))),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )
