# transit_logbook/database.py
from sqlalchemy import create_engine, Column, String, Float, Integer, Index
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()


class StopConfig(Base):
    __tablename__ = "stops"

    id = Column(Integer, primary_key=True, autoincrement=True)
    stop_id = Column(String, nullable=False, index=True)   # 末尾1文字が方向 (N/S)
    stop_name = Column(String, nullable=True)
    stop_lat = Column(Float, nullable=False)
    stop_lon = Column(Float, nullable=False)
    route_id = Column(String, nullable=False, index=True)
    # 有効期間は [authority_start_time, authority_end_time) の半開区間 (unix 秒)
    authority_start_time = Column(Integer, nullable=False)
    authority_end_time = Column(Integer, nullable=False)


class Logbook(Base):
    __tablename__ = "logbooks"
    __table_args__ = (
        Index("ix_logbooks_route_stop", "route_id", "stop_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    unique_trip_id = Column(String, nullable=False, index=True)
    stop_id = Column(String, nullable=False)
    route_id = Column(String, nullable=False)
    # 観測時刻の下限・上限 (unix 秒)。下限は欠損しうる
    minimum_time = Column(Integer, nullable=True)
    maximum_time = Column(Integer, nullable=False)


def make_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # SQLite はデフォルトでマルチスレッド通信を許可しないため check_same_thread=False が必要
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = make_engine(get_settings().database_url)
SessionLocal = make_session_factory(engine)


def init_db(bind: Engine = engine) -> None:
    """テーブルを作成する"""
    Base.metadata.create_all(bind=bind)
