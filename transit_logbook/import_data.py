# transit_logbook/import_data.py
import argparse
import csv
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

# パッケージとして実行されることを想定 (python -m transit_logbook.import_data)
from .database import SessionLocal, init_db, StopConfig, Logbook

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(float(value))


def import_stops(db: Session, csv_path: Path) -> int:
    """
    stops.csv を読み込む。
    列: stop_id, stop_name, stop_lat, stop_lon, route_id,
        authority_start_time, authority_end_time
    """
    count = 0
    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        for i, row in enumerate(csv.DictReader(f)):
            if not row.get("stop_id"):
                logger.warning("Row %d has no stop_id, skipping", i)
                continue
            db.add(
                StopConfig(
                    stop_id=row["stop_id"],
                    stop_name=row.get("stop_name"),
                    stop_lat=float(row["stop_lat"]),
                    stop_lon=float(row["stop_lon"]),
                    route_id=row["route_id"],
                    authority_start_time=int(float(row["authority_start_time"])),
                    authority_end_time=int(float(row["authority_end_time"])),
                )
            )
            count += 1

    db.commit()
    logger.info(f"Imported {count} stop configs.")
    return count


def import_logbooks(db: Session, csv_path: Path) -> int:
    """
    logbooks.csv を読み込む。
    列: unique_trip_id, stop_id, route_id, minimum_time, maximum_time
    minimum_time は空欄可。maximum_time が空の行はスキップする。
    """
    count = 0
    skipped = 0
    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        for i, row in enumerate(csv.DictReader(f)):
            maximum_time = _optional_int(row.get("maximum_time"))
            if not row.get("unique_trip_id") or maximum_time is None:
                skipped += 1
                continue
            db.add(
                Logbook(
                    unique_trip_id=row["unique_trip_id"],
                    stop_id=row["stop_id"],
                    route_id=row["route_id"],
                    minimum_time=_optional_int(row.get("minimum_time")),
                    maximum_time=maximum_time,
                )
            )
            count += 1

    db.commit()
    if skipped:
        logger.warning("Skipped %d logbook rows without trip id or maximum_time", skipped)
    logger.info(f"Imported {count} logbook entries.")
    return count


def main(argv=None):
    parser = argparse.ArgumentParser(description="Load stop configs and logbooks into the database")
    parser.add_argument("--stops", type=Path, help="stops.csv")
    parser.add_argument("--logbooks", type=Path, help="logbooks.csv")
    args = parser.parse_args(argv)

    logger.info("Initializing database...")
    init_db()

    db = SessionLocal()
    try:
        if args.stops:
            logger.info(f"Importing stops from {args.stops}...")
            import_stops(db, args.stops)
        if args.logbooks:
            logger.info(f"Importing logbooks from {args.logbooks}...")
            import_logbooks(db, args.logbooks)
        logger.info("Data import completed successfully.")
    except Exception as e:
        logger.error(f"Import failed: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
