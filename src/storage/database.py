"""
Database module for storing detection events.

One row per ingested detection batch. The summary columns are computed
once at write time by the aggregator and stored alongside the raw objects.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    func,
    inspect,
    insert,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError

from analytics.aggregator import DetectionSummary
from models.config import StorageConfig
from models.detection_event import DetectionEvent
from models.errors import StorageError

TABLE_NAME = "detections"
DEFAULT_SOURCE = "camera"

metadata = MetaData()

# objects_data uses JSON rather than JSONB so key order inside each object survives
detections = Table(
    TABLE_NAME,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", DateTime(timezone=True), nullable=False),
    Column("source", String(50), nullable=False, default=DEFAULT_SOURCE),
    Column("total_objects", Integer, nullable=False),
    Column("unique_objects", Integer, nullable=False),
    Column("avg_confidence", Float, nullable=False),
    Column("detected_objects", Text, nullable=False),
    Column("objects_data", JSON, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("idx_detections_created_at", "created_at"),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _build_engine(cfg: StorageConfig) -> Engine:
    url = make_url(cfg.database_url)
    kwargs: Dict[str, Any] = {"pool_pre_ping": cfg.pool_pre_ping}
    connect_args: Dict[str, Any] = {}

    if url.get_backend_name() == "sqlite":
        # Requests are served from a thread pool
        connect_args["check_same_thread"] = False
        db_path = url.database
        if db_path and db_path != ":memory:":
            db_dir = os.path.dirname(db_path)
            if db_dir:
                os.makedirs(db_dir, exist_ok=True)
    else:
        kwargs["pool_size"] = cfg.pool_size
        kwargs["max_overflow"] = cfg.max_overflow
        if cfg.ssl_mode:
            connect_args["sslmode"] = cfg.ssl_mode

    if connect_args:
        kwargs["connect_args"] = connect_args
    return create_engine(url, **kwargs)


class Database:
    """
    Relational store for detection events.

    Wraps a pooled SQLAlchemy engine. Every public method runs in its own
    short transaction; there is no in-process caching.
    """

    def __init__(self, cfg: Optional[StorageConfig] = None, engine: Optional[Engine] = None):
        """
        Initialize the database.

        Args:
            cfg: Storage configuration (URL, pool sizing, history limits).
            engine: Pre-built engine; when omitted one is created from cfg.
        """
        self.cfg = cfg or StorageConfig()
        if engine is None:
            try:
                engine = _build_engine(self.cfg)
            except (SQLAlchemyError, ImportError, OSError) as e:
                logging.error(f"Could not create database engine: {e}")
                raise StorageError("Database unavailable", details=str(e)) from e
        self.engine = engine
        logging.info(f"Database engine created for {self.engine.url.render_as_string(hide_password=True)}")

    # -------------------------------------------------------------------------
    # Schema
    # -------------------------------------------------------------------------

    def has_schema(self) -> bool:
        """Whether the detections table exists."""
        try:
            return inspect(self.engine).has_table(TABLE_NAME)
        except SQLAlchemyError as e:
            logging.error(f"Error inspecting schema: {e}")
            raise StorageError("Database unavailable", details=str(e)) from e

    def initialize(self) -> None:
        """
        Create the detections table and its index if they are missing.

        Safe to call on every start. When several processes start at once,
        the losers of the CREATE TABLE race get an error from the server even
        though the table now exists; that case converges silently.
        """
        try:
            metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as e:
            if self.has_schema():
                logging.info(f"Table '{TABLE_NAME}' created concurrently by another process")
                return
            logging.error(f"Database initialization error: {e}")
            raise StorageError("Could not create database schema", details=str(e)) from e
        logging.info(f"Table '{TABLE_NAME}' ready")

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def insert(
        self,
        source: Optional[str],
        objects: Sequence[Mapping[str, Any]],
        summary: DetectionSummary,
        timestamp: Optional[datetime] = None,
    ) -> DetectionEvent:
        """
        Persist one detection batch.

        Args:
            source: Origin tag; "camera" when empty.
            objects: Submitted objects, stored verbatim.
            summary: Aggregated fields for the batch.
            timestamp: Detection time; defaults to the write time.

        Returns:
            The stored event, including its assigned id.
        """
        now = _utcnow()
        values = {
            "timestamp": timestamp or now,
            "source": source or DEFAULT_SOURCE,
            "total_objects": summary.total_objects,
            "unique_objects": summary.unique_objects,
            "avg_confidence": summary.avg_confidence,
            "detected_objects": summary.detected_objects,
            "objects_data": [dict(obj) for obj in objects],
            "created_at": now,
        }
        try:
            with self.engine.begin() as conn:
                result = conn.execute(insert(detections).values(**values))
                event_id = result.inserted_primary_key[0]
                row = conn.execute(
                    select(detections).where(detections.c.id == event_id)
                ).mappings().one()
        except SQLAlchemyError as e:
            logging.error(f"Error saving detection: {e}")
            raise StorageError("Error saving to database", details=str(e)) from e

        logging.debug(
            f"Detection saved: id={event_id}, source={values['source']}, "
            f"objects={summary.total_objects}"
        )
        return DetectionEvent.from_row(row)

    def delete_all(self) -> None:
        """Remove every stored detection. Irreversible."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(delete(detections))
        except SQLAlchemyError as e:
            logging.error(f"Error deleting detections: {e}")
            raise StorageError("Error deleting data", details=str(e)) from e
        logging.info(f"Deleted {result.rowcount} detections")

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def clamp_limit(self, limit: Optional[int]) -> int:
        """Default missing limits and keep the rest within [1, max_limit]."""
        if limit is None:
            return self.cfg.default_limit
        return max(1, min(int(limit), self.cfg.max_limit))

    def list_recent(self, limit: Optional[int] = None) -> List[DetectionEvent]:
        """
        Get the most recent detections, newest first.

        Args:
            limit: Maximum number of rows (default 50, clamped to max_limit).

        Returns:
            List of DetectionEvent.
        """
        stmt = (
            select(detections)
            .order_by(detections.c.created_at.desc(), detections.c.id.desc())
            .limit(self.clamp_limit(limit))
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            logging.error(f"Error getting detection history: {e}")
            raise StorageError("Error fetching data", details=str(e)) from e
        return [DetectionEvent.from_row(row) for row in rows]

    def aggregate_stats(self) -> Dict[str, Any]:
        """
        Summary statistics across every stored detection.

        Returns:
            Dict with total_detections, total_objects_detected,
            overall_avg_confidence (plain mean of the stored per-row
            averages, not rounded) and max_objects_in_detection. On an
            empty store the counts are 0 and the average/max are None.
        """
        stmt = select(
            func.count(detections.c.id),
            func.sum(detections.c.total_objects),
            func.avg(detections.c.avg_confidence),
            func.max(detections.c.total_objects),
        )
        try:
            with self.engine.connect() as conn:
                total, objects_sum, avg_conf, max_objects = conn.execute(stmt).one()
        except SQLAlchemyError as e:
            logging.error(f"Error getting stats: {e}")
            raise StorageError("Error fetching statistics", details=str(e)) from e

        return {
            "total_detections": int(total or 0),
            "total_objects_detected": int(objects_sum or 0),
            "overall_avg_confidence": float(avg_conf) if avg_conf is not None else None,
            "max_objects_in_detection": int(max_objects) if max_objects is not None else None,
        }

    def ping(self) -> str:
        """Round-trip a trivial query; returns the server's current time."""
        try:
            with self.engine.connect() as conn:
                now = conn.execute(select(func.current_timestamp())).scalar()
        except SQLAlchemyError as e:
            logging.error(f"Database ping failed: {e}")
            raise StorageError(str(e), details=str(e)) from e
        return now.isoformat() if isinstance(now, datetime) else str(now)

    def close(self) -> None:
        """Dispose of pooled connections."""
        self.engine.dispose()
        logging.info("Database connection pool closed")
