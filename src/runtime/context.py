from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from models.config import Config
from models.errors import StorageError
from storage.database import Database
from web.router import Router
from web.services.detection_service import DetectionService


@dataclass
class RuntimeContext:
    """Holds the wired services for one process; avoids global singletons."""

    config: Config
    db: Database
    service: DetectionService
    router: Router

    def close(self) -> None:
        self.db.close()


def build_context(config: Config, database: Optional[Database] = None) -> RuntimeContext:
    """
    Wire store, service and router, creating the schema if needed.

    Schema creation is best effort: a failure is logged and startup
    continues, so the requests themselves report the storage error.
    """
    db = database if database is not None else Database(config.storage)
    try:
        db.initialize()
    except StorageError as e:
        logging.error(f"Schema initialization failed, continuing without it: {e.message} ({e.details})")

    service = DetectionService(db=db)
    router = Router(service, prefixes=config.server.api_prefixes)
    return RuntimeContext(config=config, db=db, service=service, router=router)
