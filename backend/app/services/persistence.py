"""Durable key -> JSON bundle storage for engine state.

Each bundle is one row in state_entries. A save is a single transaction, so
a reader never sees a half-written bundle; save_many() writes several bundles
in one transaction. Failures are logged and never raised: on load the default
is returned, on save the in-memory state stays authoritative.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from app.database import SessionLocal
from app.models.state import StateEntry

logger = logging.getLogger(__name__)


class StateStore:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def save(self, key: str, data: Any) -> bool:
        return self.save_many({key: data})

    def save_many(self, bundles: dict[str, Any]) -> bool:
        db: Session = self._session_factory()
        try:
            now = datetime.now(timezone.utc)
            for key, data in bundles.items():
                payload = json.dumps(data)
                row = db.get(StateEntry, key)
                if row is None:
                    db.add(StateEntry(key=key, payload=payload, saved_at=now))
                else:
                    row.payload = payload
                    row.saved_at = now
            db.commit()
            logger.debug("Persistence: saved %s", ", ".join(bundles))
            return True
        except Exception as e:
            db.rollback()
            logger.error("Persistence: failed to save %s: %s", ", ".join(bundles), e)
            return False
        finally:
            db.close()

    def load(self, key: str, default: Any = None) -> Any:
        db: Session = self._session_factory()
        try:
            row = db.get(StateEntry, key)
            if row is None:
                logger.debug("Persistence: %s not found, using default", key)
                return default
            data = json.loads(row.payload)
            logger.info("Persistence: %s loaded", key)
            return data
        except Exception as e:
            logger.error("Persistence: failed to load %s: %s", key, e)
            return default
        finally:
            db.close()
