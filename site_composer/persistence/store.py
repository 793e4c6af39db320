"""
Store distant — persistance des SiteRecord (SQLAlchemy / SQLite).

Frontière asynchrone opaque pour le moteur : load(owner_id) / save(record).
Les appels SQLAlchemy sont synchrones et exécutés via asyncio.to_thread.
Écrasement aveugle (upsert) : deux sessions concurrentes sur le même compte
peuvent s'écraser mutuellement — risque accepté.
"""
import asyncio
import logging
from typing import Callable, Dict, Optional, Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import database
from ..database import db_get_site_record, db_upsert_site_record, jd, jl
from ..models import PlacedBlock, SiteRecord, SiteRecordDB
from .local_cache import KEY_PREFIX, read_cached_record, write_cached_record

log = logging.getLogger(__name__)


@runtime_checkable
class PersistenceStore(Protocol):
    async def load(self, owner_id: str) -> Optional[SiteRecord]: ...
    async def save(self, record: SiteRecord) -> bool: ...


def record_from_row(row: SiteRecordDB) -> SiteRecord:
    return SiteRecord(
        owner_id=row.owner_id,
        blocks=[PlacedBlock.model_validate(b) for b in jl(row.blocks)],
        company_name=row.company_name,
        tagline=row.tagline,
        published=bool(row.published),
        published_slug=row.published_slug,
        last_modified=row.last_modified,
        schema_version=row.schema_version,
    )


def row_fields(record: SiteRecord) -> Dict:
    return {
        "blocks":         jd([b.model_dump() for b in record.blocks]),
        "company_name":   record.company_name,
        "tagline":        record.tagline,
        "published":      record.published,
        "published_slug": record.published_slug,
        "last_modified":  record.last_modified,
        "schema_version": record.schema_version,
    }


class SqlPersistenceStore:
    def __init__(self, session_factory: Optional[Callable[[], Session]] = None):
        self._session_factory = session_factory or database.new_session

    async def load(self, owner_id: str) -> Optional[SiteRecord]:
        return await asyncio.to_thread(self.load_sync, owner_id)

    async def save(self, record: SiteRecord) -> bool:
        return await asyncio.to_thread(self.save_sync, record)

    def load_sync(self, owner_id: str) -> Optional[SiteRecord]:
        with self._session_factory() as db:
            row = db_get_site_record(db, owner_id)
            return record_from_row(row) if row else None

    def save_sync(self, record: SiteRecord) -> bool:
        try:
            with self._session_factory() as db:
                db_upsert_site_record(db, record.owner_id, **row_fields(record))
        except SQLAlchemyError as e:
            log.warning("Écriture distante en échec pour %s : %s", record.owner_id, e)
            return False
        log.info("Site %s enregistré (%d blocs)", record.owner_id, len(record.blocks))
        return True


def sync_pending_records(cache, store: SqlPersistenceStore) -> dict:
    """
    Pousse vers le store distant les entrées du cache marquées `pending`
    lorsqu'elles sont plus récentes que la copie distante.

    Returns:
        {"checked": int, "pushed": int, "skipped": int, "errors": int}
    """
    stats = {"checked": 0, "pushed": 0, "skipped": 0, "errors": 0}
    for key in cache.keys(KEY_PREFIX):
        entry = read_cached_record(cache, key[len(KEY_PREFIX):])
        if entry is None or not entry.pending:
            continue
        stats["checked"] += 1
        record = entry.record
        try:
            remote = store.load_sync(record.owner_id)
        except SQLAlchemyError as e:
            log.warning("sync_pending : lecture %s impossible : %s", record.owner_id, e)
            stats["errors"] += 1
            continue
        if remote is not None and remote.last_modified >= record.last_modified:
            write_cached_record(cache, remote, pending=False)
            stats["skipped"] += 1
            continue
        if store.save_sync(record):
            write_cached_record(cache, record, pending=False)
            stats["pushed"] += 1
        else:
            stats["errors"] += 1
    return stats
