"""
Tests persistance — cache local (mémoire / fichiers), store SQLite, resynchronisation.
"""
import sys, os, asyncio
from datetime import datetime
from unittest.mock import patch
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from sqlalchemy.exc import OperationalError

from site_composer import database
from site_composer.models import CachedRecord, PlacedBlock, SiteRecord
from site_composer.persistence import (
    FileLocalCache, MemoryLocalCache, SqlPersistenceStore,
    cache_key, read_cached_record, sync_pending_records, write_cached_record,
)


def _record(owner_id="owner-1", when=datetime(2024, 5, 1, 12, 0), **kwargs):
    return SiteRecord(
        owner_id=owner_id,
        blocks=[PlacedBlock(id="hero-1", block_type="hero", content={"title": "Salut"}, position=0)],
        last_modified=when,
        **kwargs,
    )


@pytest.fixture
def store(tmp_path):
    """Store SQLite sur une DB temporaire."""
    database.init_db(str(tmp_path / "test.db"))
    return SqlPersistenceStore()


# ── Cache local ───────────────────────────────────────────────────────────

class TestLocalCache:
    def test_memory_roundtrip(self):
        cache = MemoryLocalCache()
        assert write_cached_record(cache, _record(), pending=True) is True
        entry = read_cached_record(cache, "owner-1")
        assert entry.pending is True
        assert entry.record.blocks[0].content == {"title": "Salut"}

    def test_missing_entry(self):
        assert read_cached_record(MemoryLocalCache(), "inconnu") is None

    def test_corrupt_entry_ignored(self):
        cache = MemoryLocalCache()
        cache.set(cache_key("owner-1"), "{pas du json")
        assert read_cached_record(cache, "owner-1") is None

    def test_file_cache(self, tmp_path):
        cache = FileLocalCache(str(tmp_path / "cache"))
        write_cached_record(cache, _record(owner_id="a:b/c"), pending=False)
        assert read_cached_record(cache, "a:b/c").record.owner_id == "a:b/c"
        assert cache.keys("site_record:") == ["site_record:a:b/c"]
        cache.remove(cache_key("a:b/c"))
        assert read_cached_record(cache, "a:b/c") is None
        assert cache.keys() == []

    def test_file_cache_owners_with_similar_ids_kept_apart(self, tmp_path):
        cache = FileLocalCache(str(tmp_path / "cache"))
        write_cached_record(cache, _record(owner_id="alice@agency.com", company_name="Alice Tours"), pending=True)
        assert read_cached_record(cache, "alice_agency.com") is None

        write_cached_record(cache, _record(owner_id="alice_agency.com", company_name="Autre"), pending=False)
        assert read_cached_record(cache, "alice@agency.com").record.company_name == "Alice Tours"
        assert read_cached_record(cache, "alice_agency.com").record.company_name == "Autre"
        assert sorted(cache.keys("site_record:")) == ["site_record:alice@agency.com", "site_record:alice_agency.com"]

    def test_entry_of_another_owner_ignored(self):
        cache = MemoryLocalCache()
        cache.set(cache_key("b"), CachedRecord(record=_record(owner_id="a")).model_dump_json())
        assert read_cached_record(cache, "b") is None


# ── Store SQLite ──────────────────────────────────────────────────────────

class TestSqlStore:
    def test_load_missing(self, store):
        assert asyncio.run(store.load("inconnu")) is None

    def test_save_then_load(self, store):
        record = _record(company_name="Aventures Soleil", published=True, published_slug="aventures-soleil-1a2b3c4d")
        assert asyncio.run(store.save(record)) is True
        loaded = asyncio.run(store.load("owner-1"))
        assert loaded.company_name == "Aventures Soleil"
        assert loaded.published is True
        assert loaded.blocks == record.blocks
        assert loaded.last_modified == record.last_modified

    def test_save_overwrites(self, store):
        store.save_sync(_record(company_name="V1"))
        store.save_sync(_record(company_name="V2"))
        assert store.load_sync("owner-1").company_name == "V2"
        with database.new_session() as db:
            assert len(database.db_list_site_records(db)) == 1

    def test_lookup_by_slug_requires_published(self, store):
        store.save_sync(_record(published=False, published_slug="mon-site-00000000"))
        with database.new_session() as db:
            assert database.db_get_by_slug(db, "mon-site-00000000") is None
        store.save_sync(_record(published=True, published_slug="mon-site-00000000"))
        with database.new_session() as db:
            assert database.db_get_by_slug(db, "mon-site-00000000").owner_id == "owner-1"


# ── Resynchronisation du cache ────────────────────────────────────────────

class TestSyncPending:
    def test_pending_newer_record_pushed(self, store):
        cache = MemoryLocalCache()
        write_cached_record(cache, _record(company_name="Hors ligne"), pending=True)
        stats = sync_pending_records(cache, store)
        assert stats == {"checked": 1, "pushed": 1, "skipped": 0, "errors": 0}
        assert store.load_sync("owner-1").company_name == "Hors ligne"
        assert read_cached_record(cache, "owner-1").pending is False

    def test_remote_newer_wins(self, store):
        store.save_sync(_record(company_name="Distant", when=datetime(2024, 6, 1)))
        cache = MemoryLocalCache()
        write_cached_record(cache, _record(company_name="Local", when=datetime(2024, 5, 1)), pending=True)
        stats = sync_pending_records(cache, store)
        assert stats["skipped"] == 1
        assert store.load_sync("owner-1").company_name == "Distant"
        assert read_cached_record(cache, "owner-1").record.company_name == "Distant"

    def test_remote_read_error_counted(self, store):
        cache = MemoryLocalCache()
        write_cached_record(cache, _record(), pending=True)
        with patch.object(store, "load_sync", side_effect=OperationalError("SELECT", {}, Exception("verrou"))):
            stats = sync_pending_records(cache, store)
        assert stats["errors"] == 1
        assert read_cached_record(cache, "owner-1").pending is True

    def test_remote_write_error_keeps_pending(self, store):
        cache = MemoryLocalCache()
        write_cached_record(cache, _record(), pending=True)
        with patch.object(store, "save_sync", return_value=False):
            stats = sync_pending_records(cache, store)
        assert stats == {"checked": 1, "pushed": 0, "skipped": 0, "errors": 1}
        assert read_cached_record(cache, "owner-1").pending is True

    def test_synced_entries_ignored(self, store):
        cache = MemoryLocalCache()
        write_cached_record(cache, _record(), pending=False)
        assert sync_pending_records(cache, store)["checked"] == 0


def test_scheduler_job_syncs_file_cache(store, tmp_path):
    from site_composer.scheduler import sync_cache_now
    cache_dir = str(tmp_path / "cache")
    write_cached_record(FileLocalCache(cache_dir), _record(company_name="Job"), pending=True)
    stats = sync_cache_now(cache_dir)
    assert stats["pushed"] == 1
    assert store.load_sync("owner-1").company_name == "Job"


def test_scheduler_status_lists_sync_job(tmp_path):
    from site_composer.scheduler import (
        SYNC_JOB_ID, scheduler_status, start_scheduler, stop_scheduler,
    )
    assert scheduler_status() == {"running": False, "jobs": []}
    try:
        first = start_scheduler(str(tmp_path / "cache"))
        assert start_scheduler(str(tmp_path / "cache")) is first
        status = scheduler_status()
        assert status["running"] is True
        assert [j["id"] for j in status["jobs"]] == [SYNC_JOB_ID]
        assert status["jobs"][0]["next_run"] is not None
    finally:
        stop_scheduler()
    assert scheduler_status()["running"] is False
