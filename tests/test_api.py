"""
Tests API composer — sessions, blocs, drag & drop, historique, sauvegarde, publication.
"""
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient


# ── Fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def client(tmp_path, monkeypatch):
    """Client de test avec DB SQLite et cache local temporaires, scheduler coupé."""
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("SCHEDULER_ENABLED", "0")

    from site_composer.api.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def owner(client):
    """Ouvre une session pour owner-1 (compte acct-1)."""
    r = client.post("/api/composer/sessions", json={"owner_id": "owner-1"},
                    headers={"X-Account-Id": "acct-1"})
    assert r.status_code == 200
    return "owner-1"


def _add(client, owner, block_type, **kw):
    r = client.post(f"/api/composer/{owner}/blocks", json={"block_type": block_type, **kw})
    assert r.status_code == 200
    return r.json()


def _types(body):
    return [item["block_type"] for item in body["layout"]]


# ── Catalogue / santé ─────────────────────────────────────────────────────

def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_scheduler_started_when_enabled(tmp_path, monkeypatch):
    monkeypatch.setenv("DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setenv("SCHEDULER_ENABLED", "1")
    from site_composer.api.main import app
    with patch("site_composer.scheduler.start_scheduler") as start, \
         patch("site_composer.scheduler.stop_scheduler") as stop:
        with TestClient(app):
            pass
    start.assert_called_once()
    stop.assert_called_once()


def test_catalog(client):
    r = client.get("/api/composer/catalog")
    assert r.status_code == 200
    assert [c["name"] for c in r.json()["categories"]] == ["Layout", "Content", "Interactive"]


# ── Sessions ──────────────────────────────────────────────────────────────

class TestSessions:
    def test_open_empty(self, client, owner):
        body = client.get(f"/api/composer/{owner}/layout").json()
        assert body["layout"] == []
        assert body["can_undo"] is False
        assert body["save"]["status"] == "saved"

    def test_unknown_session_404(self, client):
        assert client.get("/api/composer/personne/layout").status_code == 404

    def test_blank_owner_400(self, client):
        assert client.post("/api/composer/sessions", json={"owner_id": "  "}).status_code == 400

    def test_close_flushes_pending_write(self, client, owner):
        _add(client, owner, "hero")
        assert client.delete(f"/api/composer/sessions/{owner}").status_code == 200
        body = client.post("/api/composer/sessions", json={"owner_id": owner}).json()
        assert _types(body) == ["hero"]

    def test_open_503_when_store_unreadable(self, client):
        from sqlalchemy.exc import OperationalError
        from site_composer.persistence import SqlPersistenceStore
        with patch.object(SqlPersistenceStore, "load_sync", side_effect=OperationalError("SELECT", {}, Exception("db down"))):
            r = client.post("/api/composer/sessions", json={"owner_id": "owner-2"})
        assert r.status_code == 503
        assert client.get("/api/composer/owner-2/layout").status_code == 404


# ── Blocs ─────────────────────────────────────────────────────────────────

class TestBlocks:
    def test_add_and_select(self, client, owner):
        body = _add(client, owner, "hero")
        assert _types(body) == ["hero"]
        assert body["selected_id"] == body["block"]["id"]
        assert body["can_undo"] is True

    def test_add_unknown_type_422(self, client, owner):
        r = client.post(f"/api/composer/{owner}/blocks", json={"block_type": "carousel"})
        assert r.status_code == 422

    def test_add_at_position(self, client, owner):
        _add(client, owner, "hero")
        _add(client, owner, "text")
        body = _add(client, owner, "image", position=1)
        assert _types(body) == ["hero", "image", "text"]

    def test_patch_content_and_style(self, client, owner):
        block_id = _add(client, owner, "hero")["block"]["id"]
        r = client.patch(f"/api/composer/{owner}/blocks/{block_id}",
                         json={"content": {"title": "Bienvenue"}, "style": {"color": "#123456"}})
        assert r.status_code == 200
        item = r.json()["layout"][0]
        assert item["content"]["title"] == "Bienvenue"
        assert item["style"]["color"] == "#123456"

    def test_patch_invalid_value_422(self, client, owner):
        block_id = _add(client, owner, "grid")["block"]["id"]
        r = client.patch(f"/api/composer/{owner}/blocks/{block_id}", json={"content": {"columns": 50}})
        assert r.status_code == 422

    def test_patch_unknown_block_404(self, client, owner):
        r = client.patch(f"/api/composer/{owner}/blocks/inexistant", json={"content": {"title": "x"}})
        assert r.status_code == 404

    def test_delete(self, client, owner):
        block_id = _add(client, owner, "hero")["block"]["id"]
        _add(client, owner, "text")
        body = client.delete(f"/api/composer/{owner}/blocks/{block_id}").json()
        assert _types(body) == ["text"]
        assert [i["position"] for i in body["layout"]] == [0]
        assert client.delete(f"/api/composer/{owner}/blocks/{block_id}").status_code == 404

    def test_duplicate(self, client, owner):
        block_id = _add(client, owner, "hero")["block"]["id"]
        _add(client, owner, "text")
        body = client.post(f"/api/composer/{owner}/blocks/{block_id}/duplicate").json()
        assert _types(body) == ["hero", "text", "hero"]
        assert body["block"]["id"] != block_id

    def test_move(self, client, owner):
        block_id = _add(client, owner, "hero")["block"]["id"]
        _add(client, owner, "text")
        body = client.post(f"/api/composer/{owner}/blocks/{block_id}/move", json={"position": 1}).json()
        assert body["moved"] is True
        assert _types(body) == ["text", "hero"]

    def test_select(self, client, owner):
        first = _add(client, owner, "hero")["block"]["id"]
        _add(client, owner, "text")
        body = client.post(f"/api/composer/{owner}/blocks/{first}/select").json()
        assert body["selected_id"] == first


# ── Drag & drop ───────────────────────────────────────────────────────────

class TestDrop:
    def test_drop_new_block_before(self, client, owner):
        target = _add(client, owner, "hero")["block"]["id"]
        body = client.post(f"/api/composer/{owner}/drop",
                           json={"block_type": "header", "target": "before", "target_id": target}).json()
        assert _types(body) == ["header", "hero"]

    def test_drop_existing_to_end(self, client, owner):
        block_id = _add(client, owner, "hero")["block"]["id"]
        _add(client, owner, "text")
        body = client.post(f"/api/composer/{owner}/drop", json={"block_id": block_id, "target": "end"}).json()
        assert _types(body) == ["text", "hero"]

    def test_drop_outside(self, client, owner):
        _add(client, owner, "hero")
        body = client.post(f"/api/composer/{owner}/drop", json={"block_type": "text"}).json()
        assert body["block"] is None
        assert _types(body) == ["hero"]

    def test_drop_bad_payload(self, client, owner):
        r = client.post(f"/api/composer/{owner}/drop", json={"target": "end"})
        assert r.status_code == 400
        r = client.post(f"/api/composer/{owner}/drop", json={"block_type": "text", "target": "nulle-part"})
        assert r.status_code == 400


# ── Historique ────────────────────────────────────────────────────────────

def test_undo_redo(client, owner):
    _add(client, owner, "hero")
    _add(client, owner, "text")
    body = client.post(f"/api/composer/{owner}/undo").json()
    assert body["changed"] is True
    assert _types(body) == ["hero"]
    assert body["can_redo"] is True
    body = client.post(f"/api/composer/{owner}/redo").json()
    assert _types(body) == ["hero", "text"]
    assert client.post(f"/api/composer/{owner}/redo").json()["changed"] is False


# ── Tâches de fond ────────────────────────────────────────────────────────

def test_jobs_status_when_scheduler_off(client):
    assert client.get("/api/composer/jobs").json() == {"running": False, "jobs": []}


def test_jobs_sync_pushes_pending_cache(client, tmp_path):
    from datetime import datetime
    from site_composer.models import SiteRecord
    from site_composer.persistence import FileLocalCache, SqlPersistenceStore, write_cached_record
    record = SiteRecord(owner_id="owner-9", company_name="Hors ligne", last_modified=datetime(2024, 5, 1))
    write_cached_record(FileLocalCache(str(tmp_path / "cache")), record, pending=True)

    stats = client.post("/api/composer/jobs/sync").json()
    assert stats["pushed"] == 1
    assert SqlPersistenceStore().load_sync("owner-9").company_name == "Hors ligne"


# ── Sauvegarde / statut ───────────────────────────────────────────────────

class TestSave:
    def test_manual_save_persists(self, client, owner):
        _add(client, owner, "hero")
        body = client.post(f"/api/composer/{owner}/save").json()
        assert body["save"]["status"] == "saved"
        assert body["save"]["write_count"] == 1

        from site_composer.persistence import SqlPersistenceStore
        record = SqlPersistenceStore().load_sync(owner)
        assert [b.block_type for b in record.blocks] == ["hero"]

    def test_status_lists_notifications(self, client, owner):
        client.post(f"/api/composer/{owner}/save")
        body = client.get(f"/api/composer/{owner}/status").json()
        assert body["status"] == "saved"
        assert body["notifications"][-1]["kind"] == "save_success"

    def test_save_writes_local_cache(self, client, owner, tmp_path):
        _add(client, owner, "quote")
        client.post(f"/api/composer/{owner}/save")
        from site_composer.persistence import FileLocalCache, read_cached_record
        entry = read_cached_record(FileLocalCache(str(tmp_path / "cache")), owner)
        assert entry.pending is False
        assert [b.block_type for b in entry.record.blocks] == ["quote"]


# ── Site / publication ────────────────────────────────────────────────────

class TestPublish:
    def test_publish_requires_company_name(self, client, owner):
        r = client.post(f"/api/composer/{owner}/publish")
        assert r.status_code == 422
        assert client.get(f"/api/composer/{owner}/layout").json()["site"]["published"] is False

    def test_publish_requires_account(self, client):
        client.post("/api/composer/sessions", json={"owner_id": "anonyme"})
        client.patch("/api/composer/anonyme/site", json={"company_name": "Agence"})
        assert client.post("/api/composer/anonyme/publish").status_code == 422

    def test_publish_and_public_page(self, client, owner):
        _add(client, owner, "hero")
        r = client.patch(f"/api/composer/{owner}/site", json={"company_name": "Aventures Soleil"})
        assert r.json()["site"]["company_name"] == "Aventures Soleil"

        body = client.post(f"/api/composer/{owner}/publish").json()
        assert body["slug"].startswith("aventures-soleil-")
        assert body["url"].endswith(f"/tour/{body['slug']}")
        assert body["site"]["published"] is True

        public = client.get(f"/api/composer/public/{body['slug']}")
        assert public.status_code == 200
        assert public.json()["company_name"] == "Aventures Soleil"
        assert [i["block_type"] for i in public.json()["layout"]] == ["hero"]

    def test_unpublish_hides_public_page(self, client, owner):
        client.patch(f"/api/composer/{owner}/site", json={"company_name": "Aventures Soleil"})
        slug = client.post(f"/api/composer/{owner}/publish").json()["slug"]
        body = client.post(f"/api/composer/{owner}/unpublish").json()
        assert body["changed"] is True
        assert client.get(f"/api/composer/public/{slug}").status_code == 404

    def test_unknown_slug_404(self, client):
        assert client.get("/api/composer/public/inconnu").status_code == 404


# ── Import / export ───────────────────────────────────────────────────────

class TestImportExport:
    def test_export_import(self, client, owner):
        _add(client, owner, "hero")
        _add(client, owner, "map")
        exported = client.get(f"/api/composer/{owner}/export").json()["blocks"]
        client.post("/api/composer/sessions", json={"owner_id": "owner-2"})
        body = client.post("/api/composer/owner-2/import", json={"blocks": exported}).json()
        assert _types(body) == ["hero", "map"]

    def test_import_invalid_422(self, client, owner):
        r = client.post(f"/api/composer/{owner}/import", json={"blocks": [{"id": "x", "block_type": "carousel"}]})
        assert r.status_code == 422
