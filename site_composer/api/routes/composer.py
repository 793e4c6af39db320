"""
Composer — endpoints de l'éditeur de site par blocs.

GET    /api/composer/catalog                       → catalogue des types de blocs
POST   /api/composer/sessions {owner_id}           → ouvre (ou reprend) une session
DELETE /api/composer/sessions/{owner_id}          → ferme la session (flush des écritures)
GET    /api/composer/{owner_id}/layout             → layout résolu
POST   /api/composer/{owner_id}/blocks             → ajoute un bloc
PATCH  /api/composer/{owner_id}/blocks/{id}        → modifie contenu / style
DELETE /api/composer/{owner_id}/blocks/{id}        → supprime
POST   /api/composer/{owner_id}/blocks/{id}/duplicate
POST   /api/composer/{owner_id}/blocks/{id}/move
POST   /api/composer/{owner_id}/blocks/{id}/select
POST   /api/composer/{owner_id}/drop               → drag & drop
POST   /api/composer/{owner_id}/undo | /redo
PATCH  /api/composer/{owner_id}/site               → nom / accroche
POST   /api/composer/{owner_id}/save               → sauvegarde manuelle
GET    /api/composer/{owner_id}/status             → statut autosave + notifications
POST   /api/composer/{owner_id}/publish | /unpublish
POST   /api/composer/{owner_id}/import
GET    /api/composer/{owner_id}/export
GET    /api/composer/public/{slug}                 → layout d'un site publié
GET    /api/composer/jobs                          → état du scheduler
POST   /api/composer/jobs/sync                     → resync immédiate du cache local

L'identité du compte arrive par l'en-tête X-Account-Id (auth hors périmètre).
"""
import asyncio
import logging
import os
from contextlib import contextmanager
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ...blocks import catalog_payload
from ...config import CACHE_DIR
from ...core import DragSource, DropKind, DropTarget
from ...database import db_get_by_slug, get_db
from ...errors import NotFoundError, PersistenceError, ValidationError
from ...models import (
    AddBlockInput, DropInput, ImportInput, MoveBlockInput,
    SessionOpenInput, SiteFieldsInput, UpdateBlockInput,
)
from ...notifications import RecordingNotifier
from ...persistence import FileLocalCache, SqlPersistenceStore, record_from_row
from ...renderer import render_layout
from ...scheduler import scheduler_status, sync_cache_now
from ...session import EditorSession, UserSession

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/composer", tags=["Composer"])

# Sessions ouvertes par owner_id, accédées depuis la boucle asyncio uniquement
_SESSIONS: Dict[str, EditorSession] = {}


# ── Helpers ────────────────────────────────────────────────────────────────────

@contextmanager
def _translate_errors():
    """Erreurs du moteur → HTTPException."""
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(404, str(e))
    except ValidationError as e:
        raise HTTPException(422, str(e))
    except PersistenceError as e:
        raise HTTPException(503, str(e))


def _session(owner_id: str) -> EditorSession:
    session = _SESSIONS.get(owner_id)
    if session is None:
        raise HTTPException(404, f"Aucune session ouverte pour {owner_id}")
    return session


def _snapshot(session: EditorSession) -> dict:
    """État complet renvoyé après chaque mutation."""
    return {
        "owner_id":    session.owner_id,
        "site":        session.site.model_dump(),
        "layout":      [item.model_dump() for item in session.layout()],
        "selected_id": session.store.ui.selected_id,
        "can_undo":    session.history.can_undo,
        "can_redo":    session.history.can_redo,
        "save":        session.autosave.status_payload(),
    }


async def close_sessions():
    """Ferme toutes les sessions (shutdown) en annulant les écritures programmées."""
    for session in list(_SESSIONS.values()):
        session.close()
    _SESSIONS.clear()


# ── Catalogue ──────────────────────────────────────────────────────────────────

@router.get("/catalog")
def catalog():
    return catalog_payload()


# ── Public (avant les routes /{owner_id}/…) ────────────────────────────────────

@router.get("/public/{slug}")
def public_site(slug: str, db: Session = Depends(get_db)):
    row = db_get_by_slug(db, slug)
    if not row:
        raise HTTPException(404, "Site non publié")
    record = record_from_row(row)
    return {
        "slug":         slug,
        "company_name": record.company_name,
        "tagline":      record.tagline,
        "layout":       [item.model_dump() for item in render_layout(record.blocks)],
    }


# ── Tâches de fond ─────────────────────────────────────────────────────────────

@router.get("/jobs")
def jobs():
    return scheduler_status()


@router.post("/jobs/sync")
async def sync_jobs():
    stats = await asyncio.to_thread(sync_cache_now, os.getenv("CACHE_DIR", CACHE_DIR))
    if "error" in stats:
        raise HTTPException(503, stats["error"])
    return stats


# ── Sessions ───────────────────────────────────────────────────────────────────

@router.post("/sessions")
async def open_session(data: SessionOpenInput, x_account_id: Optional[str] = Header(default=None)):
    owner_id = data.owner_id.strip()
    if not owner_id:
        raise HTTPException(400, "owner_id requis")
    session = _SESSIONS.get(owner_id)
    if session is None:
        with _translate_errors():
            session = await EditorSession.open(
                owner_id,
                SqlPersistenceStore(),
                FileLocalCache(os.getenv("CACHE_DIR", CACHE_DIR)),
                notifier=RecordingNotifier(),
            )
        _SESSIONS[owner_id] = session
    if x_account_id:
        session.user = UserSession(account_id=x_account_id)
    return _snapshot(session)


@router.delete("/sessions/{owner_id}")
async def close_session(owner_id: str):
    session = _SESSIONS.pop(owner_id, None)
    if session is None:
        raise HTTPException(404, f"Aucune session ouverte pour {owner_id}")
    if session.autosave.pending:
        await session.save()
    session.close()
    return {"ok": True}


@router.get("/{owner_id}/layout")
async def layout(owner_id: str):
    return _snapshot(_session(owner_id))


# ── Blocs ──────────────────────────────────────────────────────────────────────

@router.post("/{owner_id}/blocks")
async def add_block(owner_id: str, data: AddBlockInput):
    session = _session(owner_id)
    with _translate_errors():
        block = session.store.add(
            data.block_type,
            at_end=data.position is None,
            position=data.position,
        )
    session.store.select(block.id)
    return {"block": block.model_dump(), **_snapshot(session)}


@router.patch("/{owner_id}/blocks/{block_id}")
async def update_block(owner_id: str, block_id: str, data: UpdateBlockInput):
    session = _session(owner_id)
    with _translate_errors():
        block = session.editor.edit(block_id, content=data.content, style=data.style)
    return {"block": block.model_dump(), **_snapshot(session)}


@router.delete("/{owner_id}/blocks/{block_id}")
async def delete_block(owner_id: str, block_id: str):
    session = _session(owner_id)
    if not session.store.remove(block_id):
        raise HTTPException(404, f"Bloc introuvable : {block_id}")
    return _snapshot(session)


@router.post("/{owner_id}/blocks/{block_id}/duplicate")
async def duplicate_block(owner_id: str, block_id: str):
    session = _session(owner_id)
    clone = session.store.duplicate(block_id)
    if clone is None:
        raise HTTPException(404, f"Bloc introuvable : {block_id}")
    return {"block": clone.model_dump(), **_snapshot(session)}


@router.post("/{owner_id}/blocks/{block_id}/move")
async def move_block(owner_id: str, block_id: str, data: MoveBlockInput):
    session = _session(owner_id)
    if block_id not in session.store:
        raise HTTPException(404, f"Bloc introuvable : {block_id}")
    moved = session.store.reorder(block_id, data.position)
    return {"moved": moved, **_snapshot(session)}


@router.post("/{owner_id}/blocks/{block_id}/select")
async def select_block(owner_id: str, block_id: str):
    session = _session(owner_id)
    if not session.store.select(block_id):
        raise HTTPException(404, f"Bloc introuvable : {block_id}")
    return _snapshot(session)


@router.post("/{owner_id}/drop")
async def drop(owner_id: str, data: DropInput):
    session = _session(owner_id)
    if bool(data.block_type) == bool(data.block_id):
        raise HTTPException(400, "Fournir block_type OU block_id")
    source = DragSource.new(data.block_type) if data.block_type else DragSource.existing(data.block_id)

    target = None
    if data.target:
        try:
            kind = DropKind(data.target)
        except ValueError:
            raise HTTPException(400, f"Cible de drop inconnue : {data.target}")
        target = DropTarget(kind, data.target_id)

    with _translate_errors():
        session.placement.start_drag(source)
        block = session.placement.drop(target)
    return {"block": block.model_dump() if block else None, **_snapshot(session)}


# ── Historique ─────────────────────────────────────────────────────────────────

@router.post("/{owner_id}/undo")
async def undo(owner_id: str):
    session = _session(owner_id)
    return {"changed": session.undo(), **_snapshot(session)}


@router.post("/{owner_id}/redo")
async def redo(owner_id: str):
    session = _session(owner_id)
    return {"changed": session.redo(), **_snapshot(session)}


# ── Site / persistance / publication ───────────────────────────────────────────

@router.patch("/{owner_id}/site")
async def update_site(owner_id: str, data: SiteFieldsInput):
    session = _session(owner_id)
    session.set_site_fields(company_name=data.company_name, tagline=data.tagline)
    return _snapshot(session)


@router.post("/{owner_id}/save")
async def save(owner_id: str):
    session = _session(owner_id)
    ok = await session.save()
    if not ok:
        raise HTTPException(503, session.autosave.last_error or "Enregistrement impossible")
    return _snapshot(session)


@router.get("/{owner_id}/status")
async def status(owner_id: str):
    session = _session(owner_id)
    notifier = session.notifier
    notifications = []
    if isinstance(notifier, RecordingNotifier):
        notifications = [
            {"kind": n.kind.value, "message": n.message, "retryable": n.retryable,
             "created_at": n.created_at.isoformat()}
            for n in notifier.items
        ]
    return {**session.autosave.status_payload(), "notifications": notifications}


@router.post("/{owner_id}/publish")
async def publish(owner_id: str):
    session = _session(owner_id)
    with _translate_errors():
        result = await session.publish()
    return {**result.model_dump(), **_snapshot(session)}


@router.post("/{owner_id}/unpublish")
async def unpublish(owner_id: str):
    session = _session(owner_id)
    with _translate_errors():
        changed = await session.unpublish()
    return {"changed": changed, **_snapshot(session)}


# ── Import / export ────────────────────────────────────────────────────────────

@router.post("/{owner_id}/import")
async def import_blocks(owner_id: str, data: ImportInput):
    session = _session(owner_id)
    with _translate_errors():
        session.store.import_blocks(data.blocks)
    return _snapshot(session)


@router.get("/{owner_id}/export")
async def export_blocks(owner_id: str):
    session = _session(owner_id)
    return {"owner_id": owner_id, "blocks": session.store.export_blocks()}
