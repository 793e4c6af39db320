"""
Autosave / Persistence Controller — écritures différées vers le store distant.

Statuts : saved → saving → {saved | error} ; error → saving au prochain déclenchement.

  - chaque mutation (ré)arme un debounce de AUTOSAVE_DELAY_S secondes :
    N modifications dans la fenêtre → une seule écriture
  - une seule écriture en vol ; un déclenchement pendant l'écriture est
    rejoué dès qu'elle se termine, avec l'état le plus récent
  - save_now() annule le timer, attend l'écriture en vol puis écrit
  - échec distant → repli dans le cache local (pending) + statut error ;
    succès → cache local rafraîchi + statut saved
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import AUTOSAVE_DELAY_S
from ..core.events import Event, EventBus, Topic
from ..models import SaveStatus, SiteRecord, can_transition, utcnow
from ..notifications import LogNotifier, NotificationKind, Notifier
from .debouncer import Debouncer
from .local_cache import LocalCache, write_cached_record
from .store import PersistenceStore

log = logging.getLogger(__name__)


class AutosaveController:
    def __init__(
        self,
        build_record: Callable[[], SiteRecord],
        persistence: PersistenceStore,
        cache: LocalCache,
        notifier: Optional[Notifier] = None,
        bus: Optional[EventBus] = None,
        delay: Optional[float] = None,
    ):
        """
        Args:
            build_record: fabrique l'enregistrement à écrire (état courant au moment du tir)
            persistence:  store distant (source de vérité)
            cache:        cache local de repli
            notifier:     canal de notification utilisateur
            bus:          bus sur lequel publier SAVE_STATUS_CHANGED
            delay:        fenêtre de debounce en secondes
        """
        self._build_record = build_record
        self._persistence = persistence
        self._cache = cache
        self._notifier = notifier or LogNotifier()
        self._bus = bus
        self._debouncer = Debouncer(AUTOSAVE_DELAY_S if delay is None else delay)
        self._in_flight: Optional[asyncio.Task] = None
        self._fire_after_flight = False
        self._dirty = False

        self.status: SaveStatus = SaveStatus.SAVED
        self.last_saved_at: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.write_count = 0

    # ── Abonnements ────────────────────────────────────────────────────────

    def attach(self, bus: EventBus) -> None:
        bus.subscribe(Topic.BLOCKS_CHANGED, self._on_change)
        bus.subscribe(Topic.SITE_CHANGED, self._on_change)

    def _on_change(self, event: Event) -> None:
        if event.payload.get("action") == "load":
            return
        self.mark_dirty()

    # ── État ───────────────────────────────────────────────────────────────

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def pending(self) -> bool:
        """Une écriture est programmée (timer armé ou rejeu après l'écriture en vol)."""
        return self._debouncer.pending or self._fire_after_flight or self._dirty

    def status_payload(self) -> dict:
        return {
            "status":        self.status.value,
            "pending":       self.pending,
            "in_flight":     self.in_flight,
            "last_saved_at": self.last_saved_at.isoformat() if self.last_saved_at else None,
            "last_error":    self.last_error,
            "write_count":   self.write_count,
        }

    # ── Déclenchement ──────────────────────────────────────────────────────

    def mark_dirty(self) -> None:
        """(Ré)arme le debounce. Hors boucle asyncio, l'écriture attend le prochain save_now()."""
        try:
            self._debouncer.schedule(self._fire)
        except RuntimeError:
            log.debug("Autosave : pas de boucle asyncio active — écriture différée")
            self._dirty = True

    def _fire(self) -> None:
        if self.in_flight:
            self._fire_after_flight = True
            return
        self._in_flight = asyncio.get_running_loop().create_task(self._write())

    async def save_now(self, notify: bool = True) -> bool:
        """Sauvegarde manuelle : court-circuite le debounce, même discipline single-flight."""
        self._debouncer.cancel()
        self._fire_after_flight = False
        while self.in_flight:
            await asyncio.shield(self._in_flight)
            self._debouncer.cancel()
            self._fire_after_flight = False
        task = asyncio.get_running_loop().create_task(self._write(manual=notify))
        self._in_flight = task
        return await task

    # ── Écriture ───────────────────────────────────────────────────────────

    async def _write(self, manual: bool = False) -> bool:
        self._dirty = False
        record = self._build_record()
        record.last_modified = utcnow()
        recovering = self.status == SaveStatus.ERROR
        self._set_status(SaveStatus.SAVING)
        self.write_count += 1

        try:
            ok = await self._persistence.save(record)
            error = None if ok else "écriture refusée par le store distant"
        except Exception as e:
            log.warning("Autosave %s : écriture distante en échec : %s", record.owner_id, e)
            ok, error = False, str(e) or e.__class__.__name__

        try:
            if ok:
                write_cached_record(self._cache, record, pending=False)
                self.last_saved_at = record.last_modified
                self.last_error = None
                self._set_status(SaveStatus.SAVED)
                if manual or recovering:
                    self._notifier.notify(NotificationKind.SAVE_SUCCESS, "Modifications enregistrées")
            else:
                write_cached_record(self._cache, record, pending=True)
                self.last_error = error
                self._set_status(SaveStatus.ERROR)
                self._notifier.notify(
                    NotificationKind.SAVE_ERROR,
                    "Échec de l'enregistrement — copie conservée localement",
                    retryable=True,
                )
        finally:
            self._in_flight = None
            if self._fire_after_flight:
                self._fire_after_flight = False
                self._fire()
        return ok

    def _set_status(self, status: SaveStatus) -> None:
        if status == self.status:
            return
        if not can_transition(self.status.value, status.value):
            log.warning("Transition de statut inattendue %s → %s", self.status.value, status.value)
        previous, self.status = self.status, status
        if self._bus is not None:
            self._bus.publish(Topic.SAVE_STATUS_CHANGED, previous=previous.value, status=status.value)

    def stash(self, pending: bool = True) -> bool:
        """Écrit l'état courant dans le cache local, sans écriture distante."""
        record = self._build_record()
        record.last_modified = utcnow()
        return write_cached_record(self._cache, record, pending=pending)

    def cancel(self) -> None:
        """Abandonne l'écriture programmée (fermeture de session)."""
        self._debouncer.cancel()
        self._fire_after_flight = False
