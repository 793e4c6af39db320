"""
EditorSession — racine de composition d'une session d'édition.

Les composants reçoivent explicitement leurs dépendances (store, bus,
historique, autosave) au lieu de partager un contexte global.

Flux :
  action utilisateur → PlacementEngine / SettingsEditor → BlockStore
    → BLOCKS_CHANGED → HistoryManager.snapshot + AutosaveController.mark_dirty
    → layout() recalculé à la demande
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from .core import BlockStore, EventBus, HistoryManager, PlacementEngine, SettingsEditor, Topic
from .errors import PersistenceError
from .models import SiteFields, SiteRecord
from .notifications import LogNotifier, Notifier
from .persistence import AutosaveController, LocalCache, PersistenceStore, read_cached_record
from .publish import PublishResult, publish as publish_site, unpublish as unpublish_site
from .renderer import LayoutItem, LayoutRenderer, Renderer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserSession:
    """Session d'authentification (fournie par la couche auth, hors périmètre)."""
    account_id: str


class EditorSession:
    def __init__(
        self,
        owner_id: str,
        persistence: PersistenceStore,
        cache: LocalCache,
        record: Optional[SiteRecord] = None,
        user: Optional[UserSession] = None,
        notifier: Optional[Notifier] = None,
        renderer: Optional[Renderer] = None,
        autosave_delay: Optional[float] = None,
        history_capacity: Optional[int] = None,
    ):
        self.owner_id = owner_id
        self.user = user
        self.notifier = notifier or LogNotifier()
        self.renderer = renderer or LayoutRenderer()

        record = record or SiteRecord(owner_id=owner_id)
        self.site = SiteFields(
            company_name=record.company_name,
            tagline=record.tagline,
            published=record.published,
            published_slug=record.published_slug,
        )

        self.bus = EventBus()
        self.store = BlockStore(self.bus)
        self.store.restore(record.blocks, action="load")

        self.history = HistoryManager(self.store, capacity=history_capacity)
        self.editor = SettingsEditor(self.store)
        self.placement = PlacementEngine(self.store)
        self.autosave = AutosaveController(
            self.to_record, persistence, cache,
            notifier=self.notifier, bus=self.bus, delay=autosave_delay,
        )
        self.autosave.attach(self.bus)

    @classmethod
    async def open(
        cls,
        owner_id: str,
        persistence: PersistenceStore,
        cache: LocalCache,
        **kwargs,
    ) -> "EditorSession":
        """
        Ouvre une session : charge l'enregistrement le plus récent entre le
        store distant et le cache local (une écriture en attente peut être
        plus récente que la copie distante). Aucun enregistrement → défauts.

        Raises:
            PersistenceError: store distant illisible et aucune copie en cache
        """
        remote, load_error = None, None
        try:
            remote = await persistence.load(owner_id)
        except Exception as e:
            load_error = e
            log.warning("Chargement distant impossible pour %s : %s — repli sur le cache", owner_id, e)

        cached = read_cached_record(cache, owner_id)
        if load_error is not None and cached is None:
            # État distant inconnu : pas d'ouverture sur les défauts
            raise PersistenceError(f"Site de {owner_id} indisponible, réessayez : {load_error}") from load_error
        record = remote
        if cached is not None and (remote is None or cached.record.last_modified > remote.last_modified):
            record = cached.record
            log.info("Session %s : enregistrement du cache local (pending=%s)", owner_id, cached.pending)

        session = cls(owner_id, persistence, cache, record=record, **kwargs)
        log.info("Session ouverte pour %s — %d bloc(s)", owner_id, len(session.store))
        return session

    # ── Projection ─────────────────────────────────────────────────────────

    def to_record(self) -> SiteRecord:
        return SiteRecord(
            owner_id=self.owner_id,
            blocks=self.store.blocks(),
            **self.site.model_dump(),
        )

    def layout(self) -> List[LayoutItem]:
        return self.renderer.render_layout(self.store.blocks())

    # ── Historique ─────────────────────────────────────────────────────────

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # ── Champs du site ─────────────────────────────────────────────────────

    def set_site_fields(self, company_name: Optional[str] = None, tagline: Optional[str] = None) -> SiteFields:
        """Met à jour les champs d'identification (non annulables, sauvegardés par l'autosave)."""
        changed = []
        if company_name is not None and company_name != self.site.company_name:
            self.site.company_name = company_name
            changed.append("company_name")
        if tagline is not None and tagline != self.site.tagline:
            self.site.tagline = tagline
            changed.append("tagline")
        if changed:
            self.bus.publish(Topic.SITE_CHANGED, action="site", fields=changed)
        return self.site.model_copy()

    # ── Persistance / publication ──────────────────────────────────────────

    async def save(self) -> bool:
        return await self.autosave.save_now()

    async def publish(self, base_url: Optional[str] = None) -> PublishResult:
        return await publish_site(self, base_url=base_url)

    async def unpublish(self) -> bool:
        return await unpublish_site(self)

    def close(self) -> None:
        self.autosave.cancel()
        self.history.detach()
