"""
History Manager — undo / redo par snapshots complets de la séquence de blocs.

  snapshot : tronque la branche future, empile, évince le plus ancien au-delà
             de la capacité, index → dernier élément
  undo     : index - 1 puis restore (sans nouveau snapshot)
  redo     : index + 1 puis restore

Invariant : 0 ≤ index < len(history). La sélection n'est jamais restaurée.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..config import HISTORY_CAPACITY
from ..models import PlacedBlock, utcnow
from .events import Event, Topic
from .store import BlockStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistorySnapshot:
    blocks:     Tuple[PlacedBlock, ...]
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def capture(cls, blocks: Sequence[PlacedBlock]) -> "HistorySnapshot":
        return cls(blocks=tuple(b.model_copy(deep=True) for b in blocks))

    def restore_copy(self) -> List[PlacedBlock]:
        return [b.model_copy(deep=True) for b in self.blocks]


class HistoryManager:
    def __init__(self, store: BlockStore, capacity: Optional[int] = None, subscribe: bool = True):
        self.store = store
        self.capacity = max(1, capacity or HISTORY_CAPACITY)
        self._history: List[HistorySnapshot] = []
        self._index = -1
        self.reset(store.blocks())
        if subscribe:
            self._unsubscribe = store.bus.subscribe(Topic.BLOCKS_CHANGED, self._on_blocks_changed)

    # ── Lecture ─────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._history)

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._history) - 1

    # ── Opérations ─────────────────────────────────────────────────────────

    def reset(self, blocks: Sequence[PlacedBlock]) -> None:
        """Nouvelle base d'historique (ouverture de session)."""
        self._history = [HistorySnapshot.capture(blocks)]
        self._index = 0

    def snapshot(self, blocks: Sequence[PlacedBlock]) -> HistorySnapshot:
        if self._index < len(self._history) - 1:
            del self._history[self._index + 1:]
        snap = HistorySnapshot.capture(blocks)
        self._history.append(snap)
        if len(self._history) > self.capacity:
            evicted = len(self._history) - self.capacity
            del self._history[:evicted]
            log.debug("Historique plein — %d snapshot(s) évincé(s)", evicted)
        self._index = len(self._history) - 1
        return snap

    def undo(self) -> bool:
        if not self.can_undo:
            log.info("Rien à annuler")
            return False
        self._index -= 1
        self.store.restore(self._history[self._index].restore_copy(), action="undo")
        return True

    def redo(self) -> bool:
        if not self.can_redo:
            log.info("Rien à rétablir")
            return False
        self._index += 1
        self.store.restore(self._history[self._index].restore_copy(), action="redo")
        return True

    def detach(self) -> None:
        unsubscribe = getattr(self, "_unsubscribe", None)
        if unsubscribe:
            unsubscribe()

    # ── Interne ────────────────────────────────────────────────────────────

    def _on_blocks_changed(self, event: Event) -> None:
        if event.payload.get("recorded"):
            self.snapshot(self.store.blocks())
