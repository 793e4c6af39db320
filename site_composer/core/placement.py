"""
Placement Engine — résout un drag & drop en position entière puis délègue au store.

Source : type du catalogue (nouveau bloc) OU id d'un bloc existant (réordonnancement).
Cible  : avant X, après X, en fin de liste ; None = lâché hors zone → no-op.
L'état de drag est toujours remis à zéro au drop ou à l'annulation.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..blocks import definition_for
from ..models import PlacedBlock
from .store import BlockStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragSource:
    block_type: Optional[str] = None
    block_id:   Optional[str] = None

    @classmethod
    def new(cls, block_type: str) -> "DragSource":
        return cls(block_type=block_type)

    @classmethod
    def existing(cls, block_id: str) -> "DragSource":
        return cls(block_id=block_id)

    @property
    def is_new(self) -> bool:
        return self.block_id is None


class DropKind(str, Enum):
    BEFORE = "before"
    AFTER  = "after"
    END    = "end"


@dataclass(frozen=True)
class DropTarget:
    kind:     DropKind
    block_id: Optional[str] = None

    @classmethod
    def before(cls, block_id: str) -> "DropTarget":
        return cls(DropKind.BEFORE, block_id)

    @classmethod
    def after(cls, block_id: str) -> "DropTarget":
        return cls(DropKind.AFTER, block_id)

    @classmethod
    def end(cls) -> "DropTarget":
        return cls(DropKind.END)


class PlacementEngine:
    def __init__(self, store: BlockStore):
        self.store = store
        self.active: Optional[DragSource] = None

    def start_drag(self, source: DragSource) -> None:
        if source.is_new:
            definition_for(source.block_type)
        self.active = source
        self.store.ui.drag_id = source.block_id or source.block_type

    def cancel(self) -> None:
        self.active = None
        self.store.ui.drag_id = None

    def resolve_position(self, source: DragSource, target: Optional[DropTarget]) -> Optional[int]:
        """Position cible finale, ou None si la cible n'est pas valide."""
        if target is None:
            return None
        n = len(self.store)

        current = None
        if not source.is_new:
            current = self.store.position_of(source.block_id)
            if current is None:
                return None

        if target.kind == DropKind.END:
            return n if source.is_new else n - 1

        anchor = self.store.position_of(target.block_id) if target.block_id else None
        if anchor is None:
            return None
        if current is not None and target.block_id == source.block_id:
            return current

        index = anchor if target.kind == DropKind.BEFORE else anchor + 1
        # Le bloc déplacé quitte sa place avant d'être réinséré
        if current is not None and current < index:
            index -= 1
        return index

    def drop(self, target: Optional[DropTarget]) -> Optional[PlacedBlock]:
        """Applique le drop. Retourne le bloc ajouté / déplacé, ou None (no-op)."""
        source = self.active
        try:
            if source is None:
                return None
            position = self.resolve_position(source, target)
            if position is None:
                log.info("Drop hors zone valide — ignoré")
                return None
            if source.is_new:
                return self.store.add(source.block_type, at_end=False, position=position)
            self.store.reorder(source.block_id, position)
            return self.store.get(source.block_id)
        finally:
            self.cancel()
