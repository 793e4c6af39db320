"""
Block Instance Store — collection ordonnée et mutable des blocs posés.

Invariant : après chaque mutation (add / remove / duplicate / reorder / import),
les positions forment exactement {0, …, n-1}, sans trou ni doublon.

Chaque mutation validée publie BLOCKS_CHANGED (recorded=True) sur le bus ;
restore() publie recorded=False (undo/redo, chargement) pour que l'historique
ne crée pas de nouveau snapshot.
"""
import copy
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import ValidationError as PydanticValidationError

from ..blocks import definition_for, validate_style
from ..errors import NotFoundError, ValidationError
from ..models import PlacedBlock
from .events import EventBus, Topic

log = logging.getLogger(__name__)


@dataclass
class EditorUIState:
    """État transitoire — ni persisté, ni annulable."""
    selected_id: Optional[str] = None
    drag_id:     Optional[str] = None


class BlockStore:
    def __init__(self, bus: Optional[EventBus] = None):
        self.bus = bus or EventBus()
        self.ui = EditorUIState()
        self._blocks: List[PlacedBlock] = []
        self._issued_ids: Set[str] = set()

    # ── Lecture ─────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, block_id: str) -> bool:
        return self._find(block_id) is not None

    def blocks(self) -> List[PlacedBlock]:
        """Copie profonde des blocs, triés par position."""
        return [b.model_copy(deep=True) for b in self._blocks]

    def get(self, block_id: str) -> PlacedBlock:
        block = self._find(block_id)
        if block is None:
            raise NotFoundError(block_id)
        return block.model_copy(deep=True)

    def position_of(self, block_id: str) -> Optional[int]:
        block = self._find(block_id)
        return block.position if block else None

    # ── Mutations ──────────────────────────────────────────────────────────

    def add(self, block_type: str, at_end: bool = True, position: Optional[int] = None) -> PlacedBlock:
        """
        Instancie un bloc depuis le catalogue.

        Args:
            block_type: type du catalogue (UnknownBlockTypeError si inconnu)
            at_end:     ajout en fin de liste (position = longueur courante)
            position:   position d'insertion si at_end=False (bornée à [0, n])

        Returns:
            Copie du bloc créé
        """
        definition = definition_for(block_type)
        block = PlacedBlock(
            id=self._new_id(block_type),
            block_type=block_type,
            content=definition.new_content(),
            style=definition.new_style(),
        )
        if at_end or position is None:
            index = len(self._blocks)
        else:
            index = max(0, min(position, len(self._blocks)))
        self._blocks.insert(index, block)
        self._renumber()
        self._commit("add", block.id)
        return block.model_copy(deep=True)

    def remove(self, block_id: str) -> bool:
        """Supprime un bloc et referme le trou. Id inconnu → False (no-op)."""
        block = self._find(block_id)
        if block is None:
            log.warning("remove : bloc %s introuvable", block_id)
            return False
        self._blocks.remove(block)
        self._renumber()
        if self.ui.selected_id == block_id:
            self.clear_selection()
        self._commit("remove", block_id)
        return True

    def duplicate(self, block_id: str) -> Optional[PlacedBlock]:
        """Copie profonde ajoutée en fin de liste (pas à côté de l'original)."""
        original = self._find(block_id)
        if original is None:
            log.warning("duplicate : bloc %s introuvable", block_id)
            return None
        clone = PlacedBlock(
            id=self._new_id(original.block_type),
            block_type=original.block_type,
            content=copy.deepcopy(original.content),
            style=copy.deepcopy(original.style),
            position=len(self._blocks),
        )
        self._blocks.append(clone)
        self._commit("duplicate", clone.id, source_id=block_id)
        return clone.model_copy(deep=True)

    def reorder(self, block_id: str, new_position: int) -> bool:
        """Déplacement type array-move (pas un swap) ; position bornée à [0, n-1]."""
        block = self._find(block_id)
        if block is None:
            log.warning("reorder : bloc %s introuvable", block_id)
            return False
        target = max(0, min(new_position, len(self._blocks) - 1))
        if target == block.position:
            return False
        self._blocks.remove(block)
        self._blocks.insert(target, block)
        self._renumber()
        self._commit("reorder", block_id, position=target)
        return True

    def update(
        self,
        block_id: str,
        content_patch: Optional[Dict[str, Any]] = None,
        style_patch: Optional[Dict[str, Any]] = None,
    ) -> Optional[PlacedBlock]:
        """
        Fusion superficielle des patches dans content / style.
        Les clés non fournies conservent leur valeur ; les clés inconnues du
        type sont acceptées (ignorées au rendu).
        """
        block = self._find(block_id)
        if block is None:
            log.warning("update : bloc %s introuvable", block_id)
            return None
        content = {**block.content, **copy.deepcopy(content_patch or {})}
        style   = {**block.style, **copy.deepcopy(style_patch or {})}
        if content == block.content and style == block.style:
            return block.model_copy(deep=True)
        block.content = content
        block.style   = style
        self._commit(
            "update", block_id,
            content_keys=sorted(content_patch or {}),
            style_keys=sorted(style_patch or {}),
        )
        return block.model_copy(deep=True)

    def restore(self, blocks: Iterable[PlacedBlock], action: str = "restore") -> None:
        """Remplace toute la séquence sans créer de snapshot (undo/redo, chargement)."""
        restored = sorted((b.model_copy(deep=True) for b in blocks), key=lambda b: b.position)
        self._blocks = restored
        self._renumber()
        self._issued_ids.update(b.id for b in restored)
        if self.ui.selected_id and self._find(self.ui.selected_id) is None:
            self.clear_selection()
        self.bus.publish(Topic.BLOCKS_CHANGED, action=action, block_id=None, recorded=False)

    # ── Import / export ────────────────────────────────────────────────────

    def export_blocks(self) -> List[Dict[str, Any]]:
        return [b.model_dump() for b in self._blocks]

    def import_blocks(self, data: Any) -> List[PlacedBlock]:
        """
        Remplace la séquence par des blocs importés (mutation annulable).
        Donnée malformée, type inconnu, contenu ou style invalide, id dupliqué
        → ValidationError, état inchangé.
        """
        if not isinstance(data, list):
            raise ValidationError("Import invalide : une liste de blocs est attendue")
        parsed: List[PlacedBlock] = []
        seen: Set[str] = set()
        for i, raw in enumerate(data):
            try:
                block = PlacedBlock.model_validate(raw)
            except PydanticValidationError as e:
                raise ValidationError(f"Import invalide : bloc #{i} malformé ({e.error_count()} erreur(s))") from e
            definition = definition_for(block.block_type)
            definition.validate_content({k: v for k, v in block.content.items() if k in definition.content_fields})
            if block.style:
                validate_style(block.style)
            if block.id in seen:
                raise ValidationError(f"Import invalide : id dupliqué {block.id!r}")
            seen.add(block.id)
            parsed.append(block)

        self._blocks = sorted(parsed, key=lambda b: b.position)
        self._renumber()
        self._issued_ids.update(seen)
        if self.ui.selected_id and self.ui.selected_id not in seen:
            self.clear_selection()
        self._commit("import", None, count=len(parsed))
        return self.blocks()

    # ── Sélection (état UI transitoire) ────────────────────────────────────

    def select(self, block_id: str) -> bool:
        if self._find(block_id) is None:
            log.warning("select : bloc %s introuvable", block_id)
            return False
        self.ui.selected_id = block_id
        self.bus.publish(Topic.SELECTION_CHANGED, block_id=block_id)
        return True

    def clear_selection(self) -> None:
        if self.ui.selected_id is None:
            return
        self.ui.selected_id = None
        self.bus.publish(Topic.SELECTION_CHANGED, block_id=None)

    # ── Interne ────────────────────────────────────────────────────────────

    def _find(self, block_id: str) -> Optional[PlacedBlock]:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def _new_id(self, block_type: str) -> str:
        while True:
            block_id = f"{block_type}-{uuid.uuid4().hex[:12]}"
            if block_id not in self._issued_ids:
                self._issued_ids.add(block_id)
                return block_id

    def _renumber(self) -> None:
        for i, block in enumerate(self._blocks):
            block.position = i

    def _commit(self, action: str, block_id: Optional[str], **extra) -> None:
        self.bus.publish(Topic.BLOCKS_CHANGED, action=action, block_id=block_id, recorded=True, **extra)
