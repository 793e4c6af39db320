"""
Settings Editor — édition du contenu et du style du bloc sélectionné.

Pas de brouillon local : chaque modification appelle BlockStore.update et
devient une mutation validée (donc annulable). Le regroupement des écritures
réseau est assuré par l'autosave, pas par l'éditeur.
"""
import logging
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..blocks import STYLE_FIELDS, BlockStyle, definition_for, validate_style
from ..errors import NotFoundError, ValidationError
from ..models import PlacedBlock
from .store import BlockStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldFacet:
    name:    str
    kind:    str  # text | number | choice | list | items
    value:   Any
    choices: Tuple[str, ...] = ()


def _field_kind(annotation: Any) -> Tuple[str, Tuple[str, ...]]:
    """Déduit le type de champ de formulaire depuis l'annotation Pydantic."""
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Union:
        inner = [a for a in args if a is not type(None)]
        return _field_kind(inner[0]) if inner else ("text", ())
    if origin is typing.Literal:
        return "choice", tuple(str(a) for a in args)
    if origin in (list, List):
        return ("list", ()) if args and args[0] is str else ("items", ())
    if annotation in (int, float):
        return "number", ()
    return "text", ()


class SettingsEditor:
    def __init__(self, store: BlockStore):
        self.store = store

    # ── Sélection ──────────────────────────────────────────────────────────

    def select(self, block_id: str) -> bool:
        return self.store.select(block_id)

    @property
    def selected(self) -> PlacedBlock:
        block_id = self.store.ui.selected_id
        if block_id is None:
            raise NotFoundError("<aucune sélection>")
        return self.store.get(block_id)

    # ── Facettes ───────────────────────────────────────────────────────────

    def content_fields(self) -> List[FieldFacet]:
        block = self.selected
        definition = definition_for(block.block_type)
        facets = []
        for name, info in definition.content_model.model_fields.items():
            kind, choices = _field_kind(info.annotation)
            value = block.content.get(name, definition.default_content.get(name))
            facets.append(FieldFacet(name=name, kind=kind, value=value, choices=choices))
        return facets

    def style_fields(self) -> List[FieldFacet]:
        block = self.selected
        facets = []
        for name in STYLE_FIELDS:
            kind, choices = _field_kind(BlockStyle.model_fields[name].annotation)
            facets.append(FieldFacet(name=name, kind=kind, value=block.style.get(name), choices=choices))
        return facets

    # ── Édition ────────────────────────────────────────────────────────────

    def set_content(self, key: str, value: Any) -> PlacedBlock:
        return self.edit(self.selected.id, content={key: value})

    def set_style(self, key: str, value: Any) -> PlacedBlock:
        return self.edit(self.selected.id, style={key: value})

    def edit(
        self,
        block_id: str,
        content: Optional[Dict[str, Any]] = None,
        style: Optional[Dict[str, Any]] = None,
    ) -> PlacedBlock:
        """
        Valide la forme des champs connus puis applique en une seule mutation.

        Raises:
            NotFoundError:   bloc inconnu
            ValidationError: valeur de forme invalide (store inchangé)
        """
        block = self.store.get(block_id)
        definition = definition_for(block.block_type)
        content_patch = {k: definition.validate_field(k, v) for k, v in (content or {}).items()}
        style_patch = validate_style(style) if style else {}
        updated = self.store.update(block_id, content_patch or None, style_patch or None)
        if updated is None:
            raise NotFoundError(block_id)
        return updated

    # ── Champs liste (navigation, liens, éléments…) ────────────────────────

    def add_list_item(self, key: str, value: Any) -> PlacedBlock:
        items = self._list_value(key)
        items.append(value)
        return self.set_content(key, items)

    def set_list_item(self, key: str, index: int, value: Any) -> PlacedBlock:
        items = self._list_value(key)
        self._check_index(key, items, index)
        items[index] = value
        return self.set_content(key, items)

    def remove_list_item(self, key: str, index: int) -> PlacedBlock:
        items = self._list_value(key)
        self._check_index(key, items, index)
        del items[index]
        return self.set_content(key, items)

    def _list_value(self, key: str) -> List[Any]:
        block = self.selected
        value = block.content.get(key, definition_for(block.block_type).default_content.get(key))
        if not isinstance(value, list):
            raise ValidationError(f"Le champ {key!r} n'est pas une liste")
        return list(value)

    @staticmethod
    def _check_index(key: str, items: List[Any], index: int) -> None:
        if not 0 <= index < len(items):
            raise ValidationError(f"Index {index} hors limites pour {key!r} ({len(items)} élément(s))")
