"""
Renderer de layout — projection pure des blocs en description de mise en page.

Sortie consommée à l'identique par le canvas d'édition et par l'aperçu :
une liste ordonnée de (block_type, contenu résolu, style résolu).
"""
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel, Field

from ..blocks import definition_for, resolve_style
from ..models import PlacedBlock


class LayoutItem(BaseModel):
    block_id:   str
    block_type: str
    position:   int
    content:    Dict[str, Any] = Field(default_factory=dict)
    style:      Dict[str, Any] = Field(default_factory=dict)


def render_block(block: PlacedBlock) -> LayoutItem:
    definition = definition_for(block.block_type)
    return LayoutItem(
        block_id=block.id,
        block_type=block.block_type,
        position=block.position,
        content=definition.resolve(block.content),
        style=resolve_style(block.style),
    )


def render_layout(blocks: Iterable[PlacedBlock]) -> List[LayoutItem]:
    """Rend la séquence triée par position."""
    return [render_block(b) for b in sorted(blocks, key=lambda b: b.position)]
