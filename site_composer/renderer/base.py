"""
Protocol Renderer — interface pluggable (layout en mémoire, JSON…).
"""
from typing import Iterable, List, Protocol, runtime_checkable

from ..models import PlacedBlock
from .layout import LayoutItem, render_block, render_layout


@runtime_checkable
class Renderer(Protocol):
    def render_layout(self, blocks: Iterable[PlacedBlock]) -> List[LayoutItem]: ...
    def render_block(self, block: PlacedBlock) -> LayoutItem: ...


class LayoutRenderer:
    """Renderer par défaut : délègue aux fonctions de renderer.layout."""

    def render_layout(self, blocks: Iterable[PlacedBlock]) -> List[LayoutItem]:
        return render_layout(blocks)

    def render_block(self, block: PlacedBlock) -> LayoutItem:
        return render_block(block)
