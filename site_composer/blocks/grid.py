"""Bloc Grid — grille de N colonnes (titre + contenu par cellule)."""
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from .base import BlockCategory, BlockContent, BlockTypeDefinition

MAX_COLUMNS = 6


class GridItem(BaseModel):
    title: str = ""
    content: str = ""


class GridContent(BlockContent):
    columns: int = Field(default=3, ge=1, le=MAX_COLUMNS)
    items: List[GridItem] = [
        GridItem(title="Élément 1", content="Contenu 1"),
        GridItem(title="Élément 2", content="Contenu 2"),
        GridItem(title="Élément 3", content="Contenu 3"),
    ]


def resolve_grid(content: Dict[str, Any]) -> Dict[str, Any]:
    items = content.get("items") if isinstance(content.get("items"), list) else []
    content["items"] = [
        {"title": str(it.get("title", "")), "content": str(it.get("content", ""))}
        for it in items if isinstance(it, dict)
    ]
    try:
        columns = int(content.get("columns") or 1)
    except (TypeError, ValueError):
        columns = 1
    content["columns"] = max(1, min(columns, MAX_COLUMNS))
    return content


GRID = BlockTypeDefinition(
    type="grid",
    title="Grille",
    category=BlockCategory.LAYOUT,
    description="Mise en page en grille",
    content_model=GridContent,
    default_style={"gap": "1rem", "padding": "1rem"},
    resolver=resolve_grid,
)
