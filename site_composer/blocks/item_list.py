"""Bloc Liste — puces ou numérotée."""
from typing import Any, Dict, List, Literal

from .base import BlockCategory, BlockContent, BlockTypeDefinition, str_list


class ListContent(BlockContent):
    list_type: Literal["bullet", "numbered"] = "bullet"
    items: List[str] = ["Élément 1", "Élément 2", "Élément 3"]


def resolve_list(content: Dict[str, Any]) -> Dict[str, Any]:
    if content.get("list_type") not in ("bullet", "numbered"):
        content["list_type"] = "bullet"
    content["ordered"] = content["list_type"] == "numbered"
    content["items"] = str_list(content.get("items"))
    return content


LIST = BlockTypeDefinition(
    type="list",
    title="Liste",
    category=BlockCategory.CONTENT,
    description="Créer une liste à puces ou numérotée",
    content_model=ListContent,
    default_style={"font_size": "16px", "color": "#374151", "padding": "1rem"},
    resolver=resolve_list,
)
