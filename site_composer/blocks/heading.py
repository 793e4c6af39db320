"""Bloc Titre — h1 / h2 / h3."""
from typing import Any, Dict, Literal

from .base import BlockCategory, BlockContent, BlockTypeDefinition

HEADING_LEVELS = ("h1", "h2", "h3")


class HeadingContent(BlockContent):
    text: str = "Votre titre"
    level: Literal["h1", "h2", "h3"] = "h2"


def resolve_heading(content: Dict[str, Any]) -> Dict[str, Any]:
    if content.get("level") not in HEADING_LEVELS:
        content["level"] = "h2"
    return content


HEADING = BlockTypeDefinition(
    type="heading",
    title="Titre",
    category=BlockCategory.CONTENT,
    description="Ajouter un titre",
    content_model=HeadingContent,
    default_style={
        "font_size": "2rem",
        "font_weight": "700",
        "color": "#1f2937",
        "text_align": "left",
        "padding": "1rem",
    },
    resolver=resolve_heading,
)
