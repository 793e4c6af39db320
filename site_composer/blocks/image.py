"""Bloc Image — source, texte alternatif, légende."""
from typing import Any, Dict

from .base import BlockCategory, BlockContent, BlockTypeDefinition

PLACEHOLDER_SRC = "https://via.placeholder.com/400x300?text=Add+Image"


class ImageContent(BlockContent):
    src: str = ""
    alt: str = "Description de l'image"
    caption: str = ""


def resolve_image(content: Dict[str, Any]) -> Dict[str, Any]:
    content["is_placeholder"] = not content.get("src")
    if content["is_placeholder"]:
        content["src"] = PLACEHOLDER_SRC
    return content


IMAGE = BlockTypeDefinition(
    type="image",
    title="Image",
    category=BlockCategory.CONTENT,
    description="Ajouter une image",
    content_model=ImageContent,
    default_style={
        "width": "100%",
        "height": "auto",
        "border_radius": "8px",
        "padding": "1rem",
    },
    resolver=resolve_image,
)
