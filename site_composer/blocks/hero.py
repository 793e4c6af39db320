"""Bloc Hero — titre, sous-titre, CTA et image de fond optionnelle."""
from typing import Any, Dict

from .base import BlockCategory, BlockContent, BlockTypeDefinition


class HeroContent(BlockContent):
    title: str = "Découvrez des expériences uniques"
    subtitle: str = "Explorez des circuits culturels et des aventures authentiques"
    cta_text: str = "Commencer l'exploration"
    background_image: str = ""


def resolve_hero(content: Dict[str, Any]) -> Dict[str, Any]:
    content["has_background"] = bool(content.get("background_image"))
    return content


HERO = BlockTypeDefinition(
    type="hero",
    title="Hero",
    category=BlockCategory.LAYOUT,
    description="Section principale avec appel à l'action",
    content_model=HeroContent,
    default_style={
        "text_align": "center",
        "padding": "4rem 2rem",
        "background_color": "#f8fafc",
        "color": "#1f2937",
    },
    resolver=resolve_hero,
)
