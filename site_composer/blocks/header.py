"""Bloc Header — logo + navigation + bouton d'appel à l'action."""
from typing import Any, Dict, List

from .base import BlockCategory, BlockContent, BlockTypeDefinition, str_list


class HeaderContent(BlockContent):
    logo: str = "Votre logo"
    navigation: List[str] = ["Accueil", "À propos", "Circuits", "Contact"]
    cta: str = "Réserver"


def resolve_header(content: Dict[str, Any]) -> Dict[str, Any]:
    content["navigation"] = str_list(content.get("navigation"))
    return content


HEADER = BlockTypeDefinition(
    type="header",
    title="Header",
    category=BlockCategory.LAYOUT,
    description="En-tête du site avec navigation",
    content_model=HeaderContent,
    default_style={
        "background_color": "#ffffff",
        "text_align": "center",
        "padding": "1rem",
        "border": "1px solid #e5e7eb",
    },
    resolver=resolve_header,
)
