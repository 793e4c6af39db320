"""Bloc Footer — nom de l'entreprise, liens légaux, réseaux sociaux."""
from typing import Any, Dict, List

from .base import BlockCategory, BlockContent, BlockTypeDefinition, str_list


class FooterContent(BlockContent):
    company_name: str = "Votre entreprise"
    links: List[str] = ["Confidentialité", "Conditions d'utilisation", "Contact"]
    social_media: List[str] = ["Facebook", "Twitter", "Instagram"]


def resolve_footer(content: Dict[str, Any]) -> Dict[str, Any]:
    content["links"] = str_list(content.get("links"))
    content["social_media"] = str_list(content.get("social_media"))
    return content


FOOTER = BlockTypeDefinition(
    type="footer",
    title="Footer",
    category=BlockCategory.LAYOUT,
    description="Pied de page avec liens",
    content_model=FooterContent,
    default_style={
        "background_color": "#1f2937",
        "color": "#ffffff",
        "padding": "2rem",
        "text_align": "center",
    },
    resolver=resolve_footer,
)
