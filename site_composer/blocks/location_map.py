"""Bloc Carte — lieu + adresse."""
from typing import Any, Dict
from urllib.parse import quote_plus

from .base import BlockCategory, BlockContent, BlockTypeDefinition


class MapContent(BlockContent):
    location: str = "Votre adresse"
    address: str = "1 rue Principale, Ville, Pays"


def resolve_map(content: Dict[str, Any]) -> Dict[str, Any]:
    content["query"] = quote_plus(str(content.get("address") or content.get("location") or ""))
    return content


MAP = BlockTypeDefinition(
    type="map",
    title="Carte",
    category=BlockCategory.INTERACTIVE,
    description="Ajouter une carte de localisation",
    content_model=MapContent,
    default_style={"height": "300px", "border_radius": "8px", "padding": "1rem"},
    resolver=resolve_map,
)
