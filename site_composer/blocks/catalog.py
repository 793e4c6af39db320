"""
Catalogue des blocs — registry block_type → BlockTypeDefinition.

Ajouter un type de bloc = ajouter une entrée ici (modèle de contenu,
style par défaut, resolver). Aucune autre branche à modifier.
"""
from typing import Any, Dict, List, Optional

from ..errors import UnknownBlockTypeError
from .base import BlockCategory, BlockStyle, BlockTypeDefinition
from .header import HEADER
from .footer import FOOTER
from .hero import HERO
from .grid import GRID
from .text import TEXT
from .heading import HEADING
from .image import IMAGE
from .quote import QUOTE
from .item_list import LIST
from .contact import CONTACT
from .booking import BOOKING
from .location_map import MAP

BLOCK_REGISTRY: Dict[str, BlockTypeDefinition] = {
    d.type: d for d in (
        HEADER, FOOTER, HERO, GRID,
        TEXT, HEADING, IMAGE, QUOTE, LIST,
        CONTACT, BOOKING, MAP,
    )
}

CATEGORIES: List[BlockCategory] = [
    BlockCategory.LAYOUT,
    BlockCategory.CONTENT,
    BlockCategory.INTERACTIVE,
]


def definition_for(block_type: str) -> BlockTypeDefinition:
    """Retourne la définition d'un type de bloc. Lève UnknownBlockTypeError si absent."""
    definition = BLOCK_REGISTRY.get(block_type)
    if definition is None:
        raise UnknownBlockTypeError(block_type)
    return definition


def is_known_type(block_type: str) -> bool:
    return block_type in BLOCK_REGISTRY


def categories() -> List[BlockCategory]:
    return list(CATEGORIES)


def list_definitions(category: Optional[BlockCategory] = None) -> List[BlockTypeDefinition]:
    return [d for d in BLOCK_REGISTRY.values() if category is None or d.category == category]


def catalog_payload() -> Dict[str, Any]:
    """Catalogue sérialisable (palette de l'éditeur) avec les JSON schemas des contenus."""
    return {
        "categories": [
            {
                "name": cat.value,
                "blocks": [
                    {
                        "type":            d.type,
                        "title":           d.title,
                        "description":     d.description,
                        "default_content": d.default_content,
                        "default_style":   d.new_style(),
                        "schema":          d.content_model.model_json_schema(),
                    }
                    for d in list_definitions(cat)
                ],
            }
            for cat in categories()
        ],
        "style_schema": BlockStyle.model_json_schema(),
    }
