"""
Catalogue de blocs — exports publics + registry.
"""
from .base import (
    BlockCategory, BlockContent, BlockStyle, BlockTypeDefinition,
    STYLE_FIELDS, validate_style, resolve_style,
)
from .catalog import (
    BLOCK_REGISTRY, CATEGORIES,
    categories, definition_for, is_known_type, list_definitions, catalog_payload,
)

__all__ = [
    "BlockCategory", "BlockContent", "BlockStyle", "BlockTypeDefinition",
    "STYLE_FIELDS", "validate_style", "resolve_style",
    "BLOCK_REGISTRY", "CATEGORIES",
    "categories", "definition_for", "is_known_type", "list_definitions", "catalog_payload",
]
