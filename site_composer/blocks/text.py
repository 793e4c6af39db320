"""Bloc Texte — paragraphe libre."""
from .base import BlockCategory, BlockContent, BlockTypeDefinition


class TextContent(BlockContent):
    text: str = "Saisissez votre texte ici..."


TEXT = BlockTypeDefinition(
    type="text",
    title="Texte",
    category=BlockCategory.CONTENT,
    description="Ajouter du texte",
    content_model=TextContent,
    default_style={
        "font_size": "16px",
        "font_weight": "400",
        "color": "#374151",
        "text_align": "left",
        "padding": "1rem",
    },
)
