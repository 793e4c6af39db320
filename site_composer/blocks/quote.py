"""Bloc Citation — témoignage client."""
from .base import BlockCategory, BlockContent, BlockTypeDefinition


class QuoteContent(BlockContent):
    text: str = "Une expérience incroyable !"
    author: str = "Un client ravi"
    role: str = "Voyageur"


QUOTE = BlockTypeDefinition(
    type="quote",
    title="Citation",
    category=BlockCategory.CONTENT,
    description="Ajouter un témoignage ou une citation",
    content_model=QuoteContent,
    default_style={
        "font_size": "1.25rem",
        "font_style": "italic",
        "color": "#6b7280",
        "text_align": "center",
        "padding": "2rem",
        "background_color": "#f9fafb",
        "border_radius": "8px",
    },
)
