"""Bloc Réservation — widget listant les circuits réservables."""
from typing import Any, Dict, List

from .base import BlockCategory, BlockContent, BlockTypeDefinition, str_list


class BookingContent(BlockContent):
    title: str = "Réservez votre expérience"
    tours: List[str] = ["Circuit 1", "Circuit 2", "Circuit 3"]


def resolve_booking(content: Dict[str, Any]) -> Dict[str, Any]:
    content["tours"] = str_list(content.get("tours"))
    return content


BOOKING = BlockTypeDefinition(
    type="booking",
    title="Widget de réservation",
    category=BlockCategory.INTERACTIVE,
    description="Ajouter un widget de réservation",
    content_model=BookingContent,
    default_style={
        "background_color": "#ffffff",
        "padding": "2rem",
        "border_radius": "8px",
        "border": "1px solid #e5e7eb",
    },
    resolver=resolve_booking,
)
