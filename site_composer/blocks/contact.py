"""Bloc Contact — formulaire (champs libres + bouton d'envoi)."""
from typing import Any, Dict, List

from .base import BlockCategory, BlockContent, BlockTypeDefinition, str_list

MULTILINE_FIELDS = {"message"}


class ContactContent(BlockContent):
    title: str = "Contactez-nous"
    fields: List[str] = ["Nom", "Email", "Message"]
    submit_text: str = "Envoyer"


def resolve_contact(content: Dict[str, Any]) -> Dict[str, Any]:
    content["fields"] = str_list(content.get("fields"))
    content["inputs"] = [
        {"label": f, "multiline": f.strip().lower() in MULTILINE_FIELDS}
        for f in content["fields"]
    ]
    return content


CONTACT = BlockTypeDefinition(
    type="contact",
    title="Formulaire de contact",
    category=BlockCategory.INTERACTIVE,
    description="Ajouter un formulaire de contact",
    content_model=ContactContent,
    default_style={
        "background_color": "#ffffff",
        "padding": "2rem",
        "border_radius": "8px",
        "border": "1px solid #e5e7eb",
    },
    resolver=resolve_contact,
)
