"""
Blocs de base du catalogue — définition immuable d'un type de bloc.

Chaque type de bloc fournit :
  - un modèle de contenu Pydantic (validateur + fabrique de valeurs par défaut)
  - un style par défaut (champs génériques, partagés par tous les types)
  - un resolver optionnel utilisé par le renderer de layout
"""
import copy
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError


class BlockCategory(str, Enum):
    LAYOUT      = "Layout"
    CONTENT     = "Content"
    INTERACTIVE = "Interactive"


class BlockContent(BaseModel):
    """Contenu spécifique à un type de bloc. Les clés inconnues sont tolérées."""
    model_config = ConfigDict(extra="allow")


class BlockStyle(BaseModel):
    """Style générique d'un bloc (commun à tous les types)."""
    model_config = ConfigDict(extra="allow")

    text_align:       Optional[Literal["left", "center", "right"]] = None
    font_size:        Optional[str] = None
    font_weight:      Optional[str] = None
    font_style:       Optional[str] = None
    color:            Optional[str] = None
    background_color: Optional[str] = None
    padding:          Optional[str] = None
    margin:           Optional[str] = None
    width:            Optional[str] = None
    height:           Optional[str] = None
    border_radius:    Optional[str] = None
    border:           Optional[str] = None
    shadow:           Optional[str] = None
    gap:              Optional[str] = None


STYLE_FIELDS: List[str] = list(BlockStyle.model_fields)

Resolver = Callable[[Dict[str, Any]], Dict[str, Any]]


def _format_errors(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or '?'}: {err['msg']}"
        for err in exc.errors()
    )


class BlockTypeDefinition(BaseModel):
    """Entrée du catalogue (immuable, possédée par le registry)."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type:          str
    title:         str
    category:      BlockCategory
    description:   str = ""
    content_model: Type[BlockContent]
    default_style: Dict[str, Any] = Field(default_factory=dict)
    resolver:      Optional[Resolver] = None

    @property
    def default_content(self) -> Dict[str, Any]:
        return self.content_model().model_dump()

    @property
    def content_fields(self) -> List[str]:
        return list(self.content_model.model_fields)

    def new_content(self) -> Dict[str, Any]:
        """Copie fraîche du contenu par défaut (jamais partagée entre instances)."""
        return copy.deepcopy(self.default_content)

    def new_style(self) -> Dict[str, Any]:
        return copy.deepcopy(self.default_style)

    def validate_content(self, content: Dict[str, Any]) -> Dict[str, Any]:
        """Valide la forme des champs connus. Lève ValidationError si invalide."""
        try:
            return self.content_model.model_validate(content).model_dump()
        except PydanticValidationError as e:
            raise ValidationError(f"Contenu invalide pour {self.type!r} — {_format_errors(e)}") from e

    def validate_field(self, key: str, value: Any) -> Any:
        """Valide un seul champ de contenu. Clé inconnue du type → acceptée telle quelle."""
        if key not in self.content_model.model_fields:
            return value
        return self.validate_content({key: value})[key]

    def resolve(self, content: Dict[str, Any]) -> Dict[str, Any]:
        """Contenu résolu pour le renderer : défauts + champs connus + resolver."""
        resolved = self.default_content
        resolved.update({k: copy.deepcopy(v) for k, v in content.items() if k in resolved})
        if self.resolver is not None:
            resolved = self.resolver(resolved)
        return resolved


def validate_style(style: Dict[str, Any]) -> Dict[str, Any]:
    """Valide les champs de style connus (les clés inconnues sont conservées)."""
    try:
        BlockStyle.model_validate(style)
    except PydanticValidationError as e:
        raise ValidationError(f"Style invalide — {_format_errors(e)}") from e
    return dict(style)


def resolve_style(style: Dict[str, Any]) -> Dict[str, Any]:
    """Style résolu : champs génériques connus uniquement, valeurs None retirées."""
    return {k: style[k] for k in STYLE_FIELDS if style.get(k) is not None}


# ── Helpers resolvers ──────────────────────────────────────────────────────

def str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v is not None]
