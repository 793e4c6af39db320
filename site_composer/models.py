"""
Data models — PlacedBlock, SiteRecord, statut de sauvegarde
SQLAlchemy (SQLite) + Pydantic v2 + Enums + transitions statuts
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import sqlalchemy as sa
from pydantic import BaseModel, Field
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .config import PLACEHOLDER_COMPANY_NAME, PLACEHOLDER_TAGLINE, SCHEMA_VERSION


def utcnow() -> datetime:
    """UTC naïf — SQLite ne conserve pas le fuseau."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ── ENUMS ──────────────────────────────────────────────────────────────

class SaveStatus(str, Enum):
    SAVED  = "saved"
    SAVING = "saving"
    ERROR  = "error"


_TRANSITIONS: Dict[str, List[str]] = {
    "saved":  ["saving"],
    "saving": ["saved", "error"],
    "error":  ["saving"],
}


def can_transition(current: str, target: str) -> bool:
    return target in _TRANSITIONS.get(current, [])


# ── ORM ────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


class SiteRecordDB(Base):
    __tablename__ = "site_records"
    owner_id:       Mapped[str]           = mapped_column(sa.String, primary_key=True)
    blocks:         Mapped[str]           = mapped_column(sa.Text, default="[]")
    company_name:   Mapped[str]           = mapped_column(sa.String, default=PLACEHOLDER_COMPANY_NAME)
    tagline:        Mapped[str]           = mapped_column(sa.String, default=PLACEHOLDER_TAGLINE)
    published:      Mapped[bool]          = mapped_column(sa.Boolean, default=False)
    published_slug: Mapped[Optional[str]] = mapped_column(sa.String, nullable=True, index=True)
    last_modified:  Mapped[datetime]      = mapped_column(sa.DateTime, default=utcnow)
    schema_version: Mapped[int]           = mapped_column(sa.Integer, default=SCHEMA_VERSION)


# ── PYDANTIC SCHEMAS ────────────────────────────────────────────────────

class PlacedBlock(BaseModel):
    """Instance d'un type de bloc posée sur le canvas."""
    id:         str
    block_type: str
    content:    Dict[str, Any] = Field(default_factory=dict)
    style:      Dict[str, Any] = Field(default_factory=dict)
    position:   int            = Field(default=0, ge=0)


class SiteFields(BaseModel):
    """Champs du site hors blocs (identification + publication)."""
    company_name:   str           = PLACEHOLDER_COMPANY_NAME
    tagline:        str           = PLACEHOLDER_TAGLINE
    published:      bool          = False
    published_slug: Optional[str] = None


class SiteRecord(SiteFields):
    """Enregistrement persistant d'un site (source de vérité : store distant)."""
    owner_id:       str
    blocks:         List[PlacedBlock] = Field(default_factory=list)
    last_modified:  datetime          = Field(default_factory=utcnow)
    schema_version: int               = SCHEMA_VERSION


class CachedRecord(BaseModel):
    """Entrée du cache local : dernier enregistrement synchronisé ou en attente."""
    record:  SiteRecord
    pending: bool = False


# ── API INPUTS ──────────────────────────────────────────────────────────

class SessionOpenInput(BaseModel):
    owner_id: str


class AddBlockInput(BaseModel):
    block_type: str
    position:   Optional[int] = None


class MoveBlockInput(BaseModel):
    position: int


class UpdateBlockInput(BaseModel):
    content: Optional[Dict[str, Any]] = None
    style:   Optional[Dict[str, Any]] = None


class DropInput(BaseModel):
    """Drag & drop : source (type du catalogue OU id existant) + cible."""
    block_type: Optional[str] = None
    block_id:   Optional[str] = None
    target:     Optional[str] = Field(default=None, description="before | after | end (absent = hors zone)")
    target_id:  Optional[str] = None


class SiteFieldsInput(BaseModel):
    company_name: Optional[str] = None
    tagline:      Optional[str] = None


class ImportInput(BaseModel):
    blocks: List[Dict[str, Any]]
