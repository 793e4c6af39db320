"""
site_composer — moteur de composition de pages par blocs.

Usage:
    >>> from site_composer import EditorSession, MemoryLocalCache, SqlPersistenceStore
    >>> session = await EditorSession.open("owner-1", SqlPersistenceStore(), MemoryLocalCache())
    >>> session.store.add("hero")
    >>> session.layout()
"""
from .blocks import BLOCK_REGISTRY, BlockCategory, BlockTypeDefinition, definition_for, catalog_payload
from .core import BlockStore, DragSource, DropTarget, HistoryManager, PlacementEngine, SettingsEditor
from .errors import ComposerError, NotFoundError, PersistenceError, UnknownBlockTypeError, ValidationError
from .models import PlacedBlock, SaveStatus, SiteRecord
from .persistence import AutosaveController, Debouncer, FileLocalCache, MemoryLocalCache, SqlPersistenceStore
from .publish import PublishResult, derive_slug
from .renderer import LayoutItem, render_layout
from .session import EditorSession, UserSession

__version__ = "1.0.0"

__all__ = [
    "BLOCK_REGISTRY", "BlockCategory", "BlockTypeDefinition", "definition_for", "catalog_payload",
    "BlockStore", "DragSource", "DropTarget", "HistoryManager", "PlacementEngine", "SettingsEditor",
    "ComposerError", "NotFoundError", "PersistenceError", "UnknownBlockTypeError", "ValidationError",
    "PlacedBlock", "SaveStatus", "SiteRecord",
    "AutosaveController", "Debouncer", "FileLocalCache", "MemoryLocalCache", "SqlPersistenceStore",
    "PublishResult", "derive_slug",
    "LayoutItem", "render_layout",
    "EditorSession", "UserSession",
]
