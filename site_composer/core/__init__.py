"""Core de l'éditeur : store, placement, édition, historique, événements."""
from .events import Event, EventBus, Topic
from .store import BlockStore, EditorUIState
from .placement import DragSource, DropKind, DropTarget, PlacementEngine
from .settings_editor import FieldFacet, SettingsEditor
from .history import HistoryManager, HistorySnapshot

__all__ = [
    "Event", "EventBus", "Topic",
    "BlockStore", "EditorUIState",
    "DragSource", "DropKind", "DropTarget", "PlacementEngine",
    "FieldFacet", "SettingsEditor",
    "HistoryManager", "HistorySnapshot",
]
